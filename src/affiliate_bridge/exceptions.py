"""Domain exceptions for the affiliate bridge.

These map to consistent HTTP responses when handled by the global exception handler.
"""


class BridgeError(Exception):
    """Base exception for bridge domain errors."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 500,
        detail: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail or message


class AuthenticationError(BridgeError):
    """Raised when a webhook signature or shared secret does not match."""

    def __init__(self, message: str = "unauthorized", detail: str | None = None) -> None:
        super().__init__(message, status_code=401, detail=detail or message)


class MalformedInputError(BridgeError):
    """Raised when request input cannot be parsed or is incomplete."""

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message, status_code=400, detail=detail or message)


class RemoteCallError(BridgeError):
    """Raised when a call to Nuvemshop or GoAffPro fails."""

    def __init__(
        self,
        operation: str,
        message: str,
        *,
        response_body: str | None = None,
        remote_status: int | None = None,
    ) -> None:
        super().__init__(f"{operation} failed: {message}", status_code=502)
        self.operation = operation
        self.response_body = response_body
        self.remote_status = remote_status


class MissingPrerequisiteError(BridgeError):
    """Raised when no connected store or credential is available."""

    def __init__(self, message: str = "no store/token available", detail: str | None = None) -> None:
        super().__init__(message, status_code=500, detail=detail or message)


class BridgeNotReadyError(BridgeError):
    """Raised when the bridge or one of its components is not initialized."""

    def __init__(self, message: str = "Bridge not initialized", detail: str | None = None) -> None:
        super().__init__(message, status_code=503, detail=detail or message)
