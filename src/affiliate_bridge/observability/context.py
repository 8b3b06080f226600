"""Store context propagation using contextvars."""

from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar

# Nuvemshop store currently being processed
_current_store_id: ContextVar[str | None] = ContextVar("current_store_id", default=None)


def get_current_store_id() -> str | None:
    """Get the store ID bound to the current request or task, if any."""
    return _current_store_id.get()


@contextmanager
def store_context(store_id: str | int | None) -> Generator[str | None, None, None]:
    """
    Bind a store ID for log correlation.

    Usage:
        with store_context(event.store_id):
            logger.info("Processing order")  # log line carries store_id
    """
    value = str(store_id) if store_id is not None else None
    token = _current_store_id.set(value)
    try:
        yield value
    finally:
        _current_store_id.reset(token)
