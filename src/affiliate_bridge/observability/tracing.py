"""Tracing utilities and decorators."""

import functools
import inspect
from typing import Any, Callable, TypeVar

from opentelemetry import trace
from opentelemetry.trace import StatusCode

F = TypeVar("F", bound=Callable[..., Any])


def get_tracer(name: str = "affiliate_bridge") -> trace.Tracer:
    """Get an OpenTelemetry tracer (a no-op tracer until a provider is installed)."""
    return trace.get_tracer(name)


def traced(
    name: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Callable[[F], F]:
    """
    Decorator to trace a function.

    Works with both sync and async functions. Exceptions are recorded on the
    span and re-raised.

    Example:
        @traced(name="order_sync.handle", attributes={"component": "order_sync"})
        async def handle(self, event):
            ...
    """
    def decorator(func: F) -> F:
        span_name = name or func.__qualname__
        tracer = get_tracer(func.__module__)

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            with tracer.start_as_current_span(span_name) as span:
                if attributes:
                    span.set_attributes(attributes)
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    span.record_exception(e)
                    span.set_status(StatusCode.ERROR)
                    raise

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            with tracer.start_as_current_span(span_name) as span:
                if attributes:
                    span.set_attributes(attributes)
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    span.record_exception(e)
                    span.set_status(StatusCode.ERROR)
                    raise

        if inspect.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator


def add_span_attribute(key: str, value: Any) -> None:
    """Add an attribute to the current span."""
    span = trace.get_current_span()
    if span:
        span.set_attribute(key, value)


def get_current_trace_id() -> str | None:
    """
    Get the current trace ID.

    Returns:
        Trace ID as hex string, or None if not in a trace.
    """
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        return format(ctx.trace_id, "032x")
    return None


def get_current_span_id() -> str | None:
    """
    Get the current span ID.

    Returns:
        Span ID as hex string, or None if not in a span.
    """
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        return format(ctx.span_id, "016x")
    return None
