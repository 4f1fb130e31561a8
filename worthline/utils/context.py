# worthline/utils/context.py
"""
Request context management.

Holds the correlation ID of the request being served so log records
emitted anywhere below the HTTP layer (valuation, change-point
collection, market data lookups) can be tied back to one request.

Uses Python's contextvars, which propagate through async/await and are
isolated per request by the ASGI server.

Usage:
    from worthline.utils.context import get_correlation_id, set_correlation_id

    set_correlation_id("abc-123")
    get_correlation_id()  # "abc-123"
"""

from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Return the current request's correlation ID, or None outside a request."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """
    Set the correlation ID for the current request.

    Called by CorrelationIdMiddleware at the start of each request.
    """
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation ID at the end of a request."""
    _correlation_id_var.set(None)
