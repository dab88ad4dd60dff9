"""Tools shipped with callflow and the default registry built from them."""

from functools import partial

import httpx

from callflow.config import Settings
from callflow.exceptions import ToolRegistryError
from callflow.functions.book_service import (
    ANNOUNCEMENT,
    BOOK_SERVICE_PARAMETERS,
    book_service,
)
from callflow.tools import Tool, ToolRegistry


def book_service_tool(
    webhook_url: str, timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Tool:
    return Tool(
        partial(book_service, webhook_url=webhook_url, timeout=timeout, transport=transport),
        name="bookService",
        description="Book a car service appointment for the customer",
        parameters=BOOK_SERVICE_PARAMETERS,
        say=ANNOUNCEMENT,
        requires_caller=True,
    )


def default_registry(settings: Settings) -> ToolRegistry:
    """Build the registry the booking assistant runs with."""
    if not settings.booking_webhook_url:
        raise ToolRegistryError("BOOKING_WEBHOOK_URL is not configured")
    return ToolRegistry([
        book_service_tool(
            settings.booking_webhook_url,
            timeout=settings.booking_webhook_timeout,
        ),
    ])


__all__ = ["book_service", "book_service_tool", "default_registry"]
