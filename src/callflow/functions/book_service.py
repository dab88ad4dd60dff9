import logging

import httpx

logger = logging.getLogger(__name__)

ANNOUNCEMENT = "Let me check the availability and book that service time for you."
FAILURE_MESSAGE = (
    "Sorry, there was an error processing your booking request. "
    "Please try again or call during business hours."
)

BOOK_SERVICE_PARAMETERS = {
    "type": "object",
    "properties": {
        "booking_time": {
            "type": "string",
            "description": "The requested date and time for the service booking",
        },
    },
    "required": ["booking_time"],
}


async def book_service(
    booking_time: str,
    callerNumber: str | None = None,
    *,
    webhook_url: str,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    """Book a car service appointment for the customer.

    Posts the caller's number and requested time to the booking webhook,
    which answers ``{"Status": ..., "Booking": ...}``. Failures are
    reported in the returned outcome rather than raised.

    Args:
        booking_time: Requested time, ``YYYY-MM-DD HH:mm``.
        callerNumber: Caller's phone number, injected by the orchestrator.
        webhook_url: Booking endpoint.
        timeout: Seconds to wait for the webhook.
        transport: Optional httpx transport, for tests.
    """
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.post(
                webhook_url,
                json={"number": callerNumber, "message": booking_time},
            )
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Error booking service: {e}")
        return {"status": "failed", "message": FAILURE_MESSAGE}

    if not isinstance(data, dict):
        logger.error(f"Unexpected booking webhook body: {data!r}")
        return {"status": "failed", "message": FAILURE_MESSAGE}

    status = data.get("Status", "unknown")
    booking_message = data.get("Booking", "Unable to process booking request")
    if status == "Successful":
        return {
            "status": "success",
            "message": f"Successfully booked your service for {booking_time}. {booking_message}",
        }
    return {
        "status": "failed",
        "message": f"Booking unsuccessful: {booking_message}",
    }
