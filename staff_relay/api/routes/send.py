"""
Contact Send API Route

Public endpoint relaying a contact form submission to a staff member:
- Rate limiting before the body is read, so unauthenticated callers
  cannot use validation as a free oracle
- Body read as untyped JSON and validated in one place by the dispatcher
- Fixed `{ok, error}` responses; staff addresses never leave the server
"""
import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from staff_relay.api.deps import get_dispatcher
from staff_relay.core.exceptions import InvalidInput
from staff_relay.core.rate_limit import get_send_limit
from staff_relay.services.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/send",
    summary="Relay a contact message to a staff member",
    description="""
Send a message to the staff member identified by `staffId`.

**Body**: `{staffId, name, email, subject?, message}`

**Response Codes**:
- `200`: `{ok: true}`
- `400`: `{ok: false, error}` for invalid input or an unknown staff ID
- `429`: Rate limit exceeded
- `500`: `{ok: false, error}` when email is misconfigured or delivery failed
    """,
    responses={
        400: {
            "description": "Invalid input or unknown staff",
            "content": {
                "application/json": {
                    "example": {"ok": False, "error": "Invalid staff ID"}
                }
            },
        },
        500: {
            "description": "Misconfiguration or delivery failure",
            "content": {
                "application/json": {
                    "example": {"ok": False, "error": "Failed to send email"}
                }
            },
        },
    },
)
@get_send_limit()
async def send_contact_message(
    request: Request,
    dispatcher: Dispatcher = Depends(get_dispatcher),
) -> JSONResponse:
    """
    Handle a contact form submission.

    DispatchError subclasses propagate to the app's dispatch error handler,
    which maps them to their status code and public message.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.info("Contact submission rejected: body is not valid JSON")
        raise InvalidInput({"body": "Request body must be valid JSON"}) from None

    await dispatcher.handle_submission(payload)
    return JSONResponse(status_code=200, content={"ok": True})
