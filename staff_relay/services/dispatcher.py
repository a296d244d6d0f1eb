"""
Contact Dispatcher

Validates a submission, resolves the staff member, renders the email and
hands it to the provider. Holds no per-request state; the directory it reads
is immutable, so concurrent submissions need no locking.

Logging is limited to the staff identifier and the outcome. The staff
address, the visitor's address and the message body never reach the logs.
"""
import logging
from typing import Any

from staff_relay.core.error_handler import sanitize_error_message
from staff_relay.core.exceptions import (
    ConfigurationError,
    DeliveryFailed,
    InvalidInput,
    UnknownStaff,
    ValidationError,
)
from staff_relay.schemas.submission import validate_submission
from staff_relay.services.directory import StaffDirectory
from staff_relay.services.email_provider import EmailProvider, SendResult
from staff_relay.services.email_rendering import compose_message

logger = logging.getLogger(__name__)


class Dispatcher:
    """Relay one contact submission to one staff member."""

    def __init__(self, directory: StaffDirectory, provider: EmailProvider, sender: str):
        self.directory = directory
        self.provider = provider
        self.sender = sender

    async def handle_submission(self, payload: Any) -> SendResult:
        """
        Handle a decoded request body.

        Raises:
            InvalidInput: payload failed validation; nothing was sent
            UnknownStaff: staff id is not in the directory
            ConfigurationError: provider key or sender address missing
            DeliveryFailed: provider did not accept the message
        """
        try:
            submission = validate_submission(payload)
        except ValidationError as exc:
            logger.info(f"Contact submission rejected: invalid fields={sorted(exc.errors)}")
            raise InvalidInput(exc.errors) from None

        record = self.directory.get(submission.staff_id)
        if record is None:
            # Same outcome whether the id is malformed or merely absent
            logger.info("Contact submission rejected: unknown staff id")
            raise UnknownStaff()

        if not self.sender or not self.provider.is_configured:
            logger.error(f"Email provider {self.provider.name} is not configured")
            raise ConfigurationError()

        message = compose_message(submission, record)

        try:
            result = await self.provider.send(message, self.sender)
        except Exception as e:
            logger.error(
                f"Email send failed: staff_id={submission.staff_id}, success=False, "
                f"error={type(e).__name__}"
            )
            raise DeliveryFailed() from e

        if not result.success:
            logger.error(
                f"Email send failed: staff_id={submission.staff_id}, success=False, "
                f"error={sanitize_error_message(result.error)}"
            )
            raise DeliveryFailed()

        logger.info(f"Email sent: staff_id={submission.staff_id}, success=True")
        return result
