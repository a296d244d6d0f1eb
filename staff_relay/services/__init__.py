# Services layer for directory, rendering and delivery logic
from staff_relay.services.directory import StaffDirectory, StaffRecord, build_directory
from staff_relay.services.dispatcher import Dispatcher
from staff_relay.services.email_provider import (
    EmailMessage,
    MockEmailProvider,
    ResendProvider,
    SendGridProvider,
    SendResult,
    get_email_provider,
)

__all__ = [
    "StaffDirectory",
    "StaffRecord",
    "build_directory",
    "Dispatcher",
    "EmailMessage",
    "MockEmailProvider",
    "ResendProvider",
    "SendGridProvider",
    "SendResult",
    "get_email_provider",
]
