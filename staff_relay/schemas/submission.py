"""
Contact submission schema

Single source of truth for submission bounds. The send endpoint validates
against SubmissionRequest; the form page publishes FORM_CONSTRAINTS to the
browser for early feedback only.

Validation rules:
- staffId: 8-128 characters
- name: 1-120 characters
- email: valid email format, at most 254 characters
- subject: optional, at most 200 characters
- message: 1-5000 characters

Values are never trimmed or rewritten; escaping happens at render time.
"""
from typing import Any, Dict, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from staff_relay.core.exceptions import ValidationError

STAFF_ID_MIN_LENGTH = 8
STAFF_ID_MAX_LENGTH = 128
NAME_MAX_LENGTH = 120
EMAIL_MAX_LENGTH = 254
SUBJECT_MAX_LENGTH = 200
MESSAGE_MAX_LENGTH = 5000

FIELD_LABELS = {
    "staffId": "Staff ID",
    "name": "Name",
    "email": "Email",
    "subject": "Subject",
    "message": "Message",
}

INVALID_EMAIL_MESSAGE = "Please enter a valid email"

# Published to the form page as a data attribute
FORM_CONSTRAINTS: Dict[str, Dict[str, Any]] = {
    "staffId": {
        "required": True,
        "minLength": STAFF_ID_MIN_LENGTH,
        "maxLength": STAFF_ID_MAX_LENGTH,
    },
    "name": {"required": True, "minLength": 1, "maxLength": NAME_MAX_LENGTH},
    "email": {"required": True, "minLength": 1, "maxLength": EMAIL_MAX_LENGTH, "format": "email"},
    "subject": {"required": False, "maxLength": SUBJECT_MAX_LENGTH},
    "message": {"required": True, "minLength": 1, "maxLength": MESSAGE_MAX_LENGTH},
}


def is_valid_email(address: str) -> bool:
    """Syntax-only address check; no DNS lookups, ASCII local parts only."""
    try:
        validate_email(address, check_deliverability=False, allow_smtputf8=False)
    except EmailNotValidError:
        return False
    return True


class SubmissionRequest(BaseModel):
    """
    Contact form submission.

    Field names follow the wire format (staffId) through aliases. Strict mode
    rejects non-string values instead of coercing them.
    """
    model_config = ConfigDict(
        strict=True,
        frozen=True,
        extra="ignore",
    )

    staff_id: str = Field(
        ...,
        alias="staffId",
        min_length=STAFF_ID_MIN_LENGTH,
        max_length=STAFF_ID_MAX_LENGTH,
        description="Public staff identifier from the form URL",
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=NAME_MAX_LENGTH,
        description="Sender's name",
        examples=["Ann"],
    )
    email: str = Field(
        ...,
        max_length=EMAIL_MAX_LENGTH,
        description="Sender's email address, used as reply-to",
        examples=["ann@example.com"],
    )
    subject: Optional[str] = Field(
        default=None,
        max_length=SUBJECT_MAX_LENGTH,
        description="Optional subject line",
    )
    message: str = Field(
        ...,
        min_length=1,
        max_length=MESSAGE_MAX_LENGTH,
        description="Message content",
    )

    @field_validator("subject", mode="before")
    @classmethod
    def reject_null_subject(cls, v):
        """Subject may be omitted, but not sent as null."""
        if v is None:
            raise PydanticCustomError("string_type", "Input should be a valid string")
        return v

    @field_validator("email")
    @classmethod
    def check_email_syntax(cls, v: str) -> str:
        """Reject malformed addresses but keep the value exactly as sent."""
        if not is_valid_email(v):
            raise ValueError(INVALID_EMAIL_MESSAGE)
        return v


def _describe(field: str, error: Dict[str, Any]) -> str:
    label = FIELD_LABELS.get(field, field)
    error_type = error.get("type")
    ctx = error.get("ctx") or {}

    if error_type == "missing":
        return f"{label} is required"
    if error_type == "string_too_short":
        if ctx.get("min_length", 1) <= 1:
            return f"{label} is required"
        return f"{label} must be at least {ctx['min_length']} characters"
    if error_type == "string_too_long":
        return f"{label} must be at most {ctx.get('max_length')} characters"
    if error_type == "string_type":
        return f"{label} must be a string"
    if field == "email":
        return INVALID_EMAIL_MESSAGE
    return f"{label} is invalid"


def validate_submission(payload: Any) -> SubmissionRequest:
    """
    Validate an untyped JSON payload.

    Args:
        payload: Decoded request body, any JSON value

    Returns:
        SubmissionRequest with values exactly as received

    Raises:
        ValidationError: with one message per offending field
    """
    if not isinstance(payload, dict):
        raise ValidationError({"body": "Expected a JSON object"})

    try:
        return SubmissionRequest.model_validate(payload)
    except PydanticValidationError as exc:
        errors: Dict[str, str] = {}
        for error in exc.errors():
            loc = error.get("loc") or ("body",)
            field = str(loc[0])
            # First problem per field is enough for the form
            errors.setdefault(field, _describe(field, error))
        raise ValidationError(errors) from None
