"""
Staff Contact Relay Exception Hierarchy

All exceptions include code, message, and details for logging. Messages and
details must never carry a staff address, a submission body, or the HMAC
secret.

Exception Hierarchy:
    RelayError
    ├── DirectoryError              (build time, fatal)
    │   ├── DuplicateIdentifierError
    │   ├── InvalidEmailError
    │   └── InvalidEntryError
    ├── ValidationError             (per-field submission errors)
    └── DispatchError               (request time, mapped to HTTP)
        ├── InvalidInput
        ├── UnknownStaff
        ├── ConfigurationError
        └── DeliveryFailed
"""
from typing import Optional, Dict, Any

# Submission fields whose messages are not echoed back to the client
PRIVATE_FIELDS = frozenset({"staffId"})


class RelayError(Exception):
    """
    Base exception for all relay errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging
    """

    default_code: str = "RELAY_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# DIRECTORY BUILD ERRORS
# =============================================================================

class DirectoryError(RelayError):
    """Base exception for staff directory generation errors."""
    default_code = "DIRECTORY_ERROR"


class DuplicateIdentifierError(DirectoryError):
    """Two entries derive the same identifier; one would misroute mail."""
    default_code = "DUPLICATE_IDENTIFIER"

    def __init__(self, identifier: str, first_index: int, second_index: int):
        self.identifier = identifier
        self.first_index = first_index
        self.second_index = second_index
        super().__init__(
            f"Entries {first_index} and {second_index} derive the same identifier {identifier}",
            details={
                "identifier": identifier,
                "entries": [first_index, second_index],
            },
        )


class InvalidEmailError(DirectoryError):
    """Entry email is not a syntactically plausible address."""
    default_code = "INVALID_EMAIL"

    def __init__(self, index: int, reason: str = "not a valid email address"):
        self.index = index
        super().__init__(
            f"Entry {index} has an invalid email: {reason}",
            details={"entry": index},
        )


class InvalidEntryError(DirectoryError):
    """Entry is not an object or has no usable name."""
    default_code = "INVALID_ENTRY"

    def __init__(self, index: int, reason: str):
        self.index = index
        super().__init__(f"Entry {index} is invalid: {reason}", details={"entry": index})


# =============================================================================
# SUBMISSION VALIDATION
# =============================================================================

class ValidationError(RelayError):
    """Submission failed shape or bounds checks."""
    default_code = "VALIDATION_ERROR"

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__(
            "Invalid request data",
            details={"fields": sorted(self.errors)},
        )


# =============================================================================
# DISPATCH ERRORS
# =============================================================================

class DispatchError(RelayError):
    """
    Base exception for submission dispatch failures.

    Subclasses declare the HTTP status and the public message returned to the
    client; the message is identical for every instance of a class.
    """

    default_code = "DISPATCH_ERROR"
    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(self.public_message, details=details)

    def to_response(self) -> Dict[str, Any]:
        """Body for the JSON error response."""
        return {"ok": False, "error": self.public_message}


class InvalidInput(DispatchError):
    default_code = "INVALID_INPUT"
    status_code = 400
    public_message = "Invalid request data"

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__(details={"fields": sorted(self.errors)})

    def to_response(self) -> Dict[str, Any]:
        body = super().to_response()
        # Nothing about what is wrong with a staff id reaches the client
        fields = {k: v for k, v in self.errors.items() if k not in PRIVATE_FIELDS}
        if fields:
            body["fields"] = fields
        return body


class UnknownStaff(DispatchError):
    """Staff id not in the directory. Deliberately says nothing about why."""
    default_code = "UNKNOWN_STAFF"
    status_code = 400
    public_message = "Invalid staff ID"


class ConfigurationError(DispatchError):
    default_code = "EMAIL_NOT_CONFIGURED"
    status_code = 500
    public_message = "Email service not configured"


class DeliveryFailed(DispatchError):
    """Provider rejected or failed the send. Not retried."""
    default_code = "DELIVERY_FAILED"
    status_code = 500
    public_message = "Failed to send email"
