from staff_relay.schemas.submission import (
    FORM_CONSTRAINTS,
    SubmissionRequest,
    validate_submission,
)
