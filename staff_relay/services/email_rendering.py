"""
Contact Email Rendering

Turns a validated submission into the HTML and plain-text bodies sent to a
staff member. User-supplied name, subject and message are escaped for the
HTML body only; the text body carries them verbatim.
"""
import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from staff_relay.schemas.submission import SubmissionRequest
from staff_relay.services.directory import StaffRecord
from staff_relay.services.email_provider import EmailMessage

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

_HTML_REPLACEMENTS = (
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
    ("/", "&#x2F;"),
)

# .html templates autoescape, .txt templates do not
_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
)


def sanitize_html(text: str) -> str:
    """Replace < > " ' / with their entities. Ampersands are left alone."""
    for char, entity in _HTML_REPLACEMENTS:
        text = text.replace(char, entity)
    return text


def build_subject(submission: SubmissionRequest) -> str:
    """Subject header: the visitor's subject, or one naming them."""
    return submission.subject or f"New message from {submission.name}"


def render_html(submission: SubmissionRequest) -> str:
    # Markup keeps Jinja from escaping the already sanitized values twice
    safe_name = Markup(sanitize_html(submission.name))
    safe_subject = Markup(sanitize_html(submission.subject)) if submission.subject else None
    template = _env.get_template("email/contact_message.html")
    return template.render(
        title=safe_subject or Markup(f"New message from {safe_name}"),
        name=safe_name,
        email=submission.email,
        subject=safe_subject,
        message=Markup(sanitize_html(submission.message)),
    )


def render_text(submission: SubmissionRequest) -> str:
    template = _env.get_template("email/contact_message.txt")
    return template.render(
        name=submission.name,
        email=submission.email,
        subject=submission.subject,
        message=submission.message,
    ).strip()


def compose_message(submission: SubmissionRequest, record: StaffRecord) -> EmailMessage:
    """
    Build the outbound message for one submission.

    The staff address only appears in `to`; the visitor's address goes to
    `reply_to` so staff can answer without the visitor learning theirs.
    """
    return EmailMessage(
        to=record.email,
        reply_to=submission.email,
        subject=build_subject(submission),
        html_body=render_html(submission),
        text_body=render_text(submission),
    )
