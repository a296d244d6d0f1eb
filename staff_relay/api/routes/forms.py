"""
Contact Form Pages

Two ways to reach the form:
- /form/{staff_id}: the id is checked against the directory up front and an
  unknown id gets a 404 page
- /form?sid=...: the id is only checked when the form is submitted
"""
import json
import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from staff_relay.api.deps import get_directory
from staff_relay.schemas.submission import FORM_CONSTRAINTS
from staff_relay.services.directory import StaffDirectory

logger = logging.getLogger(__name__)

router = APIRouter()

TEMPLATE_DIR = Path(__file__).resolve().parents[2] / "templates"
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))

_CONSTRAINTS_JSON = json.dumps(FORM_CONSTRAINTS, separators=(",", ":"))


def _render_form(request: Request, staff_id: str) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "contact_form.html",
        {
            "staff_id": staff_id,
            "constraints": FORM_CONSTRAINTS,
            "constraints_json": _CONSTRAINTS_JSON,
        },
    )


@router.get("/form/{staff_id}", response_class=HTMLResponse)
async def staff_form(
    request: Request,
    staff_id: str,
    directory: StaffDirectory = Depends(get_directory),
):
    """Form bound to a path identifier, 404 when it is not in the directory."""
    if staff_id not in directory:
        logger.info("Form requested for unknown staff id")
        return templates.TemplateResponse(request, "not_found.html", {}, status_code=404)
    return _render_form(request, staff_id)


@router.get("/form", response_class=HTMLResponse)
async def query_form(
    request: Request,
    sid: Optional[str] = Query(None, description="Public staff identifier"),
):
    """Form bound to the `sid` query parameter, not checked until submit."""
    if not sid:
        return templates.TemplateResponse(request, "invalid_request.html", {}, status_code=400)
    return _render_form(request, sid)
