"""Webhook API Routes - Form submission entry point."""

import json
import logging
from datetime import datetime, timezone
from typing import Dict, Optional
from fastapi import APIRouter, Depends, Header, Query, Request
from pydantic import BaseModel, Field

from fusioncaller.api.dependencies import get_form_intake
from fusioncaller.core.exceptions import ValidationError
from fusioncaller.services.form_intake import FormIntakeOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


class FormSubmissionResponse(BaseModel):
    """Response for the form submission webhook."""
    success: bool = True
    lead_id: str = Field(..., serialization_alias="leadId")
    call_id: Optional[str] = Field(None, serialization_alias="callId")
    message: str


# ===========================================
# Form Submission Webhook
# ===========================================

@router.post(
    "/form-submission",
    response_model=FormSubmissionResponse,
    response_model_exclude_none=True,
    summary="Receive Ad Platform Form Submission"
)
async def form_submission_webhook(
    request: Request,
    org_id: Optional[str] = Query(None, alias="orgId"),
    x_organization_id: Optional[str] = Header(None, alias="X-Organization-Id"),
    x_webhook_secret: Optional[str] = Header(None, alias="X-Webhook-Secret"),
    intake: FormIntakeOrchestrator = Depends(get_form_intake)
) -> FormSubmissionResponse:
    """
    Handle a form submission from Facebook/Google lead ads or a site form.

    Creates a lead synchronously and, unless ``autoCall`` is false, tries to
    place an outbound call. A failed call never changes the 200 response.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError("Request body must be valid JSON") from e

    logger.info(f"Received form submission (source={body.get('source', 'form') if isinstance(body, dict) else 'n/a'})")

    result = await intake.process(
        body,
        query_organization_id=org_id,
        header_organization_id=x_organization_id,
        webhook_secret=x_webhook_secret,
    )

    return FormSubmissionResponse(
        lead_id=result.lead_id,
        call_id=result.call_id,
        message=result.message,
    )


@router.get("/form-submission", summary="Form Webhook Health")
async def form_submission_health() -> Dict[str, str]:
    """Static liveness payload for webhook configuration screens."""
    return {
        "message": "Form submission webhook is active",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
