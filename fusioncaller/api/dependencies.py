"""API dependencies - Pipeline components and organization context."""

from typing import Optional
from fastapi import Header

from fusioncaller.core.exceptions import ValidationError
from fusioncaller.core.resolvers import first_non_empty
from fusioncaller.services.form_intake import FormIntakeOrchestrator, form_intake
from fusioncaller.services.lead_repository import LeadRepository, lead_repository
from fusioncaller.services.workflow_engine import WorkflowEngine, workflow_engine


def get_form_intake() -> FormIntakeOrchestrator:
    return form_intake


def get_lead_repository() -> LeadRepository:
    return lead_repository


def get_workflow_engine() -> WorkflowEngine:
    return workflow_engine


async def get_organization_id(
    x_organization_id: Optional[str] = Header(None, alias="X-Organization-Id")
) -> str:
    """
    Organization context for tenant-scoped endpoints.

    The header is set by the authenticating gateway in front of this
    service after it has resolved the caller's organization.
    """
    organization_id = first_non_empty(x_organization_id)
    if not organization_id:
        raise ValidationError("No organization found")
    return organization_id
