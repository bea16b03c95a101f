"""Lead API Routes - Tenant-scoped lead updates."""

import logging
from typing import Any, Dict
from fastapi import APIRouter, Depends

from fusioncaller.api.dependencies import (
    get_lead_repository,
    get_organization_id,
    get_workflow_engine,
)
from fusioncaller.models import LeadUpdate, WorkflowTriggerEvent, WorkflowTriggerType
from fusioncaller.services.lead_repository import LeadRepository
from fusioncaller.services.workflow_engine import WorkflowEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/leads", tags=["leads"])


@router.patch("/{lead_id}", summary="Update Lead")
async def update_lead(
    lead_id: str,
    update: LeadUpdate,
    organization_id: str = Depends(get_organization_id),
    leads: LeadRepository = Depends(get_lead_repository),
    workflows: WorkflowEngine = Depends(get_workflow_engine)
) -> Dict[str, Any]:
    """
    Update a lead of the caller's organization.

    A status change fires ``lead_status_changed`` workflows with the old
    and new status.
    """
    existing = await leads.get_lead(lead_id, organization_id)
    lead = await leads.update_lead(lead_id, organization_id, update)

    if update.status is not None and update.status != existing.status:
        event = WorkflowTriggerEvent(
            organization_id=organization_id,
            lead_id=lead.id,
            trigger_data={
                "oldStatus": existing.status.value,
                "newStatus": lead.status.value,
            },
        )
        try:
            await workflows.trigger(WorkflowTriggerType.LEAD_STATUS_CHANGED.value, event)
        except Exception as e:
            logger.error(f"lead_status_changed workflows failed for {lead.id}: {e}")

    return {"success": True, "lead": lead.model_dump(mode="json")}
