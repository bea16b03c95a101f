"""Workflow API Routes - Manual trigger entry point."""

import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from fusioncaller.api.dependencies import get_workflow_engine
from fusioncaller.core.exceptions import ValidationError
from fusioncaller.core.resolvers import first_non_empty
from fusioncaller.models import WorkflowTriggerEvent
from fusioncaller.services.workflow_engine import WorkflowEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/workflows", tags=["workflows"])


class ExecuteWorkflowsRequest(BaseModel):
    """Body for POST /api/workflows/execute."""
    trigger_type: Optional[str] = Field(None, alias="triggerType")
    organization_id: Optional[str] = Field(None, alias="organizationId")
    lead_id: Optional[str] = Field(None, alias="leadId")
    call_id: Optional[str] = Field(None, alias="callId")
    appointment_id: Optional[str] = Field(None, alias="appointmentId")
    trigger_data: Dict[str, Any] = Field(default_factory=dict, alias="triggerData")

    class Config:
        populate_by_name = True
        extra = "ignore"


@router.post("/execute", summary="Trigger Workflows")
async def execute_workflows(
    request: ExecuteWorkflowsRequest,
    workflows: WorkflowEngine = Depends(get_workflow_engine)
) -> Dict[str, Any]:
    """Run the organization's workflows for a trigger type."""
    trigger_type = first_non_empty(request.trigger_type)
    organization_id = first_non_empty(request.organization_id)

    if not trigger_type or not organization_id:
        raise ValidationError("Missing required fields: triggerType, organizationId")

    result = await workflows.trigger(
        trigger_type,
        WorkflowTriggerEvent(
            organization_id=organization_id,
            lead_id=request.lead_id,
            call_id=request.call_id,
            appointment_id=request.appointment_id,
            trigger_data=request.trigger_data,
        )
    )
    return {"success": True, "executed": result.executed}
