"""Workflow rule models."""

from typing import Optional, List, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field


class WorkflowAction(BaseModel):
    """One step of a workflow rule."""
    type: str = Field(..., description="Action type, see WorkflowActionType")
    config: Dict[str, Any] = Field(default_factory=dict)


class WorkflowRule(BaseModel):
    """Tenant-configured trigger/actions pair from the workflows table."""
    id: str
    organization_id: str
    name: Optional[str] = None
    enabled: bool = True
    trigger_type: str
    trigger_config: Optional[Dict[str, Any]] = Field(default_factory=dict)
    actions: List[WorkflowAction] = Field(default_factory=list)
    execution_count: int = 0
    last_executed_at: Optional[datetime] = None

    class Config:
        extra = "ignore"


class WorkflowTriggerEvent(BaseModel):
    """Domain event handed to the workflow engine."""
    organization_id: str = Field(..., alias="organizationId")
    lead_id: Optional[str] = Field(None, alias="leadId")
    call_id: Optional[str] = Field(None, alias="callId")
    appointment_id: Optional[str] = Field(None, alias="appointmentId")
    trigger_data: Dict[str, Any] = Field(default_factory=dict, alias="triggerData")

    class Config:
        populate_by_name = True
        extra = "ignore"


class WorkflowRunResult(BaseModel):
    """Number of rules that ran for one trigger."""
    executed: int = 0
