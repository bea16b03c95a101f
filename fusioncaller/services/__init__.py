"""Services module - Lead intake pipeline components."""

from fusioncaller.services.lead_repository import LeadRepository, lead_repository
from fusioncaller.services.call_initiator import OutboundCallInitiator, call_initiator
from fusioncaller.services.workflow_engine import WorkflowEngine, workflow_engine
from fusioncaller.services.form_intake import FormIntakeOrchestrator, form_intake

__all__ = [
    "LeadRepository",
    "lead_repository",
    "OutboundCallInitiator",
    "call_initiator",
    "WorkflowEngine",
    "workflow_engine",
    "FormIntakeOrchestrator",
    "form_intake",
]
