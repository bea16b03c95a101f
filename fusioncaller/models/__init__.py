"""Models package - All Pydantic models organized by domain."""

from fusioncaller.models.enums import (
    LeadStatus,
    PropertyType,
    Urgency,
    WorkflowTriggerType,
    WorkflowActionType,
    IntakeState,
)
from fusioncaller.models.lead import FormSubmission, LeadCreate, LeadUpdate, Lead
from fusioncaller.models.detection import ExtractedDetails, ServiceDetectionResult, ClassifierOutput
from fusioncaller.models.call import (
    CallSchedule,
    AgentConfig,
    PhoneNumber,
    CallLimit,
    CallRequest,
    CallPlaced,
    CallNotPlaced,
    CallOutcome,
)
from fusioncaller.models.workflow import (
    WorkflowAction,
    WorkflowRule,
    WorkflowTriggerEvent,
    WorkflowRunResult,
)
from fusioncaller.models.results import IntakeResult

__all__ = [
    # Enums
    "LeadStatus",
    "PropertyType",
    "Urgency",
    "WorkflowTriggerType",
    "WorkflowActionType",
    "IntakeState",
    # Lead models
    "FormSubmission",
    "LeadCreate",
    "LeadUpdate",
    "Lead",
    # Detection models
    "ExtractedDetails",
    "ServiceDetectionResult",
    "ClassifierOutput",
    # Call models
    "CallSchedule",
    "AgentConfig",
    "PhoneNumber",
    "CallLimit",
    "CallRequest",
    "CallPlaced",
    "CallNotPlaced",
    "CallOutcome",
    # Workflow models
    "WorkflowAction",
    "WorkflowRule",
    "WorkflowTriggerEvent",
    "WorkflowRunResult",
    # Result models
    "IntakeResult",
]
