"""Enumeration types for the lead intake pipeline."""

from enum import Enum


class LeadStatus(str, Enum):
    """Lifecycle status of a lead."""
    NEW = "new"
    INTERESTED = "interested"
    NOT_INTERESTED = "not_interested"
    CALL_BACK = "call_back"
    BOOKED = "booked"
    CUSTOMER = "customer"


class PropertyType(str, Enum):
    """Kind of property the requested service is for."""
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    UNKNOWN = "unknown"


class Urgency(str, Enum):
    """Urgency inferred from the customer's wording."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class WorkflowTriggerType(str, Enum):
    """Domain events a workflow rule can listen for."""
    NEW_LEAD = "new_lead"
    LEAD_STATUS_CHANGED = "lead_status_changed"
    CALL_COMPLETED = "call_completed"
    APPOINTMENT_BOOKED = "appointment_booked"
    LEAD_SCORE_THRESHOLD = "lead_score_threshold"
    DATE_BASED = "date_based"
    MANUAL = "manual"


class WorkflowActionType(str, Enum):
    """Actions a workflow rule can run."""
    SEND_EMAIL = "send_email"
    SEND_SMS = "send_sms"
    CREATE_TASK = "create_task"
    UPDATE_LEAD_STATUS = "update_lead_status"
    ASSIGN_TO_TEAM = "assign_to_team"
    ADD_TAG = "add_tag"
    WEBHOOK = "webhook"
    SCHEDULE_FOLLOWUP = "schedule_followup"


class IntakeState(str, Enum):
    """Progress of a single form submission through the intake pipeline."""
    RECEIVED = "received"
    ORGANIZATION_VERIFIED = "organization_verified"
    SERVICE_DETECTED = "service_detected"
    LEAD_PERSISTED = "lead_persisted"
    CALL_INITIATED = "call_initiated"
    RESPONDED = "responded"
    REJECTED = "rejected"
