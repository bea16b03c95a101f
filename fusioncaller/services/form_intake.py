"""Form Intake Orchestrator - Form webhook to lead, call and workflows."""

import logging
from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from fusioncaller.core.config import Settings, get_settings
from fusioncaller.core.database import DatabaseService, db_service
from fusioncaller.core.exceptions import AuthenticationError, NotFoundError, ValidationError
from fusioncaller.core.resolvers import first_non_empty, secrets_match
from fusioncaller.intelligence.service_detector import ServiceDetector, service_detector
from fusioncaller.models import (
    CallPlaced,
    CallRequest,
    FormSubmission,
    IntakeResult,
    IntakeState,
    Lead,
    WorkflowTriggerEvent,
    WorkflowTriggerType,
)
from fusioncaller.services.call_initiator import OutboundCallInitiator, call_initiator
from fusioncaller.services.lead_repository import (
    LeadRepository,
    build_lead_from_submission,
    lead_repository,
)
from fusioncaller.services.workflow_engine import WorkflowEngine, workflow_engine

logger = logging.getLogger(__name__)

MESSAGE_CALL_INITIATED = "Lead created and call initiated"
MESSAGE_LEAD_CREATED = "Lead created successfully"


class FormIntakeOrchestrator:
    """
    Main orchestration for one form submission.

    received -> organization_verified -> service_detected -> lead_persisted
    -> [call_initiated] -> responded, or rejected straight from received.

    Each step's failure short-circuits with a typed error, except call
    placement and workflow triggering, which are best-effort once the lead
    row exists.
    """

    def __init__(
        self,
        database: Optional[DatabaseService] = None,
        detector: Optional[ServiceDetector] = None,
        leads: Optional[LeadRepository] = None,
        dialer: Optional[OutboundCallInitiator] = None,
        workflows: Optional[WorkflowEngine] = None,
        settings: Optional[Settings] = None
    ):
        """Initialize orchestrator; unspecified collaborators use the module singletons."""
        self.database = database or db_service
        self.detector = detector or service_detector
        self.leads = leads or lead_repository
        self.dialer = dialer or call_initiator
        self.workflows = workflows or workflow_engine
        self._settings = settings

    @property
    def settings(self) -> Settings:
        """Lazy load settings."""
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    async def process(
        self,
        body: Any,
        query_organization_id: Optional[str] = None,
        header_organization_id: Optional[str] = None,
        webhook_secret: Optional[str] = None
    ) -> IntakeResult:
        """
        Process one form submission.

        Args:
            body: Decoded JSON body
            query_organization_id: ``orgId`` query parameter
            header_organization_id: ``X-Organization-Id`` header
            webhook_secret: ``X-Webhook-Secret`` header

        Returns:
            IntakeResult with the lead ID and, when a call was placed, its call ID

        Raises:
            AuthenticationError: secret configured and not matched
            ValidationError: malformed body, no organization ID, missing name/phone
            NotFoundError: organization does not exist
            PersistenceError: lead could not be written
        """
        states: List[IntakeState] = [IntakeState.RECEIVED]

        try:
            submission = self._validate_submission(body, webhook_secret)
            organization_id = await self._verify_organization(
                submission, query_organization_id, header_organization_id
            )
            states.append(IntakeState.ORGANIZATION_VERIFIED)

            if not first_non_empty(submission.name) or not first_non_empty(submission.phone):
                raise ValidationError("Name and phone are required")
        except (ValidationError, NotFoundError) as e:
            states.append(IntakeState.REJECTED)
            logger.warning(f"Form submission rejected: {e.message}")
            raise

        detection = await self.detector.detect(
            submission.detection_text,
            submission.service_type
        )
        states.append(IntakeState.SERVICE_DETECTED)
        logger.info(
            f"Detected service '{detection.service_type}' "
            f"(confidence {detection.confidence}) for {organization_id}"
        )

        lead = await self.leads.create_lead(
            build_lead_from_submission(organization_id, submission, detection)
        )
        states.append(IntakeState.LEAD_PERSISTED)

        call_id = None
        if submission.should_auto_call:
            call_id = await self._place_call(lead)
            if call_id:
                states.append(IntakeState.CALL_INITIATED)
        else:
            logger.info(f"Auto-call disabled for lead {lead.id}")

        await self._fire_new_lead_workflows(lead, call_id, submission)

        states.append(IntakeState.RESPONDED)
        return IntakeResult(
            lead_id=lead.id,
            call_id=call_id,
            message=MESSAGE_CALL_INITIATED if call_id else MESSAGE_LEAD_CREATED,
            state=IntakeState.RESPONDED,
            states=states,
        )

    def _validate_submission(self, body: Any, webhook_secret: Optional[str]) -> FormSubmission:
        """Secret gate, then schema validation of the body."""
        expected = self.settings.FORM_WEBHOOK_SECRET
        if expected and not secrets_match(webhook_secret, expected):
            raise AuthenticationError("Invalid webhook secret")

        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")

        try:
            return FormSubmission.model_validate(body)
        except PydanticValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise ValidationError(f"Invalid form submission fields: {fields}") from e

    async def _verify_organization(
        self,
        submission: FormSubmission,
        query_organization_id: Optional[str],
        header_organization_id: Optional[str]
    ) -> str:
        organization_id = first_non_empty(
            query_organization_id,
            header_organization_id,
            submission.organization_id,
        )
        if not organization_id:
            raise ValidationError("Organization ID is required")

        organization = await self.database.get_organization(organization_id)
        if not organization:
            raise NotFoundError("Organization not found")

        return organization_id

    async def _place_call(self, lead: Lead) -> Optional[str]:
        """Best-effort dial. The lead stays created whatever happens here."""
        try:
            outcome = await self.dialer.initiate_call(
                CallRequest(organization_id=lead.organization_id, lead_id=lead.id)
            )
        except Exception as e:
            logger.error(f"Error initiating call for lead {lead.id}: {e}")
            return None

        if isinstance(outcome, CallPlaced):
            return outcome.call_id

        logger.info(f"Lead {lead.id} created without call: {outcome.reason}")
        return None

    async def _fire_new_lead_workflows(
        self,
        lead: Lead,
        call_id: Optional[str],
        submission: FormSubmission
    ) -> None:
        event = WorkflowTriggerEvent(
            organization_id=lead.organization_id,
            lead_id=lead.id,
            call_id=call_id,
            trigger_data={
                "source": submission.source_tag,
                "serviceType": lead.service_type,
                "metadata": submission.metadata or {},
            },
        )
        try:
            await self.workflows.trigger(WorkflowTriggerType.NEW_LEAD.value, event)
        except Exception as e:
            logger.error(f"new_lead workflows failed for lead {lead.id}: {e}")


# Singleton instance
form_intake = FormIntakeOrchestrator()
