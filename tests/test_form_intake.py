"""Tests for the Form Intake Orchestrator."""

import pytest

from fusioncaller.core.config import Settings
from fusioncaller.core.exceptions import (
    AuthenticationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from fusioncaller.models import CallPlaced, IntakeState
from fusioncaller.services.form_intake import (
    MESSAGE_CALL_INITIATED,
    MESSAGE_LEAD_CREATED,
    FormIntakeOrchestrator,
)
from tests.conftest import ORG_ID, OTHER_ORG_ID


class TestHappyPath:
    @pytest.mark.asyncio
    async def test_facebook_lead_without_service_type(self, orchestrator, fake_supabase, sample_form_data):
        result = await orchestrator.process(sample_form_data)

        assert result.lead_id
        assert result.call_id is None
        assert result.message == MESSAGE_LEAD_CREATED

        rows = fake_supabase.rows("leads")
        assert len(rows) == 1
        lead = rows[0]
        assert lead["organization_id"] == ORG_ID
        assert lead["service_type"] == "Driveway Cleaning"
        assert lead["status"] == "new"
        assert lead["notes"] == (
            "Source: facebook\n"
            "Message: need my driveway cleaned\n"
            "Detected Services: Driveway Cleaning"
        )

    @pytest.mark.asyncio
    async def test_state_trail(self, orchestrator, sample_form_data):
        result = await orchestrator.process(sample_form_data)

        assert result.state == IntakeState.RESPONDED
        assert result.states == [
            IntakeState.RECEIVED,
            IntakeState.ORGANIZATION_VERIFIED,
            IntakeState.SERVICE_DETECTED,
            IntakeState.LEAD_PERSISTED,
            IntakeState.RESPONDED,
        ]

    @pytest.mark.asyncio
    async def test_call_placed(self, orchestrator, mock_dialer, sample_form_data):
        mock_dialer.initiate_call.return_value = CallPlaced(call_id="call_123", phone_number_id="phone-1")

        result = await orchestrator.process(sample_form_data)

        assert result.call_id == "call_123"
        assert result.message == MESSAGE_CALL_INITIATED
        assert IntakeState.CALL_INITIATED in result.states

        request = mock_dialer.initiate_call.call_args.args[0]
        assert request.organization_id == ORG_ID
        assert request.lead_id == result.lead_id

    @pytest.mark.asyncio
    async def test_explicit_service_type_wins(self, orchestrator, fake_supabase, sample_form_data):
        sample_form_data["serviceType"] = "Gutter Cleaning"

        await orchestrator.process(sample_form_data)

        assert fake_supabase.rows("leads")[0]["service_type"] == "Gutter Cleaning"

    @pytest.mark.asyncio
    async def test_new_lead_workflows_fired(self, orchestrator, mock_workflows, sample_form_data):
        result = await orchestrator.process(sample_form_data)

        trigger_type, event = mock_workflows.trigger.call_args.args
        assert trigger_type == "new_lead"
        assert event.organization_id == ORG_ID
        assert event.lead_id == result.lead_id
        assert event.trigger_data["source"] == "facebook"


class TestAutoCall:
    @pytest.mark.asyncio
    async def test_auto_call_false_never_dials(self, orchestrator, mock_dialer, fake_supabase, sample_form_data):
        sample_form_data["autoCall"] = False

        result = await orchestrator.process(sample_form_data)

        assert result.call_id is None
        assert len(fake_supabase.rows("leads")) == 1
        mock_dialer.initiate_call.assert_not_called()

    @pytest.mark.asyncio
    async def test_auto_call_null_dials(self, orchestrator, mock_dialer, sample_form_data):
        sample_form_data["autoCall"] = None

        await orchestrator.process(sample_form_data)

        mock_dialer.initiate_call.assert_called_once()

    @pytest.mark.asyncio
    async def test_dialer_exception_keeps_lead(self, orchestrator, mock_dialer, fake_supabase, sample_form_data):
        mock_dialer.initiate_call.side_effect = RuntimeError("dialer exploded")

        result = await orchestrator.process(sample_form_data)

        assert result.call_id is None
        assert result.message == MESSAGE_LEAD_CREATED
        assert len(fake_supabase.rows("leads")) == 1

    @pytest.mark.asyncio
    async def test_workflow_failure_keeps_success(self, orchestrator, mock_workflows, sample_form_data):
        mock_workflows.trigger.side_effect = RuntimeError("workflows table gone")

        result = await orchestrator.process(sample_form_data)

        assert result.lead_id


class TestRejections:
    @pytest.mark.asyncio
    async def test_missing_phone(self, orchestrator, mock_dialer, fake_supabase, sample_form_data):
        del sample_form_data["phone"]

        with pytest.raises(ValidationError, match="Name and phone are required"):
            await orchestrator.process(sample_form_data)

        assert fake_supabase.rows("leads") == []
        mock_dialer.initiate_call.assert_not_called()

    @pytest.mark.asyncio
    async def test_blank_name(self, orchestrator, fake_supabase, sample_form_data):
        sample_form_data["name"] = "   "

        with pytest.raises(ValidationError):
            await orchestrator.process(sample_form_data)

        assert fake_supabase.rows("leads") == []

    @pytest.mark.asyncio
    async def test_no_organization_id(self, orchestrator, sample_form_data):
        del sample_form_data["organizationId"]

        with pytest.raises(ValidationError, match="Organization ID is required"):
            await orchestrator.process(sample_form_data)

    @pytest.mark.asyncio
    async def test_unknown_organization(self, orchestrator, fake_supabase, sample_form_data):
        sample_form_data["organizationId"] = "org-missing"

        with pytest.raises(NotFoundError):
            await orchestrator.process(sample_form_data)

        assert fake_supabase.rows("leads") == []

    @pytest.mark.asyncio
    async def test_non_object_body(self, orchestrator):
        with pytest.raises(ValidationError):
            await orchestrator.process(["not", "an", "object"])

    @pytest.mark.asyncio
    async def test_lead_insert_failure(self, orchestrator, fake_supabase, mock_dialer, sample_form_data):
        fake_supabase.failing_tables.add("leads")

        with pytest.raises(PersistenceError):
            await orchestrator.process(sample_form_data)

        mock_dialer.initiate_call.assert_not_called()


class TestOrganizationResolution:
    """Query parameter, then header, then body."""

    @pytest.mark.asyncio
    async def test_query_beats_header_and_body(self, orchestrator, fake_supabase, sample_form_data):
        sample_form_data["organizationId"] = "org-missing"

        await orchestrator.process(
            sample_form_data,
            query_organization_id=OTHER_ORG_ID,
            header_organization_id="org-also-missing",
        )

        assert fake_supabase.rows("leads")[0]["organization_id"] == OTHER_ORG_ID

    @pytest.mark.asyncio
    async def test_header_beats_body(self, orchestrator, fake_supabase, sample_form_data):
        await orchestrator.process(sample_form_data, header_organization_id=OTHER_ORG_ID)

        assert fake_supabase.rows("leads")[0]["organization_id"] == OTHER_ORG_ID

    @pytest.mark.asyncio
    async def test_blank_query_falls_through(self, orchestrator, fake_supabase, sample_form_data):
        await orchestrator.process(sample_form_data, query_organization_id="  ")

        assert fake_supabase.rows("leads")[0]["organization_id"] == ORG_ID


class TestWebhookSecret:
    @pytest.fixture
    def guarded(self, database, lead_repo, failing_classifier, mock_dialer, mock_workflows):
        from fusioncaller.intelligence.service_detector import ServiceDetector

        return FormIntakeOrchestrator(
            database=database,
            detector=ServiceDetector(classifier=failing_classifier),
            leads=lead_repo,
            dialer=mock_dialer,
            workflows=mock_workflows,
            settings=Settings(_env_file=None, FORM_WEBHOOK_SECRET="s3cret"),
        )

    @pytest.mark.asyncio
    async def test_wrong_secret(self, guarded, fake_supabase, sample_form_data):
        with pytest.raises(AuthenticationError):
            await guarded.process(sample_form_data, webhook_secret="nope")

        assert fake_supabase.rows("leads") == []

    @pytest.mark.asyncio
    async def test_missing_secret(self, guarded, sample_form_data):
        with pytest.raises(AuthenticationError):
            await guarded.process(sample_form_data)

    @pytest.mark.asyncio
    async def test_matching_secret(self, guarded, sample_form_data):
        result = await guarded.process(sample_form_data, webhook_secret="s3cret")
        assert result.lead_id

    @pytest.mark.asyncio
    async def test_open_mode_accepts_any(self, orchestrator, sample_form_data):
        result = await orchestrator.process(sample_form_data, webhook_secret="anything")
        assert result.lead_id


class TestDuplicates:
    @pytest.mark.asyncio
    async def test_identical_submissions_create_two_leads(self, orchestrator, fake_supabase, sample_form_data):
        first = await orchestrator.process(dict(sample_form_data))
        second = await orchestrator.process(dict(sample_form_data))

        assert first.lead_id != second.lead_id
        assert len(fake_supabase.rows("leads")) == 2