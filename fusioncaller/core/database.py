"""Supabase database service for FusionCaller lead intake."""

import logging
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone
from supabase import create_client, Client
from supabase.lib.client_options import ClientOptions

from fusioncaller.core.config import get_settings
from fusioncaller.core.exceptions import PersistenceError
from fusioncaller.models import AgentConfig, PhoneNumber, CallLimit, WorkflowRule

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DatabaseService:
    """
    Service for Supabase database operations outside the leads table.

    Covers organizations, phone numbers, agent configs, call bookkeeping and
    workflow rules. Uses the sync Supabase client behind an async interface
    for consistency with the rest of the application.

    Reads raise PersistenceError when the client fails so that an outage is
    never mistaken for a missing row. Bookkeeping writes log and return False.
    """

    ORGANIZATIONS_TABLE = "organizations"
    PHONE_NUMBERS_TABLE = "phone_numbers"
    AGENT_CONFIGS_TABLE = "agent_configs"
    CALLS_TABLE = "calls"
    CALL_LIMITS_TABLE = "call_limits"
    WORKFLOWS_TABLE = "workflows"
    WORKFLOW_EXECUTIONS_TABLE = "workflow_executions"

    def __init__(self, client: Optional[Client] = None):
        """Initialize with an optional pre-built client."""
        self._client: Optional[Client] = client

    @property
    def client(self) -> Client:
        """Lazy initialization of Supabase client."""
        if self._client is None:
            settings = get_settings()
            if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
                raise PersistenceError("Supabase credentials not configured")

            self._client = create_client(
                settings.SUPABASE_URL,
                settings.SUPABASE_KEY,
                options=ClientOptions(
                    postgrest_client_timeout=30,
                    storage_client_timeout=30
                )
            )
            logger.info("Supabase client initialized")
        return self._client

    def _fetch(self, description: str, query) -> List[Dict[str, Any]]:
        """Execute a select query, translating client failures."""
        try:
            response = query.execute()
        except Exception as e:
            logger.error(f"Failed to fetch {description}: {e}")
            raise PersistenceError(f"Failed to fetch {description}") from e
        return response.data or []

    def _write(self, description: str, query) -> bool:
        """Execute a bookkeeping write; failures are logged, not raised."""
        try:
            response = query.execute()
        except Exception as e:
            logger.error(f"Failed to {description}: {e}")
            return False

        if response.data:
            return True

        logger.warning(f"Write returned no data: {description}")
        return False

    # ===========================================
    # Organizations
    # ===========================================

    async def get_organization(self, organization_id: str) -> Optional[Dict[str, Any]]:
        """Fetch organization by ID."""
        rows = self._fetch(
            f"organization {organization_id}",
            self.client.table(self.ORGANIZATIONS_TABLE)
            .select("id")
            .eq("id", organization_id)
            .limit(1)
        )
        if not rows:
            logger.warning(f"Organization not found: {organization_id}")
            return None
        return rows[0]

    # ===========================================
    # Phone Numbers
    # ===========================================

    async def get_active_outbound_number(self, organization_id: str) -> Optional[PhoneNumber]:
        """First active number of the organization that can place outbound calls."""
        rows = self._fetch(
            f"outbound phone number for {organization_id}",
            self.client.table(self.PHONE_NUMBERS_TABLE)
            .select("*")
            .eq("organization_id", organization_id)
            .eq("active", True)
            .in_("type", ["outbound", "both"])
            .limit(1)
        )
        return PhoneNumber(**rows[0]) if rows else None

    async def get_phone_number(
        self,
        phone_number_id: str,
        organization_id: str
    ) -> Optional[PhoneNumber]:
        """Fetch a phone number scoped to its organization."""
        rows = self._fetch(
            f"phone number {phone_number_id}",
            self.client.table(self.PHONE_NUMBERS_TABLE)
            .select("*")
            .eq("id", phone_number_id)
            .eq("organization_id", organization_id)
            .limit(1)
        )
        return PhoneNumber(**rows[0]) if rows else None

    async def reset_phone_number_counter(self, phone_number_id: str, today: str) -> bool:
        """Start a new day for a phone number's call counter."""
        return self._write(
            f"reset call counter for {phone_number_id}",
            self.client.table(self.PHONE_NUMBERS_TABLE)
            .update({"calls_today": 0, "last_reset_date": today})
            .eq("id", phone_number_id)
        )

    async def update_phone_number_calls(self, phone_number_id: str, calls_today: int) -> bool:
        return self._write(
            f"update call count for {phone_number_id}",
            self.client.table(self.PHONE_NUMBERS_TABLE)
            .update({"calls_today": calls_today})
            .eq("id", phone_number_id)
        )

    # ===========================================
    # Agent Configs
    # ===========================================

    async def get_agent_config(self, organization_id: str) -> Optional[AgentConfig]:
        """Fetch the organization's voice agent configuration."""
        rows = self._fetch(
            f"agent config for {organization_id}",
            self.client.table(self.AGENT_CONFIGS_TABLE)
            .select("*")
            .eq("organization_id", organization_id)
            .limit(1)
        )
        return AgentConfig(**rows[0]) if rows else None

    async def update_agent_calls(self, agent_config_id: str, calls_made_today: int) -> bool:
        return self._write(
            f"update agent call count for {agent_config_id}",
            self.client.table(self.AGENT_CONFIGS_TABLE)
            .update({"calls_made_today": calls_made_today})
            .eq("id", agent_config_id)
        )

    # ===========================================
    # Calls & Call Limits
    # ===========================================

    async def get_call_limit(
        self,
        organization_id: str,
        lead_id: str,
        today: str
    ) -> Optional[CallLimit]:
        """Today's call counter for a lead, if any call was placed today."""
        rows = self._fetch(
            f"call limit for lead {lead_id}",
            self.client.table(self.CALL_LIMITS_TABLE)
            .select("*")
            .eq("organization_id", organization_id)
            .eq("lead_id", lead_id)
            .eq("last_reset_date", today)
            .limit(1)
        )
        return CallLimit(**rows[0]) if rows else None

    async def create_call_limit(
        self,
        organization_id: str,
        lead_id: str,
        phone_number_id: str,
        today: str
    ) -> bool:
        return self._write(
            f"create call limit for lead {lead_id}",
            self.client.table(self.CALL_LIMITS_TABLE).insert({
                "organization_id": organization_id,
                "lead_id": lead_id,
                "phone_number_id": phone_number_id,
                "calls_today": 1,
                "last_call_at": utc_now_iso(),
                "last_reset_date": today,
            })
        )

    async def update_call_limit(self, call_limit_id: str, calls_today: int) -> bool:
        return self._write(
            f"update call limit {call_limit_id}",
            self.client.table(self.CALL_LIMITS_TABLE)
            .update({"calls_today": calls_today, "last_call_at": utc_now_iso()})
            .eq("id", call_limit_id)
        )

    async def log_outbound_call(
        self,
        organization_id: str,
        lead_id: str,
        provider_call_id: str,
        from_number: str,
        to_number: str,
        raw_payload: Dict[str, Any]
    ) -> bool:
        """Record a queued outbound call."""
        return self._write(
            f"log call {provider_call_id}",
            self.client.table(self.CALLS_TABLE).insert({
                "organization_id": organization_id,
                "lead_id": lead_id,
                "direction": "outbound",
                "provider_call_id": provider_call_id,
                "from_number": from_number,
                "to_number": to_number,
                "status": "queued",
                "raw_payload": raw_payload,
            })
        )

    # ===========================================
    # Workflows
    # ===========================================

    async def get_enabled_workflows(
        self,
        organization_id: str,
        trigger_type: str
    ) -> List[WorkflowRule]:
        """Enabled workflow rules of an organization for one trigger type."""
        rows = self._fetch(
            f"workflows for {organization_id}/{trigger_type}",
            self.client.table(self.WORKFLOWS_TABLE)
            .select("*")
            .eq("organization_id", organization_id)
            .eq("enabled", True)
            .eq("trigger_type", trigger_type)
        )
        return [WorkflowRule(**row) for row in rows]

    async def create_workflow_execution(
        self,
        rule: WorkflowRule,
        trigger_type: str,
        trigger_data: Dict[str, Any],
        lead_id: Optional[str] = None,
        call_id: Optional[str] = None,
        appointment_id: Optional[str] = None
    ) -> Optional[str]:
        """Insert a running execution record and return its ID."""
        try:
            response = self.client.table(self.WORKFLOW_EXECUTIONS_TABLE).insert({
                "workflow_id": rule.id,
                "organization_id": rule.organization_id,
                "trigger_event": trigger_type,
                "trigger_data": trigger_data,
                "status": "running",
                "lead_id": lead_id,
                "call_id": call_id,
                "appointment_id": appointment_id,
            }).execute()
        except Exception as e:
            logger.error(f"Failed to create execution for workflow {rule.id}: {e}")
            return None

        if response.data:
            return response.data[0].get("id")
        return None

    async def update_workflow_execution(self, execution_id: str, status: str) -> bool:
        return self._write(
            f"update workflow execution {execution_id}",
            self.client.table(self.WORKFLOW_EXECUTIONS_TABLE)
            .update({"status": status})
            .eq("id", execution_id)
        )

    async def record_workflow_run(self, rule: WorkflowRule) -> bool:
        """Bump a rule's execution statistics."""
        return self._write(
            f"update stats for workflow {rule.id}",
            self.client.table(self.WORKFLOWS_TABLE)
            .update({
                "execution_count": rule.execution_count + 1,
                "last_executed_at": utc_now_iso(),
            })
            .eq("id", rule.id)
        )

    # ===========================================
    # Health Check
    # ===========================================

    async def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            self.client.table(self.ORGANIZATIONS_TABLE).select("id").limit(1).execute()
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False


# Singleton instance
db_service = DatabaseService()
