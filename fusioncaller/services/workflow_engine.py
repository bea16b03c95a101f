"""Workflow Engine - Runs tenant-configured rules for domain events."""

import logging
from typing import Awaitable, Callable, Dict, Optional

import httpx

from fusioncaller.core.config import get_settings
from fusioncaller.core.database import DatabaseService, db_service
from fusioncaller.models import (
    LeadStatus,
    LeadUpdate,
    WorkflowAction,
    WorkflowActionType,
    WorkflowRule,
    WorkflowRunResult,
    WorkflowTriggerEvent,
    WorkflowTriggerType,
)
from fusioncaller.services.lead_repository import LeadRepository, lead_repository

logger = logging.getLogger(__name__)

ActionHandler = Callable[[WorkflowAction, WorkflowTriggerEvent], Awaitable[None]]


def should_execute(rule: WorkflowRule, event: WorkflowTriggerEvent) -> bool:
    """Check the rule's trigger-specific conditions against the event."""
    config = rule.trigger_config or {}
    data = event.trigger_data or {}

    if rule.trigger_type == WorkflowTriggerType.LEAD_STATUS_CHANGED.value:
        return config.get("status") == data.get("newStatus")

    if rule.trigger_type == WorkflowTriggerType.LEAD_SCORE_THRESHOLD.value:
        try:
            score = float(data.get("score") or 0)
            threshold = float(config.get("threshold") or 0)
        except (TypeError, ValueError):
            logger.warning(f"Workflow {rule.id}: non-numeric score or threshold")
            return False
        return score >= threshold

    return True


class WorkflowEngine:
    """
    Rule-match-and-execute loop.

    Rules and actions are independent: a failing action is logged and the
    remaining actions and rules still run. There is no transaction around
    a rule.
    """

    def __init__(
        self,
        database: Optional[DatabaseService] = None,
        leads: Optional[LeadRepository] = None
    ):
        self.database = database or db_service
        self.leads = leads or lead_repository
        self._handlers: Dict[str, ActionHandler] = {
            WorkflowActionType.UPDATE_LEAD_STATUS.value: self._update_lead_status,
            WorkflowActionType.WEBHOOK.value: self._call_webhook,
            WorkflowActionType.SEND_EMAIL.value: self._record_only,
            WorkflowActionType.SEND_SMS.value: self._record_only,
            WorkflowActionType.CREATE_TASK.value: self._record_only,
            WorkflowActionType.ASSIGN_TO_TEAM.value: self._record_only,
            WorkflowActionType.ADD_TAG.value: self._record_only,
            WorkflowActionType.SCHEDULE_FOLLOWUP.value: self._record_only,
        }

    async def trigger(
        self,
        trigger_type: str,
        event: WorkflowTriggerEvent
    ) -> WorkflowRunResult:
        """
        Run every enabled rule of the organization that listens for trigger_type.

        Returns:
            WorkflowRunResult with the number of rules executed (not actions)
        """
        rules = await self.database.get_enabled_workflows(event.organization_id, trigger_type)
        if not rules:
            return WorkflowRunResult(executed=0)

        executed = 0
        for rule in rules:
            try:
                if not should_execute(rule, event):
                    logger.debug(f"Workflow {rule.id} conditions not met for {trigger_type}")
                    continue

                await self._run_rule(rule, trigger_type, event)
                executed += 1
            except Exception as e:
                logger.error(f"Workflow {rule.id} execution error: {e}")

        logger.info(
            f"Trigger {trigger_type} for {event.organization_id}: "
            f"{executed}/{len(rules)} workflows executed"
        )
        return WorkflowRunResult(executed=executed)

    async def _run_rule(
        self,
        rule: WorkflowRule,
        trigger_type: str,
        event: WorkflowTriggerEvent
    ) -> None:
        execution_id = await self.database.create_workflow_execution(
            rule,
            trigger_type,
            event.trigger_data,
            lead_id=event.lead_id,
            call_id=event.call_id,
            appointment_id=event.appointment_id,
        )

        failures = 0
        for action in rule.actions:
            try:
                await self.execute_action(action, event)
            except Exception as e:
                failures += 1
                logger.error(f"Workflow {rule.id} action {action.type} failed: {e}")

        if execution_id:
            status = "completed" if failures == 0 else "failed"
            await self.database.update_workflow_execution(execution_id, status)

        await self.database.record_workflow_run(rule)

    async def execute_action(self, action: WorkflowAction, event: WorkflowTriggerEvent) -> None:
        """Dispatch one action. Unknown action types are skipped."""
        handler = self._handlers.get(action.type)
        if handler is None:
            logger.warning(f"Unknown workflow action type: {action.type}")
            return
        await handler(action, event)

    # ===========================================
    # Action Handlers
    # ===========================================

    async def _update_lead_status(self, action: WorkflowAction, event: WorkflowTriggerEvent) -> None:
        status = action.config.get("status")
        if not event.lead_id or not status:
            logger.info("update_lead_status skipped: no lead or status")
            return

        await self.leads.update_lead(
            event.lead_id,
            event.organization_id,
            LeadUpdate(status=LeadStatus(status))
        )

    async def _call_webhook(self, action: WorkflowAction, event: WorkflowTriggerEvent) -> None:
        url = action.config.get("url")
        if not url:
            raise ValueError("webhook action has no url")

        payload = {
            "organizationId": event.organization_id,
            "leadId": event.lead_id,
            "callId": event.call_id,
            "appointmentId": event.appointment_id,
            "data": event.trigger_data,
        }
        timeout = get_settings().WORKFLOW_WEBHOOK_TIMEOUT_SECONDS
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(url, json=payload)
            response.raise_for_status()

        logger.info(f"Workflow webhook delivered to {url}")

    async def _record_only(self, action: WorkflowAction, event: WorkflowTriggerEvent) -> None:
        # No delivery channel for these actions in this service.
        logger.info(
            f"Workflow action {action.type} for lead {event.lead_id}: {action.config}"
        )


# Singleton instance
workflow_engine = WorkflowEngine()
