"""Outbound Call Initiator - Places a call to a lead through Vapi."""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ValidationError as PydanticValidationError

from fusioncaller.core.config import get_settings
from fusioncaller.core.database import DatabaseService, db_service
from fusioncaller.core.exceptions import DownstreamError, NotFoundError, PersistenceError
from fusioncaller.integrations.vapi import VapiService, vapi_service
from fusioncaller.models import (
    CallNotPlaced,
    CallOutcome,
    CallPlaced,
    CallRequest,
    CallSchedule,
)
from fusioncaller.services.lead_repository import LeadRepository, lead_repository

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def check_schedule(schedule: Optional[CallSchedule], now: datetime) -> Optional[str]:
    """
    Check the calling window.

    Returns:
        None when calling is allowed, otherwise the reason it is not
    """
    if schedule is None:
        return "No schedule configured"

    try:
        local = now.astimezone(ZoneInfo(schedule.timezone))
    except (ZoneInfoNotFoundError, ValueError):
        return f"Unknown schedule timezone: {schedule.timezone}"

    weekday = local.strftime("%A").lower()
    if weekday not in {day.lower() for day in schedule.enabled_days}:
        return f"Calling not enabled on {weekday}"

    current_time = local.strftime("%H:%M")
    if current_time < schedule.start_time:
        return f"Too early - calls start at {schedule.start_time}"
    if current_time > schedule.end_time:
        return f"Too late - calls end at {schedule.end_time}"

    return None


class OutboundCallInitiator:
    """
    Starts outbound calls for leads.

    Every reason a call cannot be placed comes back as CallNotPlaced, so the
    caller must handle the "lead exists, no call" branch explicitly. Database
    bookkeeping after Vapi accepted the call never changes the outcome.
    """

    def __init__(
        self,
        database: Optional[DatabaseService] = None,
        leads: Optional[LeadRepository] = None,
        vapi: Optional[VapiService] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.database = database or db_service
        self.leads = leads or lead_repository
        self.vapi = vapi or vapi_service
        self.clock = clock

    async def initiate_call(self, request: CallRequest) -> CallOutcome:
        """Try to place a call. Never raises for business or downstream failures."""
        try:
            return await self._initiate(request)
        except (PersistenceError, DownstreamError) as e:
            logger.error(f"Call for lead {request.lead_id} not placed: {e.message}")
            return CallNotPlaced(reason=e.message)
        except PydanticValidationError as e:
            logger.error(f"Call for lead {request.lead_id} not placed, malformed dialer row: {e}")
            return CallNotPlaced(reason="Invalid dialer configuration")

    async def _initiate(self, request: CallRequest) -> CallOutcome:
        organization_id = request.organization_id
        now = self.clock()
        today = now.date().isoformat()

        # Agent config
        agent_config = await self.database.get_agent_config(organization_id)
        if agent_config is None:
            return self._not_placed(request, "Agent not configured")
        if not agent_config.outbound_agent_id:
            return self._not_placed(request, "Outbound agent not set up yet")
        if not agent_config.outbound_enabled:
            return self._not_placed(request, "Outbound calling is disabled")

        # Phone resource
        if request.phone_number_id:
            phone_number = await self.database.get_phone_number(
                request.phone_number_id, organization_id
            )
        else:
            phone_number = await self.database.get_active_outbound_number(organization_id)

        if phone_number is None:
            return self._not_placed(request, "No outbound phone number available")
        if not phone_number.provider_phone_id:
            return self._not_placed(request, "Phone number is not provisioned with the dialer")

        if phone_number.last_reset_date != today:
            await self.database.reset_phone_number_counter(phone_number.id, today)
            phone_number.calls_today = 0
            phone_number.last_reset_date = today

        if phone_number.daily_limit is not None and phone_number.calls_today >= phone_number.daily_limit:
            return self._not_placed(request, "Daily call limit reached for this phone number")

        # Per-lead limit
        max_per_lead = get_settings().MAX_CALLS_PER_LEAD_PER_DAY
        call_limit = await self.database.get_call_limit(organization_id, request.lead_id, today)
        if call_limit and call_limit.calls_today >= max_per_lead:
            return self._not_placed(request, f"Maximum {max_per_lead} calls per lead per day reached")

        # Lead
        try:
            lead = await self.leads.get_lead(request.lead_id, organization_id)
        except NotFoundError:
            return self._not_placed(request, "Lead not found")

        if not lead.phone:
            return self._not_placed(request, "Lead has no phone number")

        # Schedule
        reason = check_schedule(agent_config.schedule, now)
        if reason:
            return self._not_placed(request, reason)

        call_data = await self.vapi.create_call(
            assistant_id=agent_config.outbound_agent_id,
            provider_phone_id=phone_number.provider_phone_id,
            customer_number=lead.phone,
            customer_name=lead.name,
            metadata={
                "organizationId": organization_id,
                "leadId": lead.id,
                "phoneNumberId": phone_number.id,
            }
        )
        call_id = call_data["id"]

        # Bookkeeping
        await self.database.log_outbound_call(
            organization_id=organization_id,
            lead_id=lead.id,
            provider_call_id=call_id,
            from_number=phone_number.phone_number,
            to_number=lead.phone,
            raw_payload=call_data,
        )
        await self.database.update_phone_number_calls(phone_number.id, phone_number.calls_today + 1)
        if call_limit:
            await self.database.update_call_limit(call_limit.id, call_limit.calls_today + 1)
        else:
            await self.database.create_call_limit(organization_id, lead.id, phone_number.id, today)
        await self.database.update_agent_calls(agent_config.id, agent_config.calls_made_today + 1)

        logger.info(f"Call {call_id} placed for lead {lead.id}")
        return CallPlaced(call_id=call_id, phone_number_id=phone_number.id)

    @staticmethod
    def _not_placed(request: CallRequest, reason: str) -> CallNotPlaced:
        logger.warning(f"Call for lead {request.lead_id} not placed: {reason}")
        return CallNotPlaced(reason=reason)


# Singleton instance
call_initiator = OutboundCallInitiator()
