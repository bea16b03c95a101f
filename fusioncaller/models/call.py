"""Call-related models - Dialer configuration and call outcomes."""

from typing import Any, Optional, List, Union
from pydantic import BaseModel, Field, field_validator


def _counter(v: Any) -> Any:
    """NULL counter columns read as zero."""
    return 0 if v is None else v


class CallSchedule(BaseModel):
    """Calling window stored on the agent config as JSON."""
    enabled_days: List[str] = Field(default_factory=list, alias="enabledDays")
    start_time: str = Field("09:00", alias="startTime")
    end_time: str = Field("17:00", alias="endTime")
    timezone: str = Field("America/New_York")

    class Config:
        populate_by_name = True


class AgentConfig(BaseModel):
    """Per-organization voice agent configuration."""
    id: str
    organization_id: str
    outbound_agent_id: Optional[str] = None
    outbound_enabled: bool = False
    schedule: Optional[CallSchedule] = None
    calls_made_today: int = 0

    class Config:
        extra = "ignore"

    @field_validator("calls_made_today", mode="before")
    @classmethod
    def null_counter(cls, v: Any) -> Any:
        return _counter(v)


class PhoneNumber(BaseModel):
    """Telephony number owned by an organization."""
    id: str
    organization_id: str
    phone_number: str
    provider_phone_id: Optional[str] = None
    type: str = "both"
    daily_limit: Optional[int] = Field(None, description="Calls allowed per day; unset means no cap")
    calls_today: int = 0
    last_reset_date: Optional[str] = None
    active: bool = True

    class Config:
        extra = "ignore"

    @field_validator("calls_today", mode="before")
    @classmethod
    def null_counter(cls, v: Any) -> Any:
        return _counter(v)


class CallLimit(BaseModel):
    """Per-lead daily call counter."""
    id: str
    calls_today: int = 0
    last_reset_date: Optional[str] = None

    class Config:
        extra = "ignore"

    @field_validator("calls_today", mode="before")
    @classmethod
    def null_counter(cls, v: Any) -> Any:
        return _counter(v)


class CallRequest(BaseModel):
    """Input to the outbound call initiator."""
    organization_id: str
    lead_id: str
    phone_number_id: Optional[str] = None


class CallPlaced(BaseModel):
    """The dialer accepted the call."""
    call_id: str
    phone_number_id: str


class CallNotPlaced(BaseModel):
    """The call was not placed. The lead still exists."""
    reason: str


CallOutcome = Union[CallPlaced, CallNotPlaced]
