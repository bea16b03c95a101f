"""Result models for the intake pipeline."""

from typing import Optional, List
from pydantic import BaseModel, Field

from fusioncaller.models.enums import IntakeState


class IntakeResult(BaseModel):
    """Outcome of one form submission."""
    lead_id: str = Field(..., description="Created lead ID")
    call_id: Optional[str] = Field(None, description="Dialer call ID when a call was placed")
    message: str = Field(..., description="Human readable outcome")
    state: IntakeState = Field(IntakeState.RESPONDED, description="Final pipeline state")
    states: List[IntakeState] = Field(
        default_factory=list,
        description="States visited, in order"
    )
