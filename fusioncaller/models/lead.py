"""Lead-related models - Form submissions and lead rows."""

from typing import Optional, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field

from fusioncaller.core.resolvers import first_non_empty
from fusioncaller.models.enums import LeadStatus, PropertyType


class FormSubmission(BaseModel):
    """
    Inbound form webhook body from an ad platform or website form.

    ``name`` and ``phone`` are optional here so that their absence is
    reported by the intake orchestrator as a 400 with a fixed message
    instead of a schema error.
    """
    organization_id: Optional[str] = Field(None, alias="organizationId")
    name: Optional[str] = Field(None, description="Contact name")
    phone: Optional[str] = Field(None, description="Contact phone as submitted")
    email: Optional[str] = Field(None, description="Contact email")
    address: Optional[str] = Field(None, description="Street address")
    city: Optional[str] = Field(None, description="City")
    state: Optional[str] = Field(None, description="State or region")
    zip_code: Optional[str] = Field(None, alias="zipCode")
    service_type: Optional[str] = Field(None, alias="serviceType")
    message: Optional[str] = Field(None, description="Free-text request")
    description: Optional[str] = Field(None, description="Alternate free-text field")
    comments: Optional[str] = Field(None, description="Alternate free-text field")
    property_type: Optional[PropertyType] = Field(None, alias="propertyType")
    budget: Optional[str] = Field(None, description="Budget as typed by the customer")
    timeline: Optional[str] = Field(None, description="Timeline as typed by the customer")
    source: Optional[str] = Field("form", description="Lead source tag (facebook, google, form)")
    auto_call: Optional[bool] = Field(None, alias="autoCall")
    metadata: Optional[Dict[str, Any]] = Field(default_factory=dict)

    class Config:
        populate_by_name = True
        extra = "ignore"
        coerce_numbers_to_str = True

    @property
    def free_text(self) -> Optional[str]:
        """First non-empty of message, description and comments."""
        return first_non_empty(self.message, self.description, self.comments)

    @property
    def detection_text(self) -> str:
        """Text handed to the service detector."""
        return self.free_text or f"{self.service_type or ''} {self.address or ''}".strip()

    @property
    def source_tag(self) -> str:
        return first_non_empty(self.source) or "form"

    @property
    def should_auto_call(self) -> bool:
        """Auto-call is on unless the sender explicitly disabled it."""
        return self.auto_call is not False


class LeadCreate(BaseModel):
    """Columns written when a lead is inserted."""
    organization_id: str
    name: str
    phone: str
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    service_type: Optional[str] = None
    property_type: PropertyType = PropertyType.UNKNOWN
    status: LeadStatus = LeadStatus.NEW
    notes: Optional[str] = None


class LeadUpdate(BaseModel):
    """Partial lead update. organization_id cannot be changed."""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    service_type: Optional[str] = None
    property_type: Optional[PropertyType] = None
    status: Optional[LeadStatus] = None
    notes: Optional[str] = None

    class Config:
        extra = "forbid"

    def changes(self) -> Dict[str, Any]:
        """Only the fields the caller actually set, ready for the database."""
        return self.model_dump(mode="json", exclude_unset=True)


class Lead(BaseModel):
    """Database record for a lead."""
    id: str
    organization_id: str
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    service_type: Optional[str] = None
    property_type: Optional[PropertyType] = None
    status: LeadStatus = LeadStatus.NEW
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        extra = "ignore"
