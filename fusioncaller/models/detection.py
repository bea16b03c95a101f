"""Service detection models."""

from typing import Optional, List
from pydantic import BaseModel, Field

from fusioncaller.models.enums import PropertyType, Urgency


class ExtractedDetails(BaseModel):
    """Details pulled out of the customer's free text."""
    property_type: Optional[PropertyType] = None
    urgency: Optional[Urgency] = None
    budget: Optional[str] = None
    timeline: Optional[str] = None
    location: Optional[str] = None


class ServiceDetectionResult(BaseModel):
    """Outcome of classifying one form submission."""
    service_type: str = Field(..., description="Primary service label")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Policy confidence for the tier that answered")
    detected_services: List[str] = Field(default_factory=list)
    extracted_details: ExtractedDetails = Field(default_factory=ExtractedDetails)


class ClassifierOutput(BaseModel):
    """Structured reply expected from the classification model."""
    service_type: Optional[str] = Field(None, alias="serviceType")
    detected_services: Optional[List[str]] = Field(None, alias="detectedServices")
    property_type: Optional[str] = Field(None, alias="propertyType")
    urgency: Optional[str] = None
    budget: Optional[str] = None
    timeline: Optional[str] = None
    location: Optional[str] = None

    class Config:
        populate_by_name = True
        extra = "ignore"
        coerce_numbers_to_str = True
