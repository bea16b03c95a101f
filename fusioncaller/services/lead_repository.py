"""Lead Repository - Create and update rows in the leads table."""

import logging
from typing import List, Optional

from fusioncaller.core.database import DatabaseService, db_service, utc_now_iso
from fusioncaller.core.exceptions import NotFoundError, PersistenceError, ValidationError
from fusioncaller.models import (
    FormSubmission,
    Lead,
    LeadCreate,
    LeadStatus,
    LeadUpdate,
    PropertyType,
    ServiceDetectionResult,
)

logger = logging.getLogger(__name__)


def compose_lead_notes(
    source: str,
    message: Optional[str],
    detected_services: List[str]
) -> str:
    """Provenance notes stored on a lead created from a form."""
    return (
        f"Source: {source}\n"
        f"Message: {message or 'N/A'}\n"
        f"Detected Services: {', '.join(detected_services)}"
    )


def resolve_property_type(
    detection: ServiceDetectionResult,
    submitted: Optional[PropertyType]
) -> PropertyType:
    """Detector's property type, then the submitted one, then unknown."""
    detected = detection.extracted_details.property_type
    if detected and detected != PropertyType.UNKNOWN:
        return detected
    return submitted or PropertyType.UNKNOWN


def build_lead_from_submission(
    organization_id: str,
    submission: FormSubmission,
    detection: ServiceDetectionResult
) -> LeadCreate:
    """Redistribute a form submission and its detection result into lead columns."""
    return LeadCreate(
        organization_id=organization_id,
        name=submission.name or "",
        phone=submission.phone or "",
        email=submission.email or None,
        address=submission.address or None,
        city=submission.city or None,
        state=submission.state or None,
        zip_code=submission.zip_code or None,
        service_type=detection.service_type,
        property_type=resolve_property_type(detection, submission.property_type),
        status=LeadStatus.NEW,
        notes=compose_lead_notes(
            submission.source_tag,
            submission.free_text,
            detection.detected_services
        ),
    )


class LeadRepository:
    """
    Row-level access to the leads table.

    Every read and update filters on both id and organization_id, so a lead
    belonging to another organization is indistinguishable from a missing one.
    """

    TABLE_NAME = "leads"

    def __init__(self, database: Optional[DatabaseService] = None):
        self._database = database

    @property
    def database(self) -> DatabaseService:
        if self._database is None:
            self._database = db_service
        return self._database

    async def create_lead(self, fields: LeadCreate) -> Lead:
        """
        Insert a new lead. Status is always ``new``.

        Raises:
            ValidationError: name or phone is blank
            PersistenceError: the insert failed or returned no row
        """
        if not fields.name.strip() or not fields.phone.strip():
            raise ValidationError("Name and phone are required")

        data = fields.model_dump(mode="json")
        data["status"] = LeadStatus.NEW.value

        try:
            response = self.database.client.table(self.TABLE_NAME).insert(data).execute()
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Failed to create lead: {e}")
            raise PersistenceError(f"Failed to create lead: {e}") from e

        if not response.data:
            logger.error("Lead insert returned no data")
            raise PersistenceError("Failed to create lead")

        lead = Lead(**response.data[0])
        logger.info(f"Created lead {lead.id} for organization {lead.organization_id}")
        return lead

    async def get_lead(self, lead_id: str, organization_id: str) -> Lead:
        """Fetch a lead within an organization."""
        try:
            response = (
                self.database.client.table(self.TABLE_NAME)
                .select("*")
                .eq("id", lead_id)
                .eq("organization_id", organization_id)
                .limit(1)
                .execute()
            )
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Failed to get lead {lead_id}: {e}")
            raise PersistenceError(f"Failed to get lead {lead_id}") from e

        if not response.data:
            raise NotFoundError("Lead not found")

        return Lead(**response.data[0])

    async def update_lead(
        self,
        lead_id: str,
        organization_id: str,
        fields: LeadUpdate
    ) -> Lead:
        """
        Apply a partial update to a lead within an organization.

        Raises:
            NotFoundError: no lead with this id in this organization
            PersistenceError: the update failed
        """
        updates = fields.changes()
        if not updates:
            return await self.get_lead(lead_id, organization_id)

        updates["updated_at"] = utc_now_iso()

        try:
            response = (
                self.database.client.table(self.TABLE_NAME)
                .update(updates)
                .eq("id", lead_id)
                .eq("organization_id", organization_id)
                .execute()
            )
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Failed to update lead {lead_id}: {e}")
            raise PersistenceError(f"Failed to update lead {lead_id}") from e

        if not response.data:
            logger.warning(f"Update matched no lead {lead_id} in {organization_id}")
            raise NotFoundError("Lead not found")

        logger.info(f"Updated lead {lead_id}: {list(updates.keys())}")
        return Lead(**response.data[0])


# Singleton instance
lead_repository = LeadRepository()
