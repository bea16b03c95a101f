"""Vapi integration for outbound calling."""

import logging
from typing import Optional, Dict, Any
import httpx

from fusioncaller.core.config import get_settings
from fusioncaller.core.exceptions import DownstreamError

logger = logging.getLogger(__name__)


class VapiService:
    """
    Service for Vapi API operations.

    Places outbound phone calls through an organization's outbound
    assistant and phone number.
    """

    def __init__(self):
        """Initialize service with settings."""
        self._settings = None

    @property
    def settings(self):
        """Lazy load settings."""
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    async def create_call(
        self,
        assistant_id: str,
        provider_phone_id: str,
        customer_number: str,
        customer_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Create an outbound call via the Vapi API.

        Args:
            assistant_id: Outbound assistant configured for the organization
            provider_phone_id: Vapi ID of the number to call from
            customer_number: Number to dial
            customer_name: Name the assistant may greet
            metadata: Echoed back on Vapi webhooks

        Returns:
            Call payload returned by Vapi (contains ``id``)

        Raises:
            DownstreamError: missing key, non-2xx response, timeout or transport error
        """
        if not self.settings.VAPI_API_KEY:
            raise DownstreamError("Vapi API key not configured")

        customer: Dict[str, Any] = {"number": customer_number}
        if customer_name:
            customer["name"] = customer_name

        payload: Dict[str, Any] = {
            "assistantId": assistant_id,
            "phoneNumberId": provider_phone_id,
            "customer": customer,
        }

        if metadata:
            payload["metadata"] = metadata

        headers = {
            "Authorization": f"Bearer {self.settings.VAPI_API_KEY}",
            "Content-Type": "application/json"
        }

        try:
            async with httpx.AsyncClient(timeout=self.settings.VAPI_TIMEOUT_SECONDS) as client:
                response = await client.post(
                    f"{self.settings.VAPI_API_URL}/call/phone",
                    json=payload,
                    headers=headers
                )
        except httpx.TimeoutException as e:
            logger.error("Vapi API timeout")
            raise DownstreamError("Vapi API timeout") from e
        except httpx.HTTPError as e:
            logger.error(f"Vapi API error: {e}")
            raise DownstreamError(f"Vapi API error: {e}") from e

        if not response.is_success:
            logger.error(f"Vapi API error: {response.status_code} - {response.text}")
            raise DownstreamError("Failed to initiate call")

        data = response.json()
        if not data.get("id"):
            logger.error(f"Vapi response missing call id: {data}")
            raise DownstreamError("Vapi response missing call id")

        logger.info(f"Vapi call created: {data['id']}")
        return data


# Singleton instance
vapi_service = VapiService()
