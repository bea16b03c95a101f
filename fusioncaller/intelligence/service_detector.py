"""Service Detector - Classifies form text into a service category."""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from fusioncaller.models import (
    ClassifierOutput,
    ExtractedDetails,
    PropertyType,
    ServiceDetectionResult,
    Urgency,
)

logger = logging.getLogger(__name__)


# Confidence for each tier of the cascade.
EXPLICIT_CONFIDENCE = 1.0
MODEL_CONFIDENCE = 0.8
KEYWORD_CONFIDENCE = 0.6
DEFAULT_CONFIDENCE = 0.3

GENERAL_SERVICE = "General Service"


SYSTEM_PROMPT = (
    "You are an expert at analyzing customer inquiries for service businesses. "
    "Extract structured information from customer requests."
)

PROMPT_TEMPLATE = """Analyze the following customer inquiry and determine what service they need.

Text: "{text}"

Respond with a JSON object containing:
- serviceType: The primary service requested (e.g., "House Washing", "Driveway Cleaning", "Roof Cleaning", "Commercial Pressure Washing", "Deck Staining")
- detectedServices: Array of all services mentioned
- propertyType: "residential", "commercial", or "unknown"
- urgency: "high", "medium", or "low" based on language cues
- budget: Any budget mentioned
- timeline: Any timeline mentioned
- location: Any location details mentioned

If unclear, infer from context. For pressure washing businesses, common services include: House Washing, Driveway Cleaning, Deck Cleaning, Fence Cleaning, Roof Cleaning, Commercial Building Washing, Parking Lot Cleaning, etc.

Return ONLY valid JSON, no markdown or additional text."""

# Checked in order; the first keyword found in the text wins.
SERVICE_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("house wash", "House Washing"),
    ("house cleaning", "House Washing"),
    ("driveway", "Driveway Cleaning"),
    ("deck", "Deck Cleaning"),
    ("fence", "Fence Cleaning"),
    ("roof", "Roof Cleaning"),
    ("commercial", "Commercial Pressure Washing"),
    ("parking lot", "Parking Lot Cleaning"),
    ("building wash", "Commercial Building Washing"),
    ("soft wash", "Soft Washing"),
    ("pressure wash", "Pressure Washing"),
)


@dataclass(frozen=True)
class DetectorConfig:
    """Immutable prompt and keyword configuration for a ServiceDetector."""
    keywords: Tuple[Tuple[str, str], ...] = SERVICE_KEYWORDS
    prompt_template: str = PROMPT_TEMPLATE
    system_prompt: str = SYSTEM_PROMPT
    default_service: str = GENERAL_SERVICE


DEFAULT_DETECTOR_CONFIG = DetectorConfig()


class TextClassifier(Protocol):
    """Anything that can turn a prompt into a ClassifierOutput."""

    async def classify(self, prompt: str, system_prompt: str) -> ClassifierOutput:
        ...


def _coerce_property_type(value: Optional[str]) -> PropertyType:
    try:
        return PropertyType((value or "").strip().lower())
    except ValueError:
        return PropertyType.UNKNOWN


def _coerce_urgency(value: Optional[str]) -> Urgency:
    try:
        return Urgency((value or "").strip().lower())
    except ValueError:
        return Urgency.MEDIUM


class ServiceDetector:
    """
    Three-tier service classification cascade.

    1. An explicit service type from the form wins outright (1.0).
    2. Otherwise the classifier model is asked (0.8).
    3. If the model fails or replies with garbage, keyword matching (0.6).
    4. If no keyword matches, the generic label (0.3).
    """

    def __init__(
        self,
        classifier: Optional[TextClassifier] = None,
        config: DetectorConfig = DEFAULT_DETECTOR_CONFIG
    ):
        """Initialize detector with an optional classifier override."""
        self._classifier = classifier
        self.config = config

    @property
    def classifier(self) -> TextClassifier:
        """Lazy load the crew-backed classifier."""
        if self._classifier is None:
            from fusioncaller.intelligence.crews.classification import ClassificationCrew
            self._classifier = ClassificationCrew()
        return self._classifier

    async def detect(
        self,
        text: str,
        explicit_type: Optional[str] = None
    ) -> ServiceDetectionResult:
        """
        Detect the requested service.

        Args:
            text: Free text from the form
            explicit_type: Service type the sender already chose, if any

        Returns:
            ServiceDetectionResult from the first tier that answered
        """
        if explicit_type and explicit_type.strip():
            service = explicit_type.strip()
            return ServiceDetectionResult(
                service_type=service,
                confidence=EXPLICIT_CONFIDENCE,
                detected_services=[service],
            )

        try:
            prompt = self.config.prompt_template.format(text=text)
            output = await self.classifier.classify(prompt, self.config.system_prompt)
            return self._from_model(output)
        except Exception as e:
            logger.warning(f"Service classification failed, using keyword fallback: {e}")

        return self.match_keywords(text)

    def match_keywords(self, text: str) -> ServiceDetectionResult:
        """Keyword fallback, then the generic default."""
        lowered = (text or "").lower()

        for keyword, service in self.config.keywords:
            if keyword in lowered:
                logger.info(f"Keyword '{keyword}' matched service {service}")
                return ServiceDetectionResult(
                    service_type=service,
                    confidence=KEYWORD_CONFIDENCE,
                    detected_services=[service],
                )

        return ServiceDetectionResult(
            service_type=self.config.default_service,
            confidence=DEFAULT_CONFIDENCE,
            detected_services=[self.config.default_service],
        )

    def _from_model(self, output: ClassifierOutput) -> ServiceDetectionResult:
        service = (output.service_type or "").strip() or self.config.default_service
        detected = [s for s in (output.detected_services or []) if s and s.strip()]

        result = ServiceDetectionResult(
            service_type=service,
            confidence=MODEL_CONFIDENCE,
            detected_services=detected or [service],
            extracted_details=ExtractedDetails(
                property_type=_coerce_property_type(output.property_type),
                urgency=_coerce_urgency(output.urgency),
                budget=output.budget,
                timeline=output.timeline,
                location=output.location,
            ),
        )
        logger.info(f"Classifier detected service: {service}")
        return result


# Singleton instance
service_detector = ServiceDetector()
