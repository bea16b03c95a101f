"""Intelligence module - Service classification agents and crews."""

from fusioncaller.intelligence.service_detector import (
    ServiceDetector,
    DetectorConfig,
    DEFAULT_DETECTOR_CONFIG,
    service_detector,
)

__all__ = [
    "ServiceDetector",
    "DetectorConfig",
    "DEFAULT_DETECTOR_CONFIG",
    "service_detector",
]
