"""Crew orchestrators for classification."""

from fusioncaller.intelligence.crews.classification import ClassificationCrew, parse_classifier_reply

__all__ = [
    "ClassificationCrew",
    "parse_classifier_reply",
]
