"""Agent factories for CrewAI agents."""

from fusioncaller.intelligence.agents.service_classifier import ServiceClassifierAgentFactory

__all__ = [
    "ServiceClassifierAgentFactory",
]
