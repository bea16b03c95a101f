"""Service Classifier Agent for form submission text."""

import logging
from crewai import Agent, Task, LLM

from fusioncaller.core.config import get_settings
from fusioncaller.models import ClassifierOutput

logger = logging.getLogger(__name__)


class ServiceClassifierAgentFactory:
    """Factory for creating the Service Classifier Agent."""

    @staticmethod
    def create(system_prompt: str) -> Agent:
        """Create a low-temperature classifier agent."""
        settings = get_settings()

        llm = LLM(
            model=settings.OPENAI_MODEL,
            api_key=settings.OPENAI_API_KEY or None,
            temperature=settings.CLASSIFIER_TEMPERATURE,
            max_tokens=settings.CLASSIFIER_MAX_TOKENS,
        )

        return Agent(
            role="Service Request Classifier",
            goal="""Turn a customer's free-text inquiry into a structured
            service request for a home and commercial services business.""",
            backstory=system_prompt,
            llm=llm,
            verbose=settings.DEBUG,
            allow_delegation=False,
            memory=False
        )

    @staticmethod
    def create_classification_task(agent: Agent, prompt: str) -> Task:
        """Create a classification task for one inquiry."""
        return Task(
            description=prompt,
            expected_output="Structured JSON matching the ClassifierOutput schema",
            agent=agent,
            output_pydantic=ClassifierOutput
        )
