"""Classification Crew - Runs the service classifier with async support."""

import asyncio
import json
import logging
import re
from crewai import Crew, Process
from pydantic import ValidationError as PydanticValidationError

from fusioncaller.core.exceptions import DownstreamError
from fusioncaller.intelligence.agents.service_classifier import ServiceClassifierAgentFactory
from fusioncaller.models import ClassifierOutput

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\n?|\n?```")


def parse_classifier_reply(raw: str) -> ClassifierOutput:
    """
    Parse a raw model reply into ClassifierOutput.

    Markdown code fences are stripped first. Anything that is not a JSON
    object raises DownstreamError.
    """
    cleaned = _CODE_FENCE.sub("", raw or "").strip()
    if not cleaned:
        raise DownstreamError("Empty reply from classifier")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise DownstreamError(f"Unparseable classifier reply: {e}") from e

    if not isinstance(data, dict):
        raise DownstreamError("Classifier reply is not a JSON object")

    try:
        return ClassifierOutput.model_validate(data)
    except PydanticValidationError as e:
        raise DownstreamError(f"Classifier reply has unexpected shape: {e}") from e


class ClassificationCrew:
    """
    Single-agent crew that classifies one inquiry.

    CrewAI is synchronous, so classify() runs the crew in a worker thread
    to keep the event loop free.
    """

    async def classify(self, prompt: str, system_prompt: str) -> ClassifierOutput:
        """Classify an inquiry. Raises DownstreamError on any failure."""
        return await asyncio.to_thread(self.run, prompt, system_prompt)

    def run(self, prompt: str, system_prompt: str) -> ClassifierOutput:
        agent = ServiceClassifierAgentFactory.create(system_prompt)
        task = ServiceClassifierAgentFactory.create_classification_task(agent, prompt)

        crew = Crew(
            agents=[agent],
            tasks=[task],
            process=Process.sequential,
            verbose=False
        )

        try:
            crew.kickoff()
        except Exception as e:
            logger.error(f"Classification crew failed: {e}")
            raise DownstreamError(f"Classifier call failed: {e}") from e

        if task.output is None:
            raise DownstreamError("Classifier returned no output")

        if task.output.pydantic:
            return task.output.pydantic

        logger.debug("Classifier returned no structured output, parsing raw reply")
        return parse_classifier_reply(task.output.raw)
