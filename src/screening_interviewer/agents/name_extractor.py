"""Candidate name extraction."""

from __future__ import annotations

import logging

from screening_interviewer.agents.base import ExtractionAgent
from screening_interviewer.models.llm_client import LLMError, Message

logger = logging.getLogger(__name__)

NO_NAME = "N/A"


class NameExtractor(ExtractionAgent):
    """Pulls the candidate's full name out of an introduction."""

    NAME_PROMPT = (
        "Extract the full name from the text. Return ONLY the name. "
        f"If no name found, return '{NO_NAME}'."
    )

    async def extract(self, utterance: str) -> str | None:
        """
        Extract a name.

        Surrounding quote characters are trimmed; the no-name sentinel is matched
        case-insensitively. The name keeps the casing the backend returned.

        Args:
            utterance: What the candidate said.

        Returns:
            The name, or None if none was found.
        """
        try:
            answer = await self._ask(
                [
                    Message(role="system", content=self.NAME_PROMPT),
                    Message(role="user", content=utterance),
                ],
                temperature=0.0,
                max_tokens=50,
            )
        except LLMError as e:
            logger.error(f"Error extracting name: {e}")
            return None

        name = answer.strip().strip("'\"`").strip()
        if not name or name.upper() == NO_NAME:
            return None
        return name
