"""
Job description selector.

Maps the candidate's free-form choice ("number two", "the auditor role") to
one of the configured job description identifiers.
"""

from __future__ import annotations

import logging

from screening_interviewer.agents.base import ExtractionAgent
from screening_interviewer.models.llm_client import LLMError, Message

logger = logging.getLogger(__name__)

NO_MATCH = "N/A"


class JobDescriptionSelector(ExtractionAgent):
    """Resolves a spoken or typed selection to a known JD identifier."""

    SELECTION_PROMPT = (
        "You are a file selection expert. Available files: {files}. "
        "The candidate may answer with the position of the file in this list "
        "(starting at 1) or with the role name. "
        "Return ONLY the exact filename with extension that the user selected. "
        "If unclear, return '{no_match}'."
    )

    async def resolve(self, utterance: str, available_ids: list[str] | tuple[str, ...]) -> str | None:
        """
        Resolve the candidate's selection.

        Args:
            utterance: What the candidate said.
            available_ids: Valid identifiers, in the order they were offered.

        Returns:
            One of ``available_ids``, or None when nothing valid was matched.
        """
        if not available_ids:
            return None

        prompt = self.SELECTION_PROMPT.format(files=", ".join(available_ids), no_match=NO_MATCH)
        try:
            answer = await self._ask(
                [
                    Message(role="system", content=prompt),
                    Message(role="user", content=utterance),
                ],
                temperature=0.0,
                max_tokens=50,
            )
        except LLMError as e:
            logger.error(f"JD selection failed: {e}")
            return None

        chosen = answer.strip().strip("'\"`").strip()
        if not chosen or chosen.upper() == NO_MATCH:
            logger.info("JD selection unclear")
            return None
        if chosen not in available_ids:
            logger.warning(f"JD selection returned an unknown identifier: {chosen!r}")
            return None
        return chosen
