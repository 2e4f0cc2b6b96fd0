"""
Dynamic question generator.

Generates one job-description-grounded interview question per call, using
the recent conversation as context.
"""

from __future__ import annotations

import logging

from screening_interviewer.agents.base import DEFAULT_TIMEOUT, ExtractionAgent
from screening_interviewer.models.llm_client import LLMClientBase, LLMError, Message
from screening_interviewer.orchestrator.schemas import HistoryTurn, TurnRole

logger = logging.getLogger(__name__)

MIN_QUESTION_LENGTH = 20

SHORT_QUESTION_FALLBACK = (
    "For question {ordinal}, describe a complex challenge you solved that aligns with the role."
)
FAILED_QUESTION_FALLBACK = (
    "For question {ordinal}, tell me about a relevant project from your experience."
)

_ROLE_MAP = {
    TurnRole.CANDIDATE: "user",
    TurnRole.INTERVIEWER: "assistant",
}


class QuestionGenerator(ExtractionAgent):
    """Asks the backend for the next screening question."""

    QUESTION_PROMPT = """You are the {organization} AI Interviewer conducting question Q{ordinal}.
JD: {jd_text}

Based on conversation history and JD, generate ONE relevant, challenging technical or value-based question. Must be under 30 words. Return ONLY the question.
Candidate Name: {candidate_name}."""

    def __init__(
        self,
        llm_client: LLMClientBase,
        timeout: float = DEFAULT_TIMEOUT,
        organization: str = "KPMG",
    ) -> None:
        super().__init__(llm_client, timeout=timeout)
        self._organization = organization

    @staticmethod
    def _history_messages(history: list[HistoryTurn]) -> list[Message]:
        return [Message(role=_ROLE_MAP[turn.role], content=turn.content) for turn in history]

    async def generate(
        self,
        jd_text: str,
        candidate_name: str | None,
        history: list[HistoryTurn],
        ordinal: int,
    ) -> str:
        """
        Generate the question with the given 1-based ordinal.

        Args:
            jd_text: Selected job description.
            candidate_name: Extracted name, if known.
            history: Recent transcript window, oldest first.
            ordinal: Number of the question being asked.

        Returns:
            The question text, or a fixed fallback question.
        """
        prompt = self.QUESTION_PROMPT.format(
            organization=self._organization,
            ordinal=ordinal,
            jd_text=jd_text,
            candidate_name=candidate_name or "Candidate",
        )
        messages = [Message(role="system", content=prompt), *self._history_messages(history)]

        try:
            question = await self._ask(messages, temperature=0.7, max_tokens=100)
        except LLMError as e:
            logger.error(f"Error generating question {ordinal}: {e}")
            return FAILED_QUESTION_FALLBACK.format(ordinal=ordinal)

        if len(question) < MIN_QUESTION_LENGTH:
            logger.warning(f"Generated question {ordinal} too short ({len(question)} chars)")
            return SHORT_QUESTION_FALLBACK.format(ordinal=ordinal)
        return question
