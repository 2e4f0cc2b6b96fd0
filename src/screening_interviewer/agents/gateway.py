"""
Semantic extraction gateway.

Single entry point the orchestrator uses for everything that needs the
understanding backend. All four operations degrade to a fallback value
instead of raising, so a backend outage never breaks a session.
"""

from __future__ import annotations

from screening_interviewer.agents.base import DEFAULT_TIMEOUT
from screening_interviewer.agents.jd_selector import JobDescriptionSelector
from screening_interviewer.agents.name_extractor import NameExtractor
from screening_interviewer.agents.question_generator import QuestionGenerator
from screening_interviewer.agents.response_assessor import ResponseAssessor
from screening_interviewer.models.llm_client import LLMClientBase
from screening_interviewer.orchestrator.schemas import HistoryTurn, TurnAssessment


class SemanticExtractionGateway:
    """Facade over the four extraction agents sharing one backend client."""

    def __init__(
        self,
        llm_client: LLMClientBase,
        timeout: float = DEFAULT_TIMEOUT,
        organization: str = "KPMG",
    ) -> None:
        """
        Initialize the gateway.

        Args:
            llm_client: Backend client shared by all agents.
            timeout: Upper bound in seconds for each backend round-trip.
            organization: Organization named in the backend instructions.
        """
        self._llm_client = llm_client
        self._selector = JobDescriptionSelector(llm_client, timeout=timeout)
        self._name_extractor = NameExtractor(llm_client, timeout=timeout)
        self._assessor = ResponseAssessor(llm_client, timeout=timeout, organization=organization)
        self._question_generator = QuestionGenerator(
            llm_client, timeout=timeout, organization=organization
        )

    async def resolve_selection(
        self, utterance: str, available_ids: list[str] | tuple[str, ...]
    ) -> str | None:
        """Resolve a JD selection; None when nothing valid matched."""
        return await self._selector.resolve(utterance, available_ids)

    async def extract_name(self, utterance: str) -> str | None:
        """Extract the candidate's name; None when none was found."""
        return await self._name_extractor.extract(utterance)

    async def assess_response(
        self, utterance: str, jd_text: str, candidate_name: str | None
    ) -> TurnAssessment:
        """Assess an answer; a degraded assessment on failure."""
        return await self._assessor.assess(utterance, jd_text, candidate_name)

    async def generate_question(
        self,
        jd_text: str,
        candidate_name: str | None,
        history: list[HistoryTurn],
        ordinal: int,
    ) -> str:
        """Generate the next question; a fixed fallback question on failure."""
        return await self._question_generator.generate(jd_text, candidate_name, history, ordinal)

    async def close(self) -> None:
        await self._llm_client.close()
