"""
Response assessor.

Scores a candidate answer for clarity and relevance against the selected job
description and extracts typed entities (certifications, years of
experience, tech stack, ...).
"""

from __future__ import annotations

import logging
import math
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from screening_interviewer.agents.base import DEFAULT_TIMEOUT, ExtractionAgent
from screening_interviewer.models.llm_client import (
    LLMClientBase,
    LLMError,
    Message,
    parse_json_object,
)
from screening_interviewer.orchestrator.schemas import ExtractedEntity, TurnAssessment

logger = logging.getLogger(__name__)

JD_EXCERPT_CHARS = 500


def _coerce_score(value: Any) -> int | None:
    """Accept 4, 4.0 or "4"; anything outside 1..5, non-finite or non-numeric becomes None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().split("/", 1)[0].strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    score = int(number)
    return score if 1 <= score <= 5 else None


class AssessmentEntity(BaseModel):
    """Entity as the backend reports it."""

    model_config = ConfigDict(extra="ignore")

    entity: str = Field(..., min_length=1, validation_alias=AliasChoices("entity", "type"))
    text: str = Field(..., min_length=1, validation_alias=AliasChoices("text", "value"))

    @field_validator("entity", "text", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip()
        return value


class AssessmentPayload(BaseModel):
    """Expected shape of the backend's assessment JSON."""

    model_config = ConfigDict(extra="ignore")

    clarity_score: int | None = Field(default=None, alias="ClarityScore")
    relevance_score: int | None = Field(default=None, alias="RelevanceScore")
    summary: str | None = Field(default=None, alias="Summary")
    extracted_entities: list[Any] = Field(default_factory=list, alias="ExtractedEntities")

    @field_validator("clarity_score", "relevance_score", mode="before")
    @classmethod
    def _score(cls, value: Any) -> int | None:
        return _coerce_score(value)

    @field_validator("summary", mode="before")
    @classmethod
    def _summary(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("extracted_entities", mode="before")
    @classmethod
    def _entities(cls, value: Any) -> Any:
        if value is None:
            return []
        return value

    def to_assessment(self) -> TurnAssessment:
        entities: list[ExtractedEntity] = []
        for item in self.extracted_entities:
            try:
                entity = AssessmentEntity.model_validate(item)
            except ValidationError:
                logger.debug(f"Dropping malformed entity: {item!r}")
                continue
            entities.append(ExtractedEntity(type=entity.entity, value=entity.text))

        return TurnAssessment(
            clarity_score=self.clarity_score,
            relevance_score=self.relevance_score,
            summary=self.summary or "Summary pending.",
            entities=entities,
        )


def parse_assessment(content: str) -> TurnAssessment | None:
    """
    Parse the backend's assessment output.

    Args:
        content: Raw backend response.

    Returns:
        The assessment, or None when the output does not fit the schema.
    """
    data = parse_json_object(content)
    if data is None:
        return None
    try:
        payload = AssessmentPayload.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Assessment output off-contract: {e.error_count()} error(s)")
        return None
    return payload.to_assessment()


class ResponseAssessor(ExtractionAgent):
    """Produces a structured assessment of one candidate answer."""

    ASSESSMENT_PROMPT = """You are a {organization} HR assessment agent. Candidate: {candidate_name}.
JD: {jd_excerpt}...

Analyze the response and return ONLY a JSON object:
{{
  "ClarityScore": 1-5,
  "RelevanceScore": 1-5,
  "Summary": "brief 1-sentence assessment",
  "ExtractedEntities": [{{"entity": "type", "text": "value"}}]
}}

Extract entities like: Audit_Standard, SAP_Module, Years_Experience, Certification, Tech_Stack"""

    def __init__(
        self,
        llm_client: LLMClientBase,
        timeout: float = DEFAULT_TIMEOUT,
        organization: str = "KPMG",
    ) -> None:
        super().__init__(llm_client, timeout=timeout)
        self._organization = organization

    async def assess(
        self,
        utterance: str,
        jd_text: str,
        candidate_name: str | None = None,
    ) -> TurnAssessment:
        """
        Assess a candidate answer.

        Never raises: backend failures and unparseable output produce
        ``TurnAssessment.analysis_failed()``.

        Args:
            utterance: The candidate's answer.
            jd_text: Selected job description.
            candidate_name: Extracted name, if known.

        Returns:
            The assessment.
        """
        prompt = self.ASSESSMENT_PROMPT.format(
            organization=self._organization,
            candidate_name=candidate_name or "Candidate",
            jd_excerpt=(jd_text or "")[:JD_EXCERPT_CHARS],
        )
        try:
            content = await self._ask(
                [
                    Message(role="system", content=prompt),
                    Message(role="user", content=utterance),
                ],
                temperature=0.2,
                max_tokens=400,
                json_mode=True,
            )
        except LLMError as e:
            logger.error(f"Analysis failed: {e}")
            return TurnAssessment.analysis_failed()

        assessment = parse_assessment(content)
        if assessment is None:
            logger.warning("Analysis failed: unusable assessment output")
            logger.debug(f"Assessment output: {content[:500]}")
            return TurnAssessment.analysis_failed()
        return assessment
