"""
Pydantic schemas for the orchestrator module.

Defines data models for interview stages, turns, assessments, outbound
activities and the end-of-interview summary.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from screening_interviewer.voice.ssml import to_ssml

NOT_AVAILABLE = "not available"
PRE_SCREEN_LABEL = "pre_screen"


def _now_utc() -> datetime:
    """Get current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def question_label(ordinal: int) -> str:
    """Assessment label for the dynamic question with the given 1-based ordinal."""
    return f"jd_q{ordinal}"


class InterviewStage(str, Enum):
    """Stages of the screening interview, in the order they are visited."""

    GREETING = "greeting"
    JD_SELECTION = "jd_selection"
    NAME_PROMPT = "name_prompt"
    PRE_SCREEN = "pre_screen"
    JD_QUESTIONS = "jd_questions"
    CLOSING = "closing"
    COMPLETE = "complete"

    @property
    def order(self) -> int:
        """Position of this stage in the interview skeleton."""
        return list(InterviewStage).index(self)

    def is_after(self, other: "InterviewStage") -> bool:
        """Check whether this stage comes later than ``other``."""
        return self.order > other.order

    @property
    def is_terminal(self) -> bool:
        return self is InterviewStage.COMPLETE


class TurnRole(str, Enum):
    """Role of the speaker in a conversation turn."""

    INTERVIEWER = "interviewer"
    CANDIDATE = "candidate"


class InterviewConfig(BaseModel):
    """Interview parameters fixed at process start."""

    available_jd_ids: list[str] = Field(..., min_length=1, description="Selectable job description ids")
    max_questions: int = Field(default=5, gt=0, description="Dynamic question budget")
    history_window: int = Field(default=6, gt=0, description="Turns sent as question context")
    organization_name: str = Field(default="KPMG Global Services", description="Hiring organization")


class HistoryTurn(BaseModel):
    """A single entry in the interview transcript."""

    role: TurnRole = Field(..., description="Role of the speaker")
    content: str = Field(..., description="What was said")
    stage: InterviewStage = Field(..., description="Stage the session was in")
    timestamp: datetime = Field(default_factory=_now_utc, description="When the turn occurred")


class ExtractedEntity(BaseModel):
    """A typed fact pulled out of a candidate answer."""

    type: str = Field(..., description="Entity type label (e.g. Certification)")
    value: str = Field(..., description="Entity text as stated by the candidate")


class TurnAssessment(BaseModel):
    """Structured assessment of one candidate answer."""

    clarity_score: int | None = Field(default=None, ge=1, le=5, description="Clarity (1-5)")
    relevance_score: int | None = Field(default=None, ge=1, le=5, description="Relevance (1-5)")
    summary: str = Field(default="", description="One-sentence assessment")
    entities: list[ExtractedEntity] = Field(default_factory=list, description="Extracted entities")
    failed: bool = Field(default=False, description="Whether the analysis degraded")

    @classmethod
    def analysis_failed(cls) -> "TurnAssessment":
        """Placeholder recorded when the backend output is unusable."""
        return cls(summary="Analysis failed", failed=True)

    @property
    def has_scores(self) -> bool:
        return self.clarity_score is not None and self.relevance_score is not None


class InboundTurn(BaseModel):
    """A message received from the candidate's channel."""

    candidate_id: str = Field(..., description="Opaque channel identity of the candidate")
    text: str = Field(default="", description="Recognized speech or typed text")


class OutboundActivity(BaseModel):
    """A message sent to the candidate's channel."""

    text: str = Field(..., description="Display text")
    spoken_markup: str = Field(..., description="SSML rendering for speech synthesis")

    @classmethod
    def from_text(
        cls,
        text: str,
        spoken_text: str | None = None,
        pause_ms: int | None = None,
    ) -> "OutboundActivity":
        """
        Build an activity whose speech form is derived from text.

        Args:
            text: Display text.
            spoken_text: Alternative wording to speak (defaults to ``text``).
            pause_ms: Pause inserted between spoken sentences.
        """
        return cls(text=text, spoken_markup=to_ssml(spoken_text or text, pause_ms=pause_ms))


class StageReport(BaseModel):
    """Report line for one assessed stage."""

    label: str = Field(..., description="Stage label (pre_screen, jd_q1, ...)")
    title: str = Field(..., description="Human readable heading")
    summary: str = Field(default="No data.", description="Assessment summary")
    clarity_score: int | None = Field(default=None)
    relevance_score: int | None = Field(default=None)
    entities: list[ExtractedEntity] = Field(default_factory=list)

    def render(self) -> str:
        """Render the report block for this stage."""
        clarity = self.clarity_score if self.clarity_score is not None else "N/A"
        relevance = self.relevance_score if self.relevance_score is not None else "N/A"
        if self.entities:
            entity_list = ", ".join(f"{e.value} ({e.type})" for e in self.entities)
        else:
            entity_list = "None"
        return (
            f"--- {self.title} ---\n"
            f"Summary: {self.summary}\n"
            f"Clarity/Relevance: {clarity}/{relevance}\n"
            f"Entities: {entity_list}"
        )


class InterviewSummary(BaseModel):
    """Aggregated result delivered at the end of the interview."""

    candidate_name: str = Field(default="Candidate")
    role: str = Field(default="N/A", description="Selected role, without file extension")
    questions_answered: int = Field(default=0)
    valid_count: int = Field(default=0, description="Stages with both scores present")
    avg_clarity: float | None = Field(default=None)
    avg_relevance: float | None = Field(default=None)
    qualification_score: int | None = Field(default=None, ge=0, le=100)
    stage_reports: list[StageReport] = Field(default_factory=list)
    organization_name: str = Field(default="")

    @property
    def avg_clarity_text(self) -> str:
        return f"{self.avg_clarity:.1f}" if self.avg_clarity is not None else NOT_AVAILABLE

    @property
    def avg_relevance_text(self) -> str:
        return f"{self.avg_relevance:.1f}" if self.avg_relevance is not None else NOT_AVAILABLE

    @property
    def qualification_score_text(self) -> str:
        return str(self.qualification_score) if self.qualification_score is not None else NOT_AVAILABLE

    def render_text(self) -> str:
        """Render the human-readable summary message."""
        team = f"the {self.organization_name} hiring team" if self.organization_name else "our hiring team"
        score = self.qualification_score_text
        score_line = f"{score}%" if self.qualification_score is not None else score
        lines = [
            f"Interview Summary for {self.candidate_name}:",
            "",
            "--- Final Assessment ---",
            f"Role: {self.role}",
            f"Questions Answered: {self.questions_answered}",
            "",
            f"Average Clarity: **{self.avg_clarity_text}/5**",
            f"Average Relevance: **{self.avg_relevance_text}/5**",
            f"Qualification Score: **{score_line}**",
        ]
        for report in self.stage_reports:
            lines.extend(["", report.render()])
        lines.extend(["", f"Your responses will be reviewed by {team}. Thank you!"])
        return "\n".join(lines)

    def render_spoken(self) -> str:
        """Render the short spoken form of the summary."""
        if self.qualification_score is None:
            score = "Your score is not available."
        else:
            score = f"Your score is {self.qualification_score} percent."
        return f"Interview completed, {self.candidate_name}. {score} Thank you for your time!"
