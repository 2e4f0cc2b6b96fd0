"""
Interview session state.

Tracks one candidate's progress through the screening interview: stage,
extracted name, selected job description, question budget, per-stage
assessments and the conversation transcript.
"""

from __future__ import annotations

import copy
import time
from datetime import datetime, timezone

from screening_interviewer.orchestrator.schemas import (
    HistoryTurn,
    InterviewStage,
    TurnAssessment,
    TurnRole,
)


class InterviewStateError(RuntimeError):
    """Raised when a session mutation would break one of its invariants."""


class InterviewSession:
    """
    Mutable state of a single candidate's interview.

    Stage only moves forward, the candidate name and the selected job
    description are written once, and the question counter never exceeds
    the configured budget.
    """

    def __init__(
        self,
        candidate_id: str,
        available_jd_ids: list[str],
        max_questions: int,
    ) -> None:
        """
        Initialize a session in the greeting stage.

        Args:
            candidate_id: Channel identity of the candidate.
            available_jd_ids: Selectable job description identifiers.
            max_questions: Dynamic question budget.
        """
        if max_questions <= 0:
            raise InterviewStateError("max_questions must be positive")

        self._candidate_id = candidate_id
        self._available_jd_ids: tuple[str, ...] = tuple(available_jd_ids)
        self._max_questions = max_questions
        self._stage = InterviewStage.GREETING
        self._candidate_name: str | None = None
        self._jd_id: str | None = None
        self._jd_text: str = ""
        self._asked_question_count = 0
        self._assessments: dict[str, TurnAssessment] = {}
        self._raw_responses: dict[str, str] = {}
        self._history: list[HistoryTurn] = []
        self._started_at = datetime.now(timezone.utc)
        self._last_activity = time.monotonic()

    @property
    def candidate_id(self) -> str:
        return self._candidate_id

    @property
    def stage(self) -> InterviewStage:
        """Get the current interview stage."""
        return self._stage

    @property
    def candidate_name(self) -> str | None:
        return self._candidate_name

    @property
    def display_name(self) -> str:
        """Candidate name for templates, or a neutral placeholder."""
        return self._candidate_name or "Candidate"

    @property
    def selected_jd_id(self) -> str | None:
        return self._jd_id

    @property
    def jd_text(self) -> str:
        return self._jd_text

    @property
    def available_jd_ids(self) -> tuple[str, ...]:
        return self._available_jd_ids

    @property
    def asked_question_count(self) -> int:
        return self._asked_question_count

    @property
    def max_questions(self) -> int:
        return self._max_questions

    @property
    def questions_remaining(self) -> int:
        return self._max_questions - self._asked_question_count

    @property
    def assessments(self) -> dict[str, TurnAssessment]:
        """Get per-stage assessments keyed by stage label."""
        return dict(self._assessments)

    @property
    def raw_responses(self) -> dict[str, str]:
        return dict(self._raw_responses)

    @property
    def history(self) -> list[HistoryTurn]:
        """Get the full transcript."""
        return self._history.copy()

    @property
    def started_at(self) -> datetime:
        return self._started_at

    @property
    def last_activity(self) -> float:
        """Monotonic timestamp of the last processed turn."""
        return self._last_activity

    def touch(self, now: float | None = None) -> None:
        """Mark the session as active."""
        self._last_activity = time.monotonic() if now is None else now

    def advance_to(self, stage: InterviewStage) -> None:
        """
        Move the session to ``stage``.

        Args:
            stage: Target stage; must not precede the current one.

        Raises:
            InterviewStateError: On a backward transition or leaving ``complete``.
        """
        if stage is self._stage:
            return
        if self._stage.is_terminal or self._stage.is_after(stage):
            raise InterviewStateError(
                f"Cannot move from {self._stage.value} back to {stage.value}"
            )
        self._stage = stage

    def set_candidate_name(self, name: str) -> None:
        """Record the candidate's name. Only allowed once."""
        if self._candidate_name is not None:
            raise InterviewStateError("Candidate name is already set")
        self._candidate_name = name

    def select_job_description(self, jd_id: str, jd_text: str) -> None:
        """
        Record the selected job description. Only allowed once.

        Raises:
            InterviewStateError: If a JD was already selected or ``jd_id`` is not selectable.
        """
        if self._jd_id is not None:
            raise InterviewStateError("Job description is already selected")
        if jd_id not in self._available_jd_ids:
            raise InterviewStateError(f"Unknown job description: {jd_id}")
        self._jd_id = jd_id
        self._jd_text = jd_text

    def increment_question_count(self) -> int:
        """
        Count one answered dynamic question.

        Returns:
            The new count.

        Raises:
            InterviewStateError: If the budget is already used up.
        """
        if self._asked_question_count >= self._max_questions:
            raise InterviewStateError("Question budget exhausted")
        self._asked_question_count += 1
        return self._asked_question_count

    def record_response(self, label: str, text: str) -> None:
        self._raw_responses[label] = text

    def record_assessment(self, label: str, assessment: TurnAssessment) -> None:
        self._assessments[label] = assessment

    def add_turn(self, role: TurnRole, content: str) -> HistoryTurn:
        """
        Append a transcript entry.

        Args:
            role: Role of the speaker.
            content: What was said.

        Returns:
            The created HistoryTurn.
        """
        turn = HistoryTurn(role=role, content=content, stage=self._stage)
        self._history.append(turn)
        return turn

    def recent_history(self, max_turns: int) -> list[HistoryTurn]:
        """Get the last ``max_turns`` transcript entries, oldest first."""
        if max_turns <= 0:
            return []
        return self._history[-max_turns:]

    def last_interviewer_message(self) -> str | None:
        for turn in reversed(self._history):
            if turn.role is TurnRole.INTERVIEWER:
                return turn.content
        return None

    def snapshot(self) -> InterviewSession:
        """Deep copy used to roll back a failed turn."""
        return copy.deepcopy(self)
