"""
Stage transition rules.

The interview follows a fixed skeleton:
greeting -> jd_selection -> name_prompt -> pre_screen -> jd_questions -> closing -> complete.
``next_stage`` is a pure function of the current stage and the outcome of the
turn; it never moves backwards.
"""

from __future__ import annotations

from enum import Enum

from screening_interviewer.orchestrator.schemas import InterviewStage


class TurnOutcome(str, Enum):
    """What the stage handler made of the candidate's input."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"


# Where an accepted turn leads. jd_questions is resolved against the budget.
_ADVANCE: dict[InterviewStage, InterviewStage] = {
    InterviewStage.GREETING: InterviewStage.JD_SELECTION,
    InterviewStage.JD_SELECTION: InterviewStage.NAME_PROMPT,
    InterviewStage.NAME_PROMPT: InterviewStage.PRE_SCREEN,
    InterviewStage.PRE_SCREEN: InterviewStage.JD_QUESTIONS,
    InterviewStage.CLOSING: InterviewStage.COMPLETE,
    InterviewStage.COMPLETE: InterviewStage.COMPLETE,
}


def next_stage(
    stage: InterviewStage,
    outcome: TurnOutcome = TurnOutcome.ACCEPTED,
    questions_remaining: int = 0,
) -> InterviewStage:
    """
    Compute the stage that follows a processed turn.

    Args:
        stage: Stage the turn was processed in.
        outcome: Whether the input was usable for this stage.
        questions_remaining: Unused question budget after the turn (jd_questions only).

    Returns:
        The next stage. Rejected input keeps the stage unchanged.
    """
    if outcome is TurnOutcome.REJECTED:
        return stage
    if stage is InterviewStage.JD_QUESTIONS:
        return InterviewStage.JD_QUESTIONS if questions_remaining > 0 else InterviewStage.CLOSING
    return _ADVANCE[stage]
