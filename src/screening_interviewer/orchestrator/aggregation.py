"""
Assessment aggregation.

Reduces the per-stage assessments of a finished interview into average
clarity and relevance scores and a 0-100 qualification score.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from screening_interviewer.orchestrator.interview_state import InterviewSession
from screening_interviewer.orchestrator.prompts import display_jd_name
from screening_interviewer.orchestrator.schemas import (
    PRE_SCREEN_LABEL,
    InterviewSummary,
    StageReport,
    TurnAssessment,
    question_label,
)

logger = logging.getLogger(__name__)

MAX_SCORE = 5


def _round_half_up(value: float, places: int = 0) -> Decimal:
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def assessed_stage_labels(asked_question_count: int) -> list[tuple[str, str]]:
    """Labels and report headings of the stages to aggregate, in interview order."""
    labels = [(PRE_SCREEN_LABEL, "Initial Screening")]
    labels.extend(
        (question_label(n), f"Question {n}") for n in range(1, asked_question_count + 1)
    )
    return labels


def summarize_assessments(
    assessments: dict[str, TurnAssessment],
    asked_question_count: int,
) -> InterviewSummary:
    """
    Aggregate per-stage assessments.

    A stage contributes to the averages only when both its clarity and
    relevance scores are present.

    Args:
        assessments: Assessments keyed by stage label.
        asked_question_count: Number of dynamic questions answered.

    Returns:
        Summary with metrics left as None when no stage was scored.
    """
    sum_clarity = 0
    sum_relevance = 0
    valid_count = 0
    reports: list[StageReport] = []

    for label, title in assessed_stage_labels(asked_question_count):
        assessment = assessments.get(label)
        if assessment is None:
            reports.append(StageReport(label=label, title=title))
            continue

        if assessment.has_scores:
            sum_clarity += assessment.clarity_score
            sum_relevance += assessment.relevance_score
            valid_count += 1

        reports.append(
            StageReport(
                label=label,
                title=title,
                summary=assessment.summary or "No data.",
                clarity_score=assessment.clarity_score,
                relevance_score=assessment.relevance_score,
                entities=assessment.entities,
            )
        )

    if valid_count == 0:
        return InterviewSummary(questions_answered=asked_question_count, stage_reports=reports)

    avg_clarity = float(_round_half_up(sum_clarity / valid_count, 1))
    avg_relevance = float(_round_half_up(sum_relevance / valid_count, 1))
    qualification = int(
        _round_half_up((sum_clarity + sum_relevance) / (valid_count * 2 * MAX_SCORE) * 100)
    )

    return InterviewSummary(
        questions_answered=asked_question_count,
        valid_count=valid_count,
        avg_clarity=avg_clarity,
        avg_relevance=avg_relevance,
        qualification_score=qualification,
        stage_reports=reports,
    )


def summarize_session(session: InterviewSession, organization_name: str = "") -> InterviewSummary:
    """Build the final summary for a session entering ``complete``."""
    summary = summarize_assessments(session.assessments, session.asked_question_count)
    summary = summary.model_copy(
        update={
            "candidate_name": session.display_name,
            "role": display_jd_name(session.selected_jd_id) if session.selected_jd_id else "N/A",
            "organization_name": organization_name,
        }
    )
    logger.info(
        f"Aggregated {summary.valid_count} scored stage(s) for {session.candidate_id}: "
        f"qualification={summary.qualification_score_text}"
    )
    return summary
