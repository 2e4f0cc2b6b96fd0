"""
Orchestrator module for managing interview flow and session state.
"""

from screening_interviewer.orchestrator.schemas import (
    ExtractedEntity,
    HistoryTurn,
    InboundTurn,
    InterviewConfig,
    InterviewStage,
    InterviewSummary,
    OutboundActivity,
    TurnAssessment,
    TurnRole,
)
from screening_interviewer.orchestrator.interview_state import InterviewSession, InterviewStateError
from screening_interviewer.orchestrator.session_store import InMemorySessionStore, SessionStoreBase
from screening_interviewer.orchestrator.transitions import TurnOutcome, next_stage
from screening_interviewer.orchestrator.aggregation import summarize_assessments, summarize_session
from screening_interviewer.orchestrator.interview_orchestrator import InterviewOrchestrator

__all__ = [
    "ExtractedEntity",
    "HistoryTurn",
    "InboundTurn",
    "InterviewConfig",
    "InterviewOrchestrator",
    "InterviewSession",
    "InterviewStage",
    "InterviewStateError",
    "InterviewSummary",
    "InMemorySessionStore",
    "OutboundActivity",
    "SessionStoreBase",
    "TurnAssessment",
    "TurnOutcome",
    "TurnRole",
    "next_stage",
    "summarize_assessments",
    "summarize_session",
]
