"""
Interview orchestrator.

Routes each inbound turn to the handler for the candidate's current stage,
drives the dynamic question loop and produces the outbound activities for
the channel. This is the only component that mutates sessions.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from screening_interviewer.orchestrator import prompts
from screening_interviewer.orchestrator.aggregation import summarize_session
from screening_interviewer.orchestrator.interview_state import InterviewSession
from screening_interviewer.orchestrator.schemas import (
    PRE_SCREEN_LABEL,
    InboundTurn,
    InterviewConfig,
    InterviewStage,
    OutboundActivity,
    TurnAssessment,
    TurnRole,
    question_label,
)
from screening_interviewer.orchestrator.session_store import SessionStoreBase
from screening_interviewer.orchestrator.transitions import TurnOutcome, next_stage

if TYPE_CHECKING:
    from screening_interviewer.agents.gateway import SemanticExtractionGateway
    from screening_interviewer.retrieval.job_store import JobDescriptionProvider

StageHandler = Callable[[InterviewSession, str], Awaitable[list[OutboundActivity]]]


class InterviewOrchestrator:
    """
    Turn dispatcher for screening interviews.

    Each turn runs to completion under the candidate's store lock, so turns
    from one candidate never interleave while different candidates proceed
    concurrently.
    """

    def __init__(
        self,
        config: InterviewConfig,
        store: SessionStoreBase,
        gateway: SemanticExtractionGateway,
        jd_provider: JobDescriptionProvider,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            config: Interview parameters.
            store: Session store shared across turns.
            gateway: Semantic extraction gateway.
            jd_provider: Job description loader.
        """
        self._logger = logging.getLogger(__name__)
        self._config = config
        self._store = store
        self._gateway = gateway
        self._jd_provider = jd_provider
        self._handlers: dict[InterviewStage, StageHandler] = {
            InterviewStage.JD_SELECTION: self._handle_jd_selection,
            InterviewStage.NAME_PROMPT: self._handle_name,
            InterviewStage.PRE_SCREEN: self._handle_pre_screen,
            InterviewStage.JD_QUESTIONS: self._handle_jd_question,
            InterviewStage.CLOSING: self._handle_closing,
            InterviewStage.COMPLETE: self._handle_complete,
        }

    @property
    def config(self) -> InterviewConfig:
        return self._config

    @property
    def store(self) -> SessionStoreBase:
        return self._store

    async def close(self) -> None:
        """Release backend and document-store clients."""
        await self._gateway.close()
        await self._jd_provider.close()

    async def participant_joined(self, candidate_id: str) -> list[OutboundActivity]:
        """
        Handle a "participant joined" signal from the channel.

        Creates the session and greets the candidate. A candidate rejoining a
        live session is shown the last prompt again instead.

        Args:
            candidate_id: Channel identity of the candidate.

        Returns:
            Activities to send, in order.
        """
        async with self._store.lock(candidate_id):
            session, created = self._store.get_or_create(candidate_id)
            session.touch()
            if created or session.stage is InterviewStage.GREETING:
                return self._greet(session)

            last_prompt = session.last_interviewer_message()
            self._logger.info(f"Candidate {candidate_id} rejoined at stage {session.stage.value}")
            if not last_prompt:
                return []
            return [OutboundActivity.from_text(prompts.WELCOME_BACK.format(last_prompt=last_prompt))]

    async def handle_turn(self, turn: InboundTurn) -> list[OutboundActivity]:
        """
        Process one inbound candidate message.

        Args:
            turn: The inbound message.

        Returns:
            Activities to send, in order.
        """
        text = (turn.text or "").strip()
        if not text:
            self._logger.warning(f"Empty input from {turn.candidate_id}")
            return [prompts.empty_input_activity()]

        async with self._store.lock(turn.candidate_id):
            session, created = self._store.get_or_create(turn.candidate_id)
            session.touch()
            if created:
                session.add_turn(TurnRole.CANDIDATE, text)
                return self._greet(session)

            snapshot = session.snapshot()
            try:
                session.add_turn(TurnRole.CANDIDATE, text)
                handler = self._handlers.get(session.stage)
                if handler is None:
                    self._logger.error(
                        f"No handler for stage {session.stage.value!r} "
                        f"(candidate {turn.candidate_id}); this is a programming error"
                    )
                    self._store.put(snapshot)
                    return [prompts.unknown_state_activity()]
                return await handler(session, text)
            except Exception:
                self._logger.error(
                    f"Error processing turn for {turn.candidate_id} at stage "
                    f"{snapshot.stage.value}",
                    exc_info=True,
                )
                self._store.put(snapshot)
                return [prompts.technical_difficulties_activity()]

    def _say(self, session: InterviewSession, text: str) -> OutboundActivity:
        """Record an interviewer message in the transcript and build its activity."""
        session.add_turn(TurnRole.INTERVIEWER, text)
        return OutboundActivity.from_text(text)

    def _advance(self, session: InterviewSession, stage: InterviewStage) -> None:
        if stage is not session.stage:
            self._logger.info(
                f"Session {session.candidate_id}: {session.stage.value} -> {stage.value}"
            )
        session.advance_to(stage)

    def _greet(self, session: InterviewSession) -> list[OutboundActivity]:
        welcome = self._say(
            session,
            prompts.render_stage_prompt(
                InterviewStage.GREETING, organization=self._config.organization_name
            ),
        )
        self._advance(session, next_stage(InterviewStage.GREETING))
        selection = self._say(session, prompts.render_jd_selection(session.available_jd_ids))
        return [welcome, selection]

    async def _handle_jd_selection(self, session: InterviewSession, text: str) -> list[OutboundActivity]:
        jd_id = await self._gateway.resolve_selection(text, session.available_jd_ids)
        if jd_id is None:
            self._advance(session, next_stage(session.stage, TurnOutcome.REJECTED))
            return [self._say(session, prompts.render_jd_reprompt(len(session.available_jd_ids)))]

        jd_text = await self._jd_provider.load(jd_id)
        session.select_job_description(jd_id, jd_text)
        self._logger.info(f"Session {session.candidate_id} selected {jd_id}")
        self._advance(session, next_stage(session.stage))
        return [self._say(session, prompts.render_stage_prompt(InterviewStage.NAME_PROMPT))]

    async def _handle_name(self, session: InterviewSession, text: str) -> list[OutboundActivity]:
        name = await self._gateway.extract_name(text)
        if name is None:
            activity = prompts.name_clarification_activity()
            session.add_turn(TurnRole.INTERVIEWER, activity.text)
            return [activity]

        session.set_candidate_name(name)
        self._advance(session, next_stage(session.stage))
        return [
            self._say(
                session,
                prompts.render_stage_prompt(InterviewStage.PRE_SCREEN, candidate_name=name),
            )
        ]

    async def _assess(self, session: InterviewSession, label: str, text: str) -> TurnAssessment:
        session.record_response(label, text)
        assessment = await self._gateway.assess_response(
            text, session.jd_text, session.candidate_name
        )
        session.record_assessment(label, assessment)
        if assessment.failed:
            self._logger.warning(f"Analysis failed for {label} ({session.candidate_id})")
        return assessment

    async def _handle_pre_screen(self, session: InterviewSession, text: str) -> list[OutboundActivity]:
        await self._assess(session, PRE_SCREEN_LABEL, text)
        self._advance(session, next_stage(session.stage))
        return [await self._ask_next_question(session)]

    async def _handle_jd_question(self, session: InterviewSession, text: str) -> list[OutboundActivity]:
        label = question_label(session.asked_question_count + 1)
        await self._assess(session, label, text)
        # A degraded assessment still uses up the question slot.
        session.increment_question_count()

        stage = next_stage(session.stage, questions_remaining=session.questions_remaining)
        if stage is InterviewStage.JD_QUESTIONS:
            return [await self._ask_next_question(session)]

        self._advance(session, stage)
        return [
            self._say(
                session,
                prompts.render_stage_prompt(
                    InterviewStage.CLOSING, candidate_name=session.candidate_name
                ),
            )
        ]

    async def _ask_next_question(self, session: InterviewSession) -> OutboundActivity:
        question = await self._gateway.generate_question(
            session.jd_text,
            session.candidate_name,
            session.recent_history(self._config.history_window),
            session.asked_question_count + 1,
        )
        return self._say(session, question)

    async def _handle_closing(self, session: InterviewSession, text: str) -> list[OutboundActivity]:
        summary = summarize_session(session, organization_name=self._config.organization_name)
        self._advance(session, next_stage(session.stage))
        session.add_turn(TurnRole.INTERVIEWER, summary.render_text())
        self._store.delete(session.candidate_id)
        self._logger.info(
            f"Interview completed for {session.candidate_id}: "
            f"qualification score {summary.qualification_score_text}"
        )
        return [
            OutboundActivity.from_text(summary.render_text(), spoken_text=summary.render_spoken())
        ]

    async def _handle_complete(self, session: InterviewSession, text: str) -> list[OutboundActivity]:
        return [OutboundActivity.from_text(prompts.render_stage_prompt(InterviewStage.COMPLETE))]
