"""
Smoke tests for the interview orchestrator.

Drive complete interviews through the turn dispatcher with a scripted
backend and an in-memory document store.
"""

import asyncio

import pytest

from conftest import JD_IDS, assessment_json
from screening_interviewer.models.llm_client import LLMError
from screening_interviewer.orchestrator import (
    InboundTurn,
    InterviewOrchestrator,
    InterviewSession,
    InterviewStage,
)
from screening_interviewer.orchestrator import prompts
from screening_interviewer.orchestrator.schemas import TurnRole
from screening_interviewer.retrieval.job_store import FALLBACK_JD_TEMPLATE

CANDIDATE = "candidate-1"


async def say(orchestrator: InterviewOrchestrator, text: str, candidate_id: str = CANDIDATE):
    return await orchestrator.handle_turn(InboundTurn(candidate_id=candidate_id, text=text))


async def reach_stage(orchestrator, backend, stage: InterviewStage) -> None:
    """Walk the candidate forward until ``stage`` is current."""
    await orchestrator.participant_joined(CANDIDATE)
    if stage is InterviewStage.JD_SELECTION:
        return
    backend.selection.append("Audit_Senior.txt")
    await say(orchestrator, "the first one please")
    if stage is InterviewStage.NAME_PROMPT:
        return
    backend.names.append("Jane Doe")
    await say(orchestrator, "My name is Jane Doe")
    if stage is InterviewStage.PRE_SCREEN:
        return
    await say(orchestrator, "I have a degree in accounting and five years in audit.")


class TestFullInterview:
    """End-to-end flow from greeting to summary."""

    @pytest.mark.asyncio
    async def test_happy_path(self, orchestrator, backend, store) -> None:
        greeting = await orchestrator.participant_joined(CANDIDATE)
        assert len(greeting) == 2
        assert "Welcome to the KPMG Global Services initial interview" in greeting[0].text
        assert "1. Audit_Senior, 2. SAP_Consultant, 3. Data_Engineer" in greeting[1].text
        assert store.get(CANDIDATE).stage is InterviewStage.JD_SELECTION

        backend.selection.append("Audit_Senior.txt")
        reply = await say(orchestrator, "number one")
        assert reply[0].text == prompts.render_stage_prompt(InterviewStage.NAME_PROMPT)
        session = store.get(CANDIDATE)
        assert session.stage is InterviewStage.NAME_PROMPT
        assert session.selected_jd_id == "Audit_Senior.txt"
        assert session.jd_text.startswith("Audit Senior.")

        backend.names.append("Jane Doe")
        reply = await say(orchestrator, "Hi, I'm Jane Doe")
        assert "It's a pleasure to meet you, Jane Doe" in reply[0].text
        assert store.get(CANDIDATE).stage is InterviewStage.PRE_SCREEN

        backend.assessments.extend(
            [assessment_json(4, 5), assessment_json(2, 3), assessment_json(3, 4)]
        )
        reply = await say(orchestrator, "Bachelor in accounting, five years at a Big Four firm.")
        assert reply[0].text == "Question number 1: tell me more?"
        session = store.get(CANDIDATE)
        assert session.stage is InterviewStage.JD_QUESTIONS
        assert session.asked_question_count == 0

        reply = await say(orchestrator, "I led the IFRS 16 transition for a retail client.")
        assert reply[0].text == "Question number 2: tell me more?"
        assert store.get(CANDIDATE).asked_question_count == 1

        reply = await say(orchestrator, "I escalated a going-concern issue to the partner.")
        assert "Thank you, Jane Doe, for taking the time" in reply[0].text
        session = store.get(CANDIDATE)
        assert session.stage is InterviewStage.CLOSING
        assert session.asked_question_count == 2
        assert set(session.assessments) == {"pre_screen", "jd_q1", "jd_q2"}

        reply = await say(orchestrator, "I'm ready")
        assert len(reply) == 1
        summary = reply[0].text
        assert summary.startswith("Interview Summary for Jane Doe:")
        assert "Role: Audit_Senior" in summary
        assert "Questions Answered: 2" in summary
        assert "Average Clarity: **3.0/5**" in summary
        assert "Average Relevance: **4.0/5**" in summary
        assert "Qualification Score: **70%**" in summary
        assert "--- Initial Screening ---" in summary
        assert "--- Question 2 ---" in summary
        assert "CPA (Certification)" in summary
        assert "Your score is 70 percent." in reply[0].spoken_markup

        assert CANDIDATE not in store

    @pytest.mark.asyncio
    async def test_turn_after_completion_starts_fresh_session(
        self, orchestrator, backend, store
    ) -> None:
        await reach_stage(orchestrator, backend, InterviewStage.JD_QUESTIONS)
        await say(orchestrator, "answer one")
        await say(orchestrator, "answer two")
        await say(orchestrator, "summary please")
        assert CANDIDATE not in store

        reply = await say(orchestrator, "hello again")

        assert len(reply) == 2
        assert "Welcome to the KPMG Global Services" in reply[0].text
        session = store.get(CANDIDATE)
        assert session.stage is InterviewStage.JD_SELECTION
        assert session.candidate_name is None
        assert session.assessments == {}

    @pytest.mark.asyncio
    async def test_backend_options_per_task(self, orchestrator, backend) -> None:
        await reach_stage(orchestrator, backend, InterviewStage.JD_QUESTIONS)

        options = {task: opts for task, _, opts in backend.calls}
        assert options["selection"] == {"temperature": 0.0, "max_tokens": 50, "json_mode": False}
        assert options["assessment"]["temperature"] == 0.2
        assert options["assessment"]["json_mode"] is True
        assert options["question"]["temperature"] == 0.7
        assert options["question"]["max_tokens"] == 100


class TestTurnDispatch:
    """Edge cases of the turn dispatcher."""

    @pytest.mark.asyncio
    async def test_empty_input_creates_no_session(self, orchestrator, store) -> None:
        reply = await say(orchestrator, "   ", candidate_id="silent")

        assert [a.text for a in reply] == [prompts.EMPTY_INPUT]
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_empty_input_leaves_session_untouched(self, orchestrator, backend, store) -> None:
        await reach_stage(orchestrator, backend, InterviewStage.NAME_PROMPT)
        history_len = len(store.get(CANDIDATE).history)

        reply = await say(orchestrator, "")

        assert reply[0].text == prompts.EMPTY_INPUT
        session = store.get(CANDIDATE)
        assert session.stage is InterviewStage.NAME_PROMPT
        assert len(session.history) == history_len
        assert backend.calls_for("name") == []

    @pytest.mark.asyncio
    async def test_first_message_greets_without_interpreting(
        self, orchestrator, backend, store
    ) -> None:
        reply = await say(orchestrator, "Audit Senior please")

        assert len(reply) == 2
        assert backend.calls == []
        session = store.get(CANDIDATE)
        assert session.stage is InterviewStage.JD_SELECTION
        assert session.history[0].role is TurnRole.CANDIDATE
        assert session.history[0].content == "Audit Senior please"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("answer", ["N/A", "Marketing.txt", LLMError("backend down")])
    async def test_unresolved_selection_reprompts(
        self, orchestrator, backend, store, answer
    ) -> None:
        await orchestrator.participant_joined(CANDIDATE)
        backend.selection.append(answer)

        reply = await say(orchestrator, "the blue one")

        assert reply[0].text == prompts.render_jd_reprompt(len(JD_IDS))
        assert "between 1 and 3" in reply[0].text
        session = store.get(CANDIDATE)
        assert session.stage is InterviewStage.JD_SELECTION
        assert session.selected_jd_id is None

    @pytest.mark.asyncio
    async def test_missing_document_uses_fallback_description(
        self, orchestrator, backend, store, jd_store
    ) -> None:
        await orchestrator.participant_joined(CANDIDATE)
        backend.selection.append("Data_Engineer.txt")

        await say(orchestrator, "data engineer")

        session = store.get(CANDIDATE)
        assert session.stage is InterviewStage.NAME_PROMPT
        assert session.selected_jd_id == "Data_Engineer.txt"
        assert session.jd_text == FALLBACK_JD_TEMPLATE.format(jd_id="Data_Engineer.txt")
        assert jd_store.fetched == ["Data_Engineer.txt"]

    @pytest.mark.asyncio
    async def test_unclear_name_asks_again(self, orchestrator, backend, store) -> None:
        await reach_stage(orchestrator, backend, InterviewStage.NAME_PROMPT)
        backend.names.extend(["N/A", "'Sean O'Brien'"])

        reply = await say(orchestrator, "uhh")

        assert reply[0].text == prompts.NAME_CLARIFICATION
        assert "<break time='300ms'/>" in reply[0].spoken_markup
        assert store.get(CANDIDATE).stage is InterviewStage.NAME_PROMPT

        await say(orchestrator, "Sean O'Brien")
        session = store.get(CANDIDATE)
        assert session.candidate_name == "Sean O'Brien"
        assert session.stage is InterviewStage.PRE_SCREEN

    @pytest.mark.asyncio
    async def test_degraded_assessment_still_uses_question_slot(
        self, orchestrator, backend, store
    ) -> None:
        await reach_stage(orchestrator, backend, InterviewStage.JD_QUESTIONS)
        backend.assessments.extend(["this is not json", LLMError("timeout")])

        await say(orchestrator, "first answer")
        await say(orchestrator, "second answer")

        session = store.get(CANDIDATE)
        assert session.stage is InterviewStage.CLOSING
        assert session.asked_question_count == 2
        assert session.assessments["jd_q1"].failed
        assert session.assessments["jd_q1"].summary == "Analysis failed"
        assert session.assessments["jd_q2"].failed

        reply = await say(orchestrator, "ok")
        summary = reply[0].text
        # Only the pre-screen default assessment (4/5) is scored.
        assert "Average Clarity: **4.0/5**" in summary
        assert "Qualification Score: **90%**" in summary
        assert "Clarity/Relevance: N/A/N/A" in summary

    @pytest.mark.asyncio
    async def test_no_scored_stage_reports_not_available(self, orchestrator, backend) -> None:
        await orchestrator.participant_joined(CANDIDATE)
        backend.selection.append("Audit_Senior.txt")
        await say(orchestrator, "one")
        backend.names.append("Jane Doe")
        await say(orchestrator, "Jane Doe")
        backend.assessments.extend(["garbage", "garbage", "garbage"])
        for answer in ("background", "answer one", "answer two"):
            await say(orchestrator, answer)

        reply = await say(orchestrator, "done")

        assert "Average Clarity: **not available/5**" in reply[0].text
        assert "Qualification Score: **not available**" in reply[0].text
        assert "Your score is not available." in reply[0].spoken_markup

    @pytest.mark.asyncio
    async def test_unexpected_error_rolls_back_turn(
        self, orchestrator, backend, store, jd_store, monkeypatch
    ) -> None:
        await orchestrator.participant_joined(CANDIDATE)
        history_len = len(store.get(CANDIDATE).history)

        async def broken_fetch(jd_id: str) -> str:
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(jd_store, "fetch", broken_fetch)
        backend.selection.append("Audit_Senior.txt")

        reply = await say(orchestrator, "number one")

        assert reply[0].text == prompts.TECHNICAL_DIFFICULTIES
        session = store.get(CANDIDATE)
        assert session.stage is InterviewStage.JD_SELECTION
        assert session.selected_jd_id is None
        assert len(session.history) == history_len

    @pytest.mark.asyncio
    async def test_candidate_can_retry_after_technical_difficulties(
        self, orchestrator, backend, store, jd_store, monkeypatch
    ) -> None:
        await orchestrator.participant_joined(CANDIDATE)
        real_fetch = jd_store.fetch
        failures = [RuntimeError("disk on fire")]

        async def flaky_fetch(jd_id: str) -> str:
            if failures:
                raise failures.pop()
            return await real_fetch(jd_id)

        monkeypatch.setattr(jd_store, "fetch", flaky_fetch)
        backend.selection.extend(["Audit_Senior.txt", "Audit_Senior.txt"])

        reply = await say(orchestrator, "number one")
        assert reply[0].text == prompts.TECHNICAL_DIFFICULTIES
        assert store.get(CANDIDATE).selected_jd_id is None

        reply = await say(orchestrator, "number one")
        assert "full name" in reply[0].text
        session = store.get(CANDIDATE)
        assert session.selected_jd_id == "Audit_Senior.txt"
        assert session.stage is InterviewStage.NAME_PROMPT

    @pytest.mark.asyncio
    async def test_unexpected_backend_exception_degrades_assessment(
        self, orchestrator, backend, store
    ) -> None:
        await reach_stage(orchestrator, backend, InterviewStage.JD_QUESTIONS)
        backend.assessments.append(RuntimeError("connection reset"))

        reply = await say(orchestrator, "first answer")

        assert reply[0].text != prompts.TECHNICAL_DIFFICULTIES
        session = store.get(CANDIDATE)
        assert session.asked_question_count == 1
        assert session.assessments["jd_q1"].failed
        assert session.assessments["jd_q1"].summary == "Analysis failed"

    @pytest.mark.asyncio
    async def test_non_finite_score_still_uses_question_slot(
        self, orchestrator, backend, store
    ) -> None:
        await reach_stage(orchestrator, backend, InterviewStage.JD_QUESTIONS)
        backend.assessments.append(
            '{"ClarityScore": "1e999", "RelevanceScore": 4, "Summary": "Fine."}'
        )

        await say(orchestrator, "first answer")

        session = store.get(CANDIDATE)
        assert session.asked_question_count == 1
        assessment = session.assessments["jd_q1"]
        assert not assessment.failed
        assert assessment.clarity_score is None
        assert assessment.relevance_score == 4

    @pytest.mark.asyncio
    async def test_rejoin_repeats_last_prompt(self, orchestrator, backend) -> None:
        await reach_stage(orchestrator, backend, InterviewStage.NAME_PROMPT)

        reply = await orchestrator.participant_joined(CANDIDATE)

        assert len(reply) == 1
        assert reply[0].text == prompts.WELCOME_BACK.format(
            last_prompt=prompts.render_stage_prompt(InterviewStage.NAME_PROMPT)
        )

    @pytest.mark.asyncio
    async def test_complete_session_gets_completion_notice(self, orchestrator, store) -> None:
        session = InterviewSession(CANDIDATE, JD_IDS, max_questions=2)
        session.advance_to(InterviewStage.COMPLETE)
        store.put(session)

        reply = await say(orchestrator, "anything")

        assert reply[0].text == prompts.render_stage_prompt(InterviewStage.COMPLETE)

    @pytest.mark.asyncio
    async def test_question_context_is_recent_window(self, orchestrator, backend, store) -> None:
        await reach_stage(orchestrator, backend, InterviewStage.JD_QUESTIONS)

        messages = backend.calls_for("question")[0]
        history = messages[1:]
        assert messages[0].role == "system"
        assert "conducting question Q1" in messages[0].content
        assert len(history) == orchestrator.config.history_window
        assert history[-1].role == "user"
        assert history[-1].content.startswith("I have a degree in accounting")
        assert history[-2].role == "assistant"

    @pytest.mark.asyncio
    async def test_history_alternates_in_order(self, orchestrator, backend, store) -> None:
        await reach_stage(orchestrator, backend, InterviewStage.PRE_SCREEN)

        roles = [turn.role for turn in store.get(CANDIDATE).history]
        assert roles == [
            TurnRole.INTERVIEWER,
            TurnRole.INTERVIEWER,
            TurnRole.CANDIDATE,
            TurnRole.INTERVIEWER,
            TurnRole.CANDIDATE,
            TurnRole.INTERVIEWER,
        ]

    @pytest.mark.asyncio
    async def test_candidates_are_independent(self, orchestrator, backend, store) -> None:
        await asyncio.gather(
            orchestrator.participant_joined("alice"),
            orchestrator.participant_joined("bob"),
        )
        backend.selection.append("SAP_Consultant.txt")

        await say(orchestrator, "two", candidate_id="alice")

        assert store.get("alice").stage is InterviewStage.NAME_PROMPT
        assert store.get("bob").stage is InterviewStage.JD_SELECTION

    @pytest.mark.asyncio
    async def test_finished_interviews_leave_no_locks_behind(
        self, orchestrator, backend, store
    ) -> None:
        for candidate_id in ("candidate-a", "candidate-b"):
            await orchestrator.participant_joined(candidate_id)
            backend.selection.append("Audit_Senior.txt")
            backend.names.append("Jane Doe")
            for text in ("one", "Jane Doe", "background", "answer one", "answer two", "bye"):
                await say(orchestrator, text, candidate_id=candidate_id)
            assert candidate_id not in store

        await say(orchestrator, "   ", candidate_id="drive-by")

        assert len(store) == 0
        assert store.tracked_locks == 0

    @pytest.mark.asyncio
    async def test_close_releases_backend(self, orchestrator, backend) -> None:
        await orchestrator.close()

        assert backend.closed
