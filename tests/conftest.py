"""Shared fixtures and fake collaborators for the test suite."""

from __future__ import annotations

import json
from typing import Any

import pytest

from screening_interviewer.agents.gateway import SemanticExtractionGateway
from screening_interviewer.models.llm_client import LLMClientBase, LLMResponse, Message
from screening_interviewer.orchestrator.interview_orchestrator import InterviewOrchestrator
from screening_interviewer.orchestrator.interview_state import InterviewSession
from screening_interviewer.orchestrator.schemas import InterviewConfig
from screening_interviewer.orchestrator.session_store import InMemorySessionStore
from screening_interviewer.retrieval.job_store import (
    JobDescriptionNotFound,
    JobDescriptionProvider,
    JobDescriptionStoreBase,
)

JD_IDS = ["Audit_Senior.txt", "SAP_Consultant.txt", "Data_Engineer.txt"]


def assessment_json(clarity: Any = 4, relevance: Any = 5, summary: str = "Solid answer.") -> str:
    return json.dumps(
        {
            "ClarityScore": clarity,
            "RelevanceScore": relevance,
            "Summary": summary,
            "ExtractedEntities": [{"entity": "Certification", "text": "CPA"}],
        }
    )


class ScriptedBackend(LLMClientBase):
    """
    Fake understanding backend.

    Routes each request by its system instruction to a per-task script. A
    script entry that is an exception instance is raised instead of returned.
    """

    def __init__(self) -> None:
        self.selection: list[Any] = []
        self.names: list[Any] = []
        self.assessments: list[Any] = []
        self.questions: list[Any] = []
        self.calls: list[tuple[str, list[Message], dict[str, Any]]] = []
        self.closed = False

    @staticmethod
    def task_of(messages: list[Message]) -> str:
        system = messages[0].content if messages and messages[0].role == "system" else ""
        if "file selection expert" in system:
            return "selection"
        if "Extract the full name" in system:
            return "name"
        if "HR assessment agent" in system:
            return "assessment"
        if "AI Interviewer conducting question" in system:
            return "question"
        raise AssertionError(f"Unrecognized request: {system[:60]!r}")

    def _next(self, task: str) -> Any:
        script = {
            "selection": self.selection,
            "name": self.names,
            "assessment": self.assessments,
            "question": self.questions,
        }[task]
        if task == "assessment" and not script:
            return assessment_json()
        if task == "question" and not script:
            return f"Question number {sum(1 for c in self.calls if c[0] == 'question')}: tell me more?"
        if not script:
            raise AssertionError(f"No scripted response left for {task}")
        return script.pop(0)

    async def chat(
        self,
        messages: list[Message],
        temperature: float = 0.7,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        task = self.task_of(messages)
        options = {"temperature": temperature, "max_tokens": max_tokens, "json_mode": json_mode}
        self.calls.append((task, list(messages), options))
        item = self._next(task)
        if isinstance(item, BaseException):
            raise item
        return LLMResponse(content=item, model="fake")

    async def close(self) -> None:
        self.closed = True

    def calls_for(self, task: str) -> list[list[Message]]:
        return [messages for name, messages, _ in self.calls if name == task]


class MemoryJobDescriptionStore(JobDescriptionStoreBase):
    def __init__(self, documents: dict[str, str]) -> None:
        self.documents = documents
        self.fetched: list[str] = []

    async def fetch(self, jd_id: str) -> str:
        self.fetched.append(jd_id)
        if jd_id not in self.documents:
            raise JobDescriptionNotFound(jd_id)
        return self.documents[jd_id]


@pytest.fixture
def backend() -> ScriptedBackend:
    return ScriptedBackend()


@pytest.fixture
def interview_config() -> InterviewConfig:
    return InterviewConfig(available_jd_ids=JD_IDS, max_questions=2, history_window=6)


@pytest.fixture
def jd_store() -> MemoryJobDescriptionStore:
    return MemoryJobDescriptionStore(
        {
            "Audit_Senior.txt": "Audit Senior. Requires IFRS, ISA and 3+ years of audit experience.",
            "SAP_Consultant.txt": "SAP FICO consultant with S/4HANA migration experience.",
        }
    )


@pytest.fixture
def store(interview_config: InterviewConfig) -> InMemorySessionStore:
    def factory(candidate_id: str) -> InterviewSession:
        return InterviewSession(
            candidate_id=candidate_id,
            available_jd_ids=interview_config.available_jd_ids,
            max_questions=interview_config.max_questions,
        )

    return InMemorySessionStore(factory)


@pytest.fixture
def orchestrator(
    interview_config: InterviewConfig,
    store: InMemorySessionStore,
    backend: ScriptedBackend,
    jd_store: MemoryJobDescriptionStore,
) -> InterviewOrchestrator:
    return InterviewOrchestrator(
        config=interview_config,
        store=store,
        gateway=SemanticExtractionGateway(backend, timeout=5),
        jd_provider=JobDescriptionProvider(jd_store),
    )
