"""
Candidate-facing message templates.

Fixed interviewer wording lives here; ``render_stage_prompt`` fills in the
candidate name and organization for the stage being entered.
"""

from __future__ import annotations

from screening_interviewer.orchestrator.schemas import InterviewStage, OutboundActivity

STAGE_PROMPTS: dict[InterviewStage, str] = {
    InterviewStage.GREETING: (
        "Hello! Welcome to the {organization} initial interview. I am your AI interviewer."
    ),
    InterviewStage.NAME_PROMPT: (
        "Thank you for confirming the role. To begin, please tell me your full name."
    ),
    InterviewStage.PRE_SCREEN: (
        "It's a pleasure to meet you, {name}. I have confirmed the Job Description for the "
        "role you applied for. Before we dive into technical and value-based questions, "
        "please summarize your educational background and professional experience, "
        "focusing on how you meet the job's basic requirements."
    ),
    InterviewStage.CLOSING: (
        "Thank you, {name}, for taking the time to complete this interview. Your responses "
        "have been recorded and will be reviewed by our hiring team. You can expect to hear "
        "back from us within 3-5 business days. Say anything when you are ready to hear "
        "your interview summary."
    ),
    InterviewStage.COMPLETE: "Your interview has been completed. Thank you!",
}

EMPTY_INPUT = "I didn't receive any speech. Could you please speak up?"

NAME_CLARIFICATION = (
    "I apologize, I didn't catch your name. Could you state it clearly? "
    "For example: 'My name is John Smith'"
)
NAME_CLARIFICATION_SPOKEN = (
    "I apologize, I didn't quite catch your full name. Could you please state it clearly?"
)

TECHNICAL_DIFFICULTIES = (
    "I'm experiencing technical difficulties. Could you please repeat your last response?"
)
TECHNICAL_DIFFICULTIES_SPOKEN = (
    "I'm experiencing some technical difficulties. Could you please repeat?"
)

UNKNOWN_STATE = (
    "I seem to be in an unknown state. Let's restart the interview. "
    "Please refresh if this persists."
)

WELCOME_BACK = "Welcome back. {last_prompt}"

PAUSE_MS = 300


def display_jd_name(jd_id: str) -> str:
    """Role name shown to the candidate (identifier without ``.txt``)."""
    return jd_id.replace(".txt", "")


def render_stage_prompt(
    stage: InterviewStage,
    candidate_name: str | None = None,
    organization: str = "KPMG Global Services",
) -> str:
    """
    Render the fixed prompt for ``stage``.

    Args:
        stage: Stage whose prompt is needed.
        candidate_name: Name substituted for ``{name}``.
        organization: Organization substituted for ``{organization}``.

    Raises:
        KeyError: If the stage has no fixed prompt (jd_selection, jd_questions).
    """
    return STAGE_PROMPTS[stage].format(
        name=candidate_name or "there",
        organization=organization,
    )


def render_jd_selection(jd_ids: list[str] | tuple[str, ...]) -> str:
    """List the selectable roles and ask the candidate to pick one."""
    roles = ", ".join(f"{i}. {display_jd_name(jd_id)}" for i, jd_id in enumerate(jd_ids, start=1))
    return (
        f"We offer interviews for the following roles: {roles}. "
        "Please say the number or the name of the role you are here for."
    )


def render_jd_reprompt(option_count: int) -> str:
    return (
        "I couldn't identify that selection. "
        f"Please select a number between 1 and {option_count}."
    )


def empty_input_activity() -> OutboundActivity:
    return OutboundActivity.from_text(EMPTY_INPUT)


def name_clarification_activity() -> OutboundActivity:
    return OutboundActivity.from_text(
        NAME_CLARIFICATION, spoken_text=NAME_CLARIFICATION_SPOKEN, pause_ms=PAUSE_MS
    )


def technical_difficulties_activity() -> OutboundActivity:
    return OutboundActivity.from_text(
        TECHNICAL_DIFFICULTIES, spoken_text=TECHNICAL_DIFFICULTIES_SPOKEN, pause_ms=PAUSE_MS
    )


def unknown_state_activity() -> OutboundActivity:
    return OutboundActivity.from_text(UNKNOWN_STATE)
