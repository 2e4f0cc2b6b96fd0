"""
Text-based channel adapter.

Relays terminal input to the orchestrator as inbound turns and prints the
outbound activities, standing in for a chat/voice channel.
"""

import asyncio
from abc import ABC, abstractmethod

from screening_interviewer.orchestrator.interview_orchestrator import InterviewOrchestrator
from screening_interviewer.orchestrator.schemas import InboundTurn, OutboundActivity

EXIT_COMMANDS = ("quit", "exit")


class InterviewInterface(ABC):
    """Abstract base class for channel adapters."""

    @abstractmethod
    async def run(self) -> None:
        """Run the interview interface."""
        ...

    @abstractmethod
    async def send_activity(self, activity: OutboundActivity) -> None:
        """
        Deliver an outbound activity to the candidate.

        Args:
            activity: Activity to deliver.
        """
        ...

    @abstractmethod
    async def receive_input(self) -> str | None:
        """
        Receive the candidate's next message.

        Returns:
            The message text, or None when the channel is closed.
        """
        ...


class TextInterface(InterviewInterface):
    """
    Command-line text interface for interviews.

    Provides a simple REPL for conducting a screening interview via terminal.
    """

    def __init__(
        self,
        orchestrator: InterviewOrchestrator,
        candidate_id: str = "terminal-candidate",
        show_ssml: bool = False,
    ) -> None:
        """
        Initialize the text interface.

        Args:
            orchestrator: Interview orchestrator to use.
            candidate_id: Channel identity used for this terminal.
            show_ssml: Also print the spoken markup of each activity.
        """
        self._orchestrator = orchestrator
        self._candidate_id = candidate_id
        self._show_ssml = show_ssml

    async def run(self) -> None:
        """Run the interactive interview session."""
        print("\n" + "=" * 60)
        print("Screening Interview")
        print("=" * 60 + "\n")

        for activity in await self._orchestrator.participant_joined(self._candidate_id):
            await self.send_activity(activity)

        while True:
            text = await self.receive_input()
            if text is None or text.strip().lower() in EXIT_COMMANDS:
                print("\nEnding session...")
                break

            activities = await self._orchestrator.handle_turn(
                InboundTurn(candidate_id=self._candidate_id, text=text)
            )
            for activity in activities:
                await self.send_activity(activity)

    async def send_activity(self, activity: OutboundActivity) -> None:
        print(f"\nInterviewer: {activity.text}\n")
        if self._show_ssml:
            print(f"[ssml] {activity.spoken_markup}\n")

    async def receive_input(self) -> str | None:
        try:
            return await asyncio.to_thread(input, "You: ")
        except EOFError:
            return None
