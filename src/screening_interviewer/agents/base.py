"""
Common plumbing for extraction agents.

Each agent makes a single round-trip to the understanding backend. The call
is bounded by a timeout here. Timeouts and any other client exception surface
as ``LLMError`` so every agent has a single failure path.
"""

from __future__ import annotations

import asyncio
import logging

from screening_interviewer.models.llm_client import LLMClientBase, LLMError, Message

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ExtractionAgent:
    """Base class for agents that ask the backend one question per call."""

    def __init__(
        self,
        llm_client: LLMClientBase,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """
        Initialize the agent.

        Args:
            llm_client: Backend client shared by all agents.
            timeout: Upper bound in seconds for one round-trip.
        """
        self._llm_client = llm_client
        self._timeout = timeout

    async def _ask(
        self,
        messages: list[Message],
        temperature: float,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        """
        Send ``messages`` and return the stripped response text.

        Raises:
            LLMError: On backend failure, timeout or any client exception.
        """
        try:
            response = await asyncio.wait_for(
                self._llm_client.chat(
                    messages,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    json_mode=json_mode,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise LLMError(f"Backend call exceeded {self._timeout}s") from e
        except LLMError:
            raise
        except Exception as e:
            logger.error(f"Backend call failed unexpectedly: {e}", exc_info=True)
            raise LLMError(f"Backend call failed: {e}") from e
        return (response.content or "").strip()
