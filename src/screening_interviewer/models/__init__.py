"""
Models module for the LLM client abstraction.

Provides a unified interface for talking to the language-understanding backend.
"""

from screening_interviewer.models.llm_client import (
    DEFAULT_API_VERSION,
    LLMClient,
    LLMClientBase,
    LLMError,
    LLMResponse,
    Message,
    parse_json_object,
)

__all__ = [
    "LLMClient",
    "LLMClientBase",
    "LLMError",
    "LLMResponse",
    "Message",
    "DEFAULT_API_VERSION",
    "parse_json_object",
]
