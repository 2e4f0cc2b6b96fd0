"""
LLM client abstraction.

Provides a unified interface to the language-understanding backend. The
default client talks to an OpenAI-compatible chat-completions deployment
(Azure OpenAI URL layout) over httpx.
"""

import ast
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any

import httpx
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2024-08-01-preview"


class Message(BaseModel):
    """A message in a conversation."""

    role: str = Field(..., description="Role of the speaker (system, user, assistant)")
    content: str = Field(..., description="Message content")


class LLMResponse(BaseModel):
    """Response from an LLM."""

    content: str = Field(..., description="Generated text content")
    finish_reason: str = Field(default="stop", description="Reason for completion")
    usage: dict[str, int] = Field(
        default_factory=dict,
        description="Token usage information",
    )
    model: str = Field(default="", description="Model used for generation")


class LLMError(Exception):
    """Exception raised when the understanding backend call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LLMClientBase(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def chat(
        self,
        messages: list[Message],
        temperature: float = 0.7,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """
        Generate a chat completion.

        Args:
            messages: Conversation history.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens to generate.
            json_mode: Ask the backend for a JSON object response.

        Returns:
            Generated response.

        Raises:
            LLMError: If the backend cannot produce a response.
        """
        ...

    async def close(self) -> None:
        """Release any held resources."""


class LLMClient(LLMClientBase):
    """
    Chat-completions client for an Azure-hosted OpenAI deployment.

    Requests go to ``{endpoint}/openai/deployments/{deployment}/chat/completions``
    with the API key in the ``api-key`` header.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        deployment: str,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            endpoint: Base URL of the backend resource.
            api_key: Key sent in the ``api-key`` header.
            deployment: Deployment (model) name.
            api_version: Value of the ``api-version`` query parameter.
            timeout: Timeout in seconds for a request.
            transport: Optional httpx transport, mainly for tests.
        """
        self._endpoint = endpoint.rstrip("/")
        self._api_key = api_key
        self._deployment = deployment
        self._api_version = api_version
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        logger.info(f"Initialized LLM client for deployment: {self._deployment}")

    @property
    def model(self) -> str:
        """Get the deployment name."""
        return self._deployment

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"{self._endpoint}/openai/deployments/{self._deployment}",
                timeout=self._timeout,
                headers={"api-key": self._api_key},
                params={"api-version": self._api_version},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def chat(
        self,
        messages: list[Message],
        temperature: float = 0.7,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """
        Generate a chat completion.

        Args:
            messages: Conversation history.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens to generate.
            json_mode: Request ``response_format = json_object``.

        Returns:
            Generated response.

        Raises:
            LLMError: On transport errors, non-2xx status or an unexpected body.
        """
        payload: dict[str, Any] = {
            "messages": [m.model_dump() for m in messages],
            "model": self._deployment,
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        client = await self._get_client()
        try:
            response = await client.post("/chat/completions", json=payload)
        except httpx.TimeoutException as e:
            logger.warning(f"LLM request timed out after {self._timeout}s")
            raise LLMError(f"LLM request timed out after {self._timeout} seconds") from e
        except httpx.HTTPError as e:
            logger.error(f"LLM transport error: {e}")
            raise LLMError(f"LLM transport error: {e}") from e

        if response.status_code >= 400:
            logger.error(f"LLM returned HTTP {response.status_code}: {response.text[:200]}")
            raise LLMError(
                f"LLM returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
            choice = body["choices"][0]
            content = choice["message"].get("content") or ""
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise LLMError(f"Unexpected LLM response body: {e}") from e

        logger.debug(f"LLM response length: {len(content)} chars")
        return LLMResponse(
            content=content.strip(),
            finish_reason=choice.get("finish_reason") or "stop",
            usage={k: v for k, v in (body.get("usage") or {}).items() if isinstance(v, int)},
            model=body.get("model") or self._deployment,
        )


# Rewrites applied, in order, only after a strict parse has failed.
_JSON_REPAIRS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^```(?:json)?\s*", re.IGNORECASE), ""),
    (re.compile(r"\s*```$"), ""),
    (re.compile(r"[“”]"), '"'),
    (re.compile(r"[‘’]"), "'"),
    (re.compile(r",(\s*[}\]])"), r"\1"),
    (re.compile(r"\bNone\b"), "null"),
    (re.compile(r"\bTrue\b"), "true"),
    (re.compile(r"\bFalse\b"), "false"),
    (re.compile(r"([\{,]\s*)([A-Za-z_][A-Za-z0-9_\-]*)(\s*:)"), r'\1"\2"\3'),
]


def _repair_json(text: str) -> str:
    """Apply the usual fixes for model-written JSON."""
    for pattern, replacement in _JSON_REPAIRS:
        text = pattern.sub(replacement, text)
    if "'" in text and '"' not in text:
        text = text.replace("'", '"')
    return text


def _load_object(text: str) -> dict[str, Any] | None:
    """
    Parse ``text`` as a JSON object.

    Well-formed JSON is parsed untouched so string values survive verbatim.
    Otherwise the text is repaired, and as a last resort read as a Python
    dict literal.
    """
    text = text.strip()
    if not text:
        return None

    for attempt in (text, _repair_json(text)):
        try:
            parsed = json.loads(attempt)
        except json.JSONDecodeError:
            continue
        return parsed if isinstance(parsed, dict) else None

    try:
        literal = ast.literal_eval(text)
    except (ValueError, TypeError, SyntaxError, MemoryError, RecursionError):
        return None
    if not isinstance(literal, dict):
        return None
    try:
        return json.loads(json.dumps(literal, default=list))
    except (TypeError, ValueError):
        return None


def _extract_bracketed(content: str) -> str | None:
    """Return the first balanced {...} span in ``content``."""
    start = content.find("{")
    if start == -1:
        return None

    depth = 0
    for i in range(start, len(content)):
        if content[i] == "{":
            depth += 1
        elif content[i] == "}":
            depth -= 1
            if depth == 0:
                return content[start : i + 1]
    return content[start:]


def parse_json_object(content: str) -> dict[str, Any] | None:
    """
    Extract a JSON object from free-form model output.

    The model may wrap JSON in prose or code fences, use single quotes,
    trailing commas or bare keys. Those are repaired on a best-effort basis.

    Args:
        content: Raw model output.

    Returns:
        The parsed object, or None when no object can be recovered.
    """
    content = (content or "").strip()
    if not content:
        return None

    span = _extract_bracketed(content)
    parsed = _load_object(span) if span is not None else None
    if parsed is None:
        parsed = _load_object(content)
    if parsed is None:
        logger.debug(f"No JSON object in response: {content[:500]}")
    return parsed
