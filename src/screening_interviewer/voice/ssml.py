"""Speech synthesis markup for outbound interviewer messages.

Every outbound activity carries a spoken form next to its display text. The
spoken form is the text escaped for XML and wrapped in an SSML ``<speak>``
envelope understood by the channel's speech synthesizer.
"""

from __future__ import annotations

import re

SSML_NAMESPACE = "http://www.w3.org/2001/10/synthesis"

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")
_MARKDOWN_EMPHASIS_RE = re.compile(r"\*\*|__")


def escape_ssml(text: str) -> str:
    """Escape the characters SSML treats as markup (``&``, ``<``, ``>``)."""
    return (text or "").replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def to_ssml(
    text: str,
    *,
    rate: str = "medium",
    pitch: str | None = "medium",
    pause_ms: int | None = None,
    lang: str = "en-US",
) -> str:
    """Wrap ``text`` in an SSML document.

    Args:
        text: Plain text to be spoken.
        rate: Prosody rate.
        pitch: Prosody pitch; omitted when None.
        pause_ms: When set, a ``<break>`` of this length is placed between sentences.
        lang: ``xml:lang`` of the document.

    Returns:
        The SSML string.
    """
    plain = _MARKDOWN_EMPHASIS_RE.sub("", (text or "").strip())
    if pause_ms:
        sentences = [escape_ssml(s) for s in _SENTENCE_SPLIT_RE.split(plain) if s.strip()]
        body = f"<break time='{pause_ms}ms'/>".join(sentences)
    else:
        body = escape_ssml(plain)

    prosody = f"rate='{rate}'"
    if pitch:
        prosody += f" pitch='{pitch}'"

    return (
        f"<speak version='1.0' xmlns='{SSML_NAMESPACE}' xml:lang='{lang}'>"
        f"<prosody {prosody}>{body}</prosody>"
        "</speak>"
    )
