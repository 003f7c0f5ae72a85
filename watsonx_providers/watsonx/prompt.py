"""Render a conversation into the flat watsonx text-generation prompt.

The generation endpoint takes a single ``input`` string, so turns are wrapped
in role markers::

    <|system|>
    You are terse.
    <|end|>
    <|user|>
    hi
    <|end|>
    <|assistant|>

The trailing open assistant marker primes the model to answer as the
assistant. Rendering is pure: no I/O, the context is not mutated, and turn
order is kept verbatim (no dedup, no truncation).
"""

from __future__ import annotations

from typing import List

from ..base.models import ConversationContext

SYSTEM_MARKER = "<|system|>"
USER_MARKER = "<|user|>"
ASSISTANT_MARKER = "<|assistant|>"
END_MARKER = "<|end|>"

_ROLE_MARKERS = {
    "user": USER_MARKER,
    "assistant": ASSISTANT_MARKER,
}


def _wrap(marker: str, text: str) -> str:
    return f"{marker}\n{text}\n{END_MARKER}"


def build_watsonx_prompt(context: ConversationContext) -> str:
    """Return the prompt text for ``context``.

    - A system segment is emitted only if the system prompt is non-blank.
    - Only ``user`` and ``assistant`` turns are rendered; other roles are
      skipped silently.
    - Block content keeps text blocks only, joined with a newline.
    - An empty message list still yields a valid prompt.
    """
    parts: List[str] = []
    if context.system_prompt and context.system_prompt.strip():
        parts.append(_wrap(SYSTEM_MARKER, context.system_prompt))

    for msg in context.messages:
        marker = _ROLE_MARKERS.get(msg.role)
        if marker is None:
            continue
        parts.append(_wrap(marker, msg.text_content()))

    parts.append(f"{ASSISTANT_MARKER}\n")
    return "\n".join(parts)


__all__ = [
    "build_watsonx_prompt",
    "SYSTEM_MARKER",
    "USER_MARKER",
    "ASSISTANT_MARKER",
    "END_MARKER",
]
