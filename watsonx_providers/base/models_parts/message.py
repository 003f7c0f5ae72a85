"""
Conversation turn and context DTOs consumed by the prompt builder.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Union

from .content_part import ContentPart

Role = Literal["system", "user", "assistant", "tool"]


@dataclass
class Message:
    """One conversation turn.

    ``content`` is either a plain string or an ordered list of blocks.
    """

    role: Role
    content: Union[str, List[ContentPart]]

    def text_content(self) -> str:
        """Return the turn's text: the string itself, or text blocks joined by newlines.

        Non-text blocks are dropped.
        """
        if isinstance(self.content, str):
            return self.content
        return "\n".join(p.text or "" for p in self.content if p.type == "text")


@dataclass
class ConversationContext:
    """System prompt plus ordered turns for one generation call."""

    system_prompt: Optional[str] = None
    messages: List[Message] = field(default_factory=list)


__all__ = ["Message", "Role", "ConversationContext"]
