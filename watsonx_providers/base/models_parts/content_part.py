"""
Content block model shared by conversation turns and the streamed output.

Only ``text`` blocks are rendered into watsonx prompts; other block types
(images, tool calls) may appear in a conversation and are skipped.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

ContentPartType = Literal[
    "text",
    "image",
    "tool_call",
    "other",
]


@dataclass
class ContentPart:
    """A single content block.

    Attributes:
        type: Semantic kind of the block, e.g. ``"text"``.
        text: Text for ``text`` blocks. The streamed output's text block is
            updated in place as deltas arrive.
        data: Optional payload for non-text blocks.
    """

    type: ContentPartType
    text: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


__all__ = ["ContentPart", "ContentPartType"]
