"""Provider-agnostic data models (public facade).

Concrete definitions live under ``models_parts``; import from here.
"""

from .models_parts.assistant_message import AssistantMessage, StopReason, Usage, UsageCost
from .models_parts.content_part import ContentPart, ContentPartType
from .models_parts.message import ConversationContext, Message, Role
from .models_parts.model_spec import WATSONX_API, ModelCost, ModelSpec

__all__ = [
    "AssistantMessage",
    "StopReason",
    "Usage",
    "UsageCost",
    "ContentPart",
    "ContentPartType",
    "ConversationContext",
    "Message",
    "Role",
    "ModelCost",
    "ModelSpec",
    "WATSONX_API",
]
