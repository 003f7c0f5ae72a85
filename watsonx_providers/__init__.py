"""watsonx_providers: IBM watsonx.ai streaming text-generation adapter.

Typical use::

    from watsonx_providers import (
        ConversationContext, Message, ModelSpec, WatsonxProvider, WatsonxStreamOptions,
    )

    provider = WatsonxProvider()
    stream = provider.stream(
        ModelSpec(id="ibm/granite-3-8b-instruct"),
        ConversationContext(messages=[Message(role="user", content="hi")]),
        WatsonxStreamOptions(max_tokens=64),
    )
    for event in stream:
        if event.type == "text_delta":
            print(event.delta, end="")
"""

from .base.cancellation import CancellationToken, CancelledError
from .base.errors import (
    AuthExchangeError,
    ConfigurationError,
    ErrorCode,
    ProviderError,
    TransportError,
    UpstreamError,
)
from .base.models import (
    AssistantMessage,
    ContentPart,
    ConversationContext,
    Message,
    ModelCost,
    ModelSpec,
    Usage,
    UsageCost,
)
from .base.streaming import AssistantMessageEventStream, accumulate_text
from .watsonx import (
    IamTokenCache,
    WatsonxParameters,
    WatsonxProvider,
    WatsonxStreamOptions,
    build_watsonx_prompt,
)

__all__ = [
    "CancellationToken",
    "CancelledError",
    "AuthExchangeError",
    "ConfigurationError",
    "ErrorCode",
    "ProviderError",
    "TransportError",
    "UpstreamError",
    "AssistantMessage",
    "ContentPart",
    "ConversationContext",
    "Message",
    "ModelCost",
    "ModelSpec",
    "Usage",
    "UsageCost",
    "AssistantMessageEventStream",
    "accumulate_text",
    "IamTokenCache",
    "WatsonxParameters",
    "WatsonxProvider",
    "WatsonxStreamOptions",
    "build_watsonx_prompt",
]
