"""IBM watsonx.ai streaming adapter."""

from .client import WatsonxProvider
from .options import WatsonxParameters, WatsonxStreamOptions
from .prompt import build_watsonx_prompt
from .sse import ReconstructorSignal, SSEDeltaReconstructor, text_delta
from .token_cache import IamTokenCache, TokenCacheEntry

__all__ = [
    "WatsonxProvider",
    "WatsonxParameters",
    "WatsonxStreamOptions",
    "build_watsonx_prompt",
    "ReconstructorSignal",
    "SSEDeltaReconstructor",
    "text_delta",
    "IamTokenCache",
    "TokenCacheEntry",
]
