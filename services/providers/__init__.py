"""Re-export the provider callers and registry for easy imports."""

from .base import ImagePayload, ProviderCaller
from .gemini import GeminiCaller
from .openai_compat import DeepSeekCaller, OpenAICaller
from .registry import ProviderName, ProviderRegistry, build_registry

__all__ = [
    "ImagePayload",
    "ProviderCaller",
    "GeminiCaller",
    "OpenAICaller",
    "DeepSeekCaller",
    "ProviderName",
    "ProviderRegistry",
    "build_registry",
]
