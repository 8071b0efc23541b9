"""Client-side access to the AI proxy."""

from .ai import AIGateway, GatewayError, RetryableGatewayError
from .session import PreferenceStore, ProviderPreference, SessionConfig

__all__ = [
    "AIGateway",
    "GatewayError",
    "RetryableGatewayError",
    "PreferenceStore",
    "ProviderPreference",
    "SessionConfig",
]
