"""
services/providers/registry.py
────────────────────────────────────────────────────────────────────────
Lookup table from `ProviderName` to a ready `ProviderCaller`.

Built once per process from the (read-only) settings.  A provider whose
credential is missing is simply not registered: it is not advertised and
requesting it is a configuration error.  Nothing is ever substituted.
"""
from __future__ import annotations

import logging
from typing import Mapping

from core.models.provider import ProviderName
from services.errors import ProviderNotConfiguredError
from services.providers.base import ProviderCaller
from services.providers.gemini import GeminiCaller
from services.providers.openai_compat import DeepSeekCaller, OpenAICaller

_LOG = logging.getLogger(__name__)


class ProviderRegistry:
    def __init__(self, callers: Mapping[ProviderName, ProviderCaller]) -> None:
        self._callers = dict(callers)

    def available(self) -> list[str]:
        return [p.value for p in ProviderName if p in self._callers]

    def get(self, provider: ProviderName | str) -> ProviderCaller:
        try:
            key = ProviderName(provider)
        except ValueError:
            raise ProviderNotConfiguredError(f"Unsupported provider: {provider}") from None
        caller = self._callers.get(key)
        if caller is None:
            raise ProviderNotConfiguredError(
                f"AI provider '{key.value}' is not configured on the server."
            )
        return caller


def build_registry(settings) -> ProviderRegistry:
    callers: dict[ProviderName, ProviderCaller] = {}
    timeout = settings.provider_timeout_s

    if settings.gemini_api_key:
        callers[ProviderName.gemini] = GeminiCaller(
            api_key=settings.gemini_api_key, model=settings.gemini_model, timeout_s=timeout
        )
    if settings.openai_api_key:
        callers[ProviderName.openai] = OpenAICaller(
            api_key=settings.openai_api_key, model=settings.openai_model, timeout_s=timeout
        )
    if settings.deepseek_api_key:
        callers[ProviderName.deepseek] = DeepSeekCaller(
            api_key=settings.deepseek_api_key,
            model=settings.deepseek_model,
            timeout_s=timeout,
            base_url=settings.deepseek_base_url,
        )

    if not callers:
        _LOG.warning("no AI provider credentials configured")
    else:
        _LOG.info("AI providers configured: %s", ", ".join(p.value for p in callers))
    return ProviderRegistry(callers)
