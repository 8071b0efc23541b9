"""
OpenAI-compatible chat-completion callers.

OpenAI and DeepSeek share the wire format; DeepSeek only differs in base
URL, model name, and the lack of image input.  Neither enforces a response
schema, so JSON mode here is the generic `json_object` response format and
the expected shape travels in the system instruction.
"""

from __future__ import annotations

import logging
from typing import Any

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from services.errors import FatalTransportError, ProviderTimeoutError, classify_upstream
from services.providers.base import ImagePayload, ProviderCaller

_LOG = logging.getLogger(__name__)


class OpenAICompatibleCaller(ProviderCaller):
    name = "openai"
    label = "OpenAI"
    default_model = "gpt-4o"
    default_base_url: str | None = None

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout_s: float = 120.0,
        base_url: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise ValueError(f"{self.name.upper()}_API_KEY not set")
            # retries belong to the gateway, not the SDK
            client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url or self.default_base_url,
                timeout=timeout_s,
                max_retries=0,
            )
        self._client = client
        self.model = model or self.default_model

    def _messages(self, system_instruction: str, user_content: str, image: ImagePayload | None) -> list[dict[str, Any]]:
        if image is None:
            user: dict[str, Any] = {"role": "user", "content": user_content}
        else:
            user = {
                "role": "user",
                "content": [
                    {"type": "text", "text": user_content},
                    {"type": "image_url", "image_url": {"url": image.data_url()}},
                ],
            }
        return [{"role": "system", "content": system_instruction}, user]

    async def _complete(
        self,
        system_instruction: str,
        user_content: str,
        *,
        image: ImagePayload | None,
        json_mode: bool,
        response_schema: dict[str, Any] | None,
        temperature: float,
        max_tokens: int,
    ) -> str:
        params: dict[str, Any] = {
            "model": self.model,
            "messages": self._messages(system_instruction, user_content, image),
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            params["response_format"] = {"type": "json_object"}

        try:
            completion = await self._client.chat.completions.create(**params)
        except APITimeoutError as e:
            raise ProviderTimeoutError(self.name, f"{self.label} Error: request timed out") from e
        except APIConnectionError as e:
            raise FatalTransportError(self.name, f"{self.label} Error: {e}") from e
        except APIStatusError as e:
            message = _error_message(e)
            _LOG.error("%s call failed (%s): %s", self.label, e.status_code, message)
            raise classify_upstream(self.name, e.status_code, f"{self.label} Error: {message}") from e

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""


class OpenAICaller(OpenAICompatibleCaller):
    """Secondary provider."""


class DeepSeekCaller(OpenAICompatibleCaller):
    """Tertiary provider: text only."""

    name = "deepseek"
    label = "DeepSeek"
    supports_images = False
    default_model = "deepseek-chat"
    default_base_url = "https://api.deepseek.com/v1"


def _error_message(e: APIStatusError) -> str:
    body = e.body
    if isinstance(body, dict):
        nested = body.get("error")
        if isinstance(nested, dict) and nested.get("message"):
            return str(nested["message"])
        if body.get("message"):
            return str(body["message"])
    return e.message
