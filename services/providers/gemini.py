# services/providers/gemini.py
from __future__ import annotations

import logging
from typing import Any

import httpx
from google import genai
from google.genai import types, errors as gerrors

from services.errors import FatalTransportError, ProviderTimeoutError, classify_upstream
from services.providers.base import ImagePayload, ProviderCaller

_LOG = logging.getLogger(__name__)

# ───────────── Model Names ─────────────
CHAT_MODEL = "gemini-2.5-flash"


class GeminiCaller(ProviderCaller):
    """Primary provider: schema-enforced JSON, accepts images and PDFs inline."""

    name = "gemini"
    label = "Gemini"
    supports_images = True
    supports_schema = True
    supports_inline_documents = True
    default_max_tokens = 8192

    def __init__(
        self,
        api_key: str | None = None,
        model: str = CHAT_MODEL,
        timeout_s: float = 120.0,
        client: genai.Client | None = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise ValueError("GEMINI_API_KEY not set")
            # HttpOptions.timeout is in milliseconds
            client = genai.Client(
                api_key=api_key,
                http_options=types.HttpOptions(timeout=int(timeout_s * 1000)),
            )
        self._client = client
        self.model = model

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
        parts: list[types.Part] = []
        if image is not None:
            parts.append(types.Part.from_bytes(data=image.raw_bytes(), mime_type=image.mime_type))
        parts.append(types.Part.from_text(text=user_content))

        options: dict[str, Any] = {
            "system_instruction": system_instruction or None,
            "temperature": temperature,
            "max_output_tokens": max_tokens,
        }
        if json_mode or response_schema:
            options["response_mime_type"] = "application/json"
        if response_schema:
            options["response_schema"] = response_schema
        config = types.GenerateContentConfig(**options)

        try:
            resp = await self._client.aio.models.generate_content(
                model=self.model,
                contents=[types.Content(role="user", parts=parts)],
                config=config,
            )
        except gerrors.APIError as e:
            _LOG.error("Gemini call failed (%s): %s", e.code, e.message)
            raise classify_upstream(
                self.name, e.code, f"Gemini API Error: {e.message or e.status or e.code}"
            ) from e
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(self.name, "Gemini API Error: request timed out") from e
        except httpx.TransportError as e:
            raise FatalTransportError(self.name, f"Gemini API Error: {e}") from e

        return _first_text(resp)


def _first_text(resp: types.GenerateContentResponse) -> str:
    # take the first candidate's text, skipping "thought" parts
    if not resp.candidates:
        return ""
    content = resp.candidates[0].content
    if content is None or not content.parts:
        return ""
    return "".join(p.text for p in content.parts if p.text and not p.thought)
