"""
services/providers/base.py
────────────────────────────────────────────────────────────────────────
The one interface the endpoint layer talks to.

`ProviderCaller.call()` does the checks every backend shares (image
support, base64 sanity, token defaults, timing) and hands the provider
specific wire work to `_complete()`.
"""
from __future__ import annotations

import base64
import binascii
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from services.errors import ImageNotSupportedError, InputValidationError

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImagePayload:
    """Base64 payload plus MIME type, as the browser uploads it."""

    data: str
    mime_type: str

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    def raw_bytes(self) -> bytes:
        try:
            return base64.b64decode(self.data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InputValidationError("Attached file is not valid base64 data.") from exc

    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class ProviderCaller(ABC):
    name: str
    label: str
    supports_images: bool = True
    supports_schema: bool = False
    # accepts non-image binaries (PDF) as inline parts
    supports_inline_documents: bool = False
    default_max_tokens: int = 4096

    async def call(
        self,
        system_instruction: str,
        user_content: str,
        *,
        image: ImagePayload | None = None,
        json_mode: bool = False,
        response_schema: dict[str, Any] | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        if image is not None:
            self._check_attachment(image)

        started = time.perf_counter()
        text = await self._complete(
            system_instruction,
            user_content,
            image=image,
            json_mode=json_mode,
            response_schema=response_schema if self.supports_schema else None,
            temperature=temperature,
            max_tokens=max_tokens or self.default_max_tokens,
        )
        _LOG.info("%s completion: %d chars in %.1fs", self.name, len(text), time.perf_counter() - started)
        if not text:
            _LOG.warning("%s returned an empty completion", self.name)
        return text

    def _check_attachment(self, image: ImagePayload) -> None:
        if not self.supports_images:
            raise ImageNotSupportedError(
                f"{self.label} does not support image analysis. Please use Gemini or OpenAI "
                "for image analysis, or provide a text description instead."
            )
        if not image.is_image and not self.supports_inline_documents:
            raise InputValidationError(
                f"{self.label} cannot read {image.mime_type} attachments directly."
            )
        image.raw_bytes()

    @abstractmethod
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
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
