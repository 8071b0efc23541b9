from __future__ import annotations

import base64

import pytest
from fastapi.testclient import TestClient

from api.deps import get_registry
from config import settings
from main import app
from services.auth import create_token
from services.providers import ProviderCaller, ProviderName, ProviderRegistry

PNG_B64 = base64.b64encode(b"\x89PNG\r\n\x1a\nfake-image-bytes").decode()


class FakeCaller(ProviderCaller):
    """Records every completion request and answers with a canned reply."""

    def __init__(
        self,
        name: str,
        reply: str = "",
        *,
        label: str | None = None,
        images: bool = True,
        schema: bool = False,
        inline_documents: bool = False,
        error: Exception | None = None,
    ) -> None:
        self.name = name
        self.label = label or name.title()
        self.supports_images = images
        self.supports_schema = schema
        self.supports_inline_documents = inline_documents
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    async def _complete(self, system_instruction, user_content, **kwargs) -> str:
        self.calls.append({"system": system_instruction, "user": user_content, **kwargs})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture(autouse=True)
def jwt_secret(monkeypatch):
    monkeypatch.setattr(settings, "jwt_secret", "test-secret")
    return "test-secret"


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_token('user-123')}"}


@pytest.fixture
def callers() -> dict[ProviderName, FakeCaller]:
    return {
        ProviderName.gemini: FakeCaller("gemini", schema=True, inline_documents=True),
        ProviderName.openai: FakeCaller("openai", label="OpenAI"),
        ProviderName.deepseek: FakeCaller("deepseek", label="DeepSeek", images=False),
    }


@pytest.fixture
def client(callers):
    app.dependency_overrides[get_registry] = lambda: ProviderRegistry(callers)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def png_b64() -> str:
    return PNG_B64


def _text_pdf(text: str) -> bytes:
    """Single-page PDF whose content stream draws `text` in Helvetica."""
    stream = f"BT /F1 12 Tf 20 100 Td ({text}) Tj ET".encode()
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 300 144] /Contents 4 0 R "
        b"/Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at)
    return bytes(out)


@pytest.fixture
def text_pdf_b64() -> str:
    return base64.b64encode(_text_pdf("Allergies: peanuts and shellfish")).decode()
