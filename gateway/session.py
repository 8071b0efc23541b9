"""
gateway/session.py
────────────────────────────────────────────────────────────────────────
Per-session configuration handed to `AIGateway`.

The chosen provider lives in an explicit `ProviderPreference` record:
loaded once at session start (`PreferenceStore.load`), written only when
the user picks another provider (`AIGateway.select_provider`).
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ValidationError

from core.models.provider import ProviderName

_LOG = logging.getLogger(__name__)

DEFAULT_PROVIDER = ProviderName.gemini


class ProviderPreference(BaseModel):
    provider: ProviderName = DEFAULT_PROVIDER


class PreferenceStore:
    """JSON file holding one user's `ProviderPreference`."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> ProviderPreference:
        try:
            return ProviderPreference.model_validate_json(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return ProviderPreference()
        except (ValidationError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            _LOG.warning("ignoring unreadable provider preference at %s: %s", self.path, exc)
            return ProviderPreference()

    def save(self, pref: ProviderPreference) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(pref.model_dump_json(), encoding="utf-8")


@dataclass
class SessionConfig:
    backend_url: str
    access_token: str | None
    preference: ProviderPreference = field(default_factory=ProviderPreference)

    @property
    def provider(self) -> str:
        return self.preference.provider.value

    @classmethod
    def start(
        cls,
        backend_url: str,
        access_token: str | None,
        store: PreferenceStore | None = None,
    ) -> "SessionConfig":
        pref = store.load() if store is not None else ProviderPreference()
        return cls(backend_url=backend_url.rstrip("/"), access_token=access_token, preference=pref)
