"""
gateway/ai.py
────────────────────────────────────────────────────────────────────────
Client-side AI gateway.

Task-oriented calls (`generate_meal_plan`, `analyze_food_image`,
`analyze_medical_document`, `generate_client_insights`) that hide the
proxy behind the session's token and provider preference.

Retry policy: only proxy answers with a transient status (429 / 503 /
504) are retried, with exponential backoff, for at most `max_attempts`
attempts.  Everything else surfaces on the first failure.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable

import httpx

from core.models.client import MealGenerationParameters
from core.models.meal import DailyPlan
from core.models.provider import ProviderName
from core.models.records import ExtractedRecords
from gateway.session import PreferenceStore, ProviderPreference, SessionConfig

_LOG = logging.getLogger(__name__)

RETRY_STATUSES = frozenset({429, 503, 504})


class GatewayError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RetryableGatewayError(GatewayError):
    pass


class AIGateway:
    def __init__(
        self,
        session: SessionConfig,
        *,
        http: httpx.Client | None = None,
        store: PreferenceStore | None = None,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        timeout: float = 180.0,
    ) -> None:
        self.session = session
        self._http = http or httpx.Client(timeout=timeout)
        self._store = store
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "AIGateway":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ───────────── provider preference ─────────────
    def list_providers(self) -> list[str]:
        return list(self._send("GET", "/api/ai/providers").get("providers", []))

    def select_provider(self, provider: ProviderName | str) -> ProviderPreference:
        name = ProviderName(provider)
        if name.value not in self.list_providers():
            raise GatewayError(f"AI provider '{name.value}' is not available on this server.")
        self.session.preference = ProviderPreference(provider=name)
        if self._store is not None:
            self._store.save(self.session.preference)
        return self.session.preference

    # ───────────── tasks ─────────────
    def generate_meal_plan(self, params: MealGenerationParameters | dict[str, Any]) -> list[DailyPlan]:
        if isinstance(params, MealGenerationParameters):
            params = params.model_dump(mode="json", by_alias=True, exclude_none=True)
        try:
            data = self._post("/api/ai/generate-meal-plan", {"params": params})
        except GatewayError as e:
            _LOG.error("Generate meal plan error: %s", e.message)
            raise
        return [DailyPlan.model_validate(day) for day in data.get("plan") or []]

    def analyze_food_image(
        self,
        base64_image: str | None,
        mime_type: str | None,
        client_note: str | None,
        goal: str,
    ) -> str:
        if not base64_image and not client_note:
            return "Please provide an image or a description of your meal."
        try:
            data = self._post(
                "/api/ai/analyze-food-image",
                {
                    "base64Image": base64_image,
                    "mimeType": mime_type,
                    "clientNote": client_note,
                    "goal": goal,
                },
            )
        except GatewayError as e:
            _LOG.error("Food analysis failed: %s", e.message)
            return f"Error analyzing meal: {e.message or 'Please try again.'}"
        return data.get("result") or "Could not analyze meal."

    def analyze_medical_document(self, file_content: str, mime_type: str, is_image: bool) -> ExtractedRecords:
        try:
            data = self._post(
                "/api/ai/analyze-medical-document",
                {"fileContent": file_content, "mimeType": mime_type, "isImage": is_image},
            )
        except GatewayError as e:
            _LOG.error("Document analysis failed: %s", e.message)
            raise GatewayError(
                f"Failed to analyze document: {e.message or 'Please try again.'}", e.status_code
            ) from e
        return ExtractedRecords.model_validate(data)

    def generate_client_insights(self, client_name: str, weight_history: list[float], goal: str) -> str:
        try:
            data = self._post(
                "/api/ai/generate-insights",
                {"clientName": client_name, "weightHistory": weight_history, "goal": goal},
            )
        except GatewayError as e:
            _LOG.error("Insights generation failed: %s", e.message)
            return f"Could not generate insights: {e.message or 'Please try again.'}"
        return data.get("result") or "No insights available."

    # ───────────── transport ─────────────
    def _post(self, endpoint: str, body: dict[str, Any]) -> dict[str, Any]:
        payload = {"provider": self.session.provider, **body}
        for attempt in range(self.max_attempts):
            try:
                return self._send("POST", endpoint, payload)
            except RetryableGatewayError as e:
                if attempt == self.max_attempts - 1:
                    raise
                backoff = self.base_delay * (2 ** attempt)
                _LOG.warning("%s (%s), retrying in %.1fs…", endpoint, e.status_code, backoff)
                self._sleep(backoff)
        raise GatewayError("AI request retries exhausted")  # pragma: no cover

    def _send(self, method: str, endpoint: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
        if not self.session.access_token:
            raise GatewayError("Not authenticated. Please log in.")
        url = f"{self.session.backend_url}{endpoint}"
        headers = {"Authorization": f"Bearer {self.session.access_token}"}

        try:
            resp = self._http.request(method, url, json=body, headers=headers)
        except httpx.TransportError as e:
            raise GatewayError(
                f"Backend server is not reachable at {self.session.backend_url}. "
                "Please ensure the backend is running."
            ) from e

        if resp.is_success:
            try:
                data = resp.json()
            except ValueError as e:
                raise GatewayError("Invalid response from backend", resp.status_code) from e
            if not isinstance(data, dict):
                raise GatewayError("Invalid response from backend", resp.status_code)
            return data

        message = _error_message(resp)
        _LOG.debug("backend error (%s): %s", resp.status_code, message)
        if resp.status_code in RETRY_STATUSES:
            raise RetryableGatewayError(message, resp.status_code)
        raise GatewayError(message, resp.status_code)


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.reason_phrase or "Backend request failed"
    err = data.get("error") if isinstance(data, dict) else None
    if isinstance(err, dict):
        err = err.get("message")
    return str(err or resp.reason_phrase or "Backend request failed")
