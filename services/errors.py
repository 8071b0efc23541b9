"""
services/errors.py
────────────────────────────────────────────────────────────────────────
Error taxonomy for the AI proxy.

Every failure the proxy can report derives from `AIProxyError`, which
carries the HTTP status the endpoint layer answers with.  Transport errors
are split by the upstream status code into retryable and fatal kinds so
callers never have to look at message text to decide on a retry.
"""
from __future__ import annotations

RETRYABLE_STATUSES = frozenset({429, 503})


class AIProxyError(Exception):
    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


# ───────── rejected before any outbound call ────────────────────────
class InputValidationError(AIProxyError):
    status_code = 400


class ImageNotSupportedError(InputValidationError):
    pass


class ProviderNotConfiguredError(AIProxyError):
    status_code = 400


class ExtractionError(AIProxyError):
    status_code = 400


class ServiceNotConfiguredError(AIProxyError):
    status_code = 503


# ───────── upstream failures ────────────────────────────────────────
class TransportError(AIProxyError):
    """Provider answered with a non-2xx status (or not at all)."""

    def __init__(
        self,
        provider: str,
        message: str,
        upstream_status: int | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code)
        self.provider = provider
        self.upstream_status = upstream_status


class RetryableTransportError(TransportError):
    retryable = True

    def __init__(self, provider: str, message: str, upstream_status: int) -> None:
        # 429 / 503 pass through so the gateway can classify on status alone
        super().__init__(provider, message, upstream_status, status_code=upstream_status)


class ProviderTimeoutError(RetryableTransportError):
    def __init__(self, provider: str, message: str) -> None:
        super().__init__(provider, message, upstream_status=504)


class FatalTransportError(TransportError):
    status_code = 500


# ───────── provider returned something unusable ─────────────────────
class NormalizationError(AIProxyError):
    status_code = 500


def classify_upstream(provider: str, status: int | None, message: str) -> TransportError:
    """Map an upstream HTTP status onto the transport error hierarchy."""
    if status in RETRYABLE_STATUSES:
        return RetryableTransportError(provider, message, status)
    return FatalTransportError(provider, message, upstream_status=status)
