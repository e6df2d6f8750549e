# crowdscene/exceptions.py
"""
Error taxonomy shared by services and the HTTP layer.

Each error carries the HTTP status it maps to; ``main.py`` turns any
``CrowdSceneError`` into a JSON ``{"detail": ...}`` response.
"""

from typing import Optional


class CrowdSceneError(Exception):
    """Base class for all service errors"""

    status_code = 500
    default_detail = "Internal error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(CrowdSceneError):
    """Malformed or missing client input. Never retried."""

    status_code = 400
    default_detail = "Missing fields"


class AdmissionError(CrowdSceneError):
    """Rate limit exceeded. Retryable once the window has moved on."""

    status_code = 429
    default_detail = "Too many requests"

    def __init__(self, detail: Optional[str] = None, retry_after: float = 0.0):
        super().__init__(detail)
        self.retry_after = max(0.0, retry_after)


class ConfigurationError(CrowdSceneError):
    """Deployment misconfiguration; the operator has to fix it."""

    status_code = 500
    default_detail = "Service misconfigured"


class UpstreamError(CrowdSceneError):
    """External venue source failed or timed out."""

    status_code = 502
    default_detail = "Upstream source unavailable"


class StorageError(CrowdSceneError):
    """Persistence layer failure for the current operation."""

    status_code = 500
    default_detail = "Storage failure"


__all__ = [
    'CrowdSceneError',
    'ValidationError',
    'AdmissionError',
    'ConfigurationError',
    'UpstreamError',
    'StorageError',
]
