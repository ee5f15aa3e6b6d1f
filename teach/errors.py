# teach/errors.py
"""
Error taxonomy for everything that talks to a text generator.

Each error carries the API error `code` and the HTTP status the routes
answer with, so callers can turn any of them into a JSON error body.
"""

from __future__ import annotations


class MalformedDiffInput(ValueError):
    """Reserved: diffing is total over strings, so nothing raises this today."""
    code = "INVALID_INPUT"
    status_code = 400


class GenerationError(Exception):
    code = "AI_PROVIDER_ERROR"
    status_code = 500
    retryable = False

    def __init__(self, message: str, *, provider: str | None = None):
        super().__init__(message)
        self.message = message
        self.provider = provider

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class GenerationTimeout(GenerationError):
    code = "AI_TIMEOUT"
    status_code = 504


class ProviderUnavailable(GenerationError):
    code = "AI_PROVIDER_ERROR"
    status_code = 503


class ModelNotFound(GenerationError):
    code = "AI_MODEL_NOT_FOUND"
    status_code = 502


class InvalidGeneratedPayload(GenerationError):
    code = "AI_INVALID_RESPONSE"
    status_code = 502


class RateLimited(GenerationError):
    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429
    retryable = True
