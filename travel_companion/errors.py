"""Error taxonomy surfaced by the API.

Each class carries the HTTP status it maps to. Route handlers raise these and
``main.create_app`` turns them into plain-text responses so that clients never
see internals (stack traces, upstream payloads).
"""
from __future__ import annotations


class TravelCompanionError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationError(TravelCompanionError):
    status_code = 401
    default_message = "Not authenticated"


class AuthorizationError(TravelCompanionError):
    status_code = 403
    default_message = "Not authorized"


class ValidationFailed(TravelCompanionError):
    status_code = 400
    default_message = "Invalid input"


class NotFoundError(TravelCompanionError):
    status_code = 404
    default_message = "Not found"


class UpstreamError(TravelCompanionError):
    """An external service (LLM, translation) failed or answered garbage."""

    status_code = 500
    default_message = "An upstream service failed. Please try again later."


class ConfigError(RuntimeError):
    """Required configuration is missing; raised at startup."""
