"""
hyperbolic.errors — Service Error Taxonomy
===========================================

Services raise these for rule violations and missing records.  The API
layer translates every one of them into a ``{"error": message}`` JSON body
with the class's ``status_code``; nothing escapes as an unstructured 500.
"""

from __future__ import annotations


class HyperbolicError(Exception):
    """Base class for all service-level errors.

    ``message`` is safe to show to players; ``details`` carries structured
    context for logs and is never rendered.
    """

    status_code: int = 500

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_payload(self) -> dict:
        return {"error": self.message}


class ValidationError(HyperbolicError):
    """Malformed or missing input (short search query, unknown action)."""

    status_code = 400


class AuthenticationError(HyperbolicError):
    """No authenticated principal on a route that needs one."""

    status_code = 401

    def __init__(self, message: str = "Not authenticated", **kwargs) -> None:
        super().__init__(message, **kwargs)


class PermissionDeniedError(HyperbolicError):
    """Authenticated, but not staff."""

    status_code = 403


class NotFoundError(HyperbolicError):
    """A referenced player or game does not exist."""

    status_code = 404


class ConflictError(HyperbolicError):
    """The request collides with existing state (already linked, code exhausted)."""

    status_code = 409


class AlreadyPerformedError(ConflictError):
    """A once-per-day action was already used today."""

    def __init__(self, kind: str, **kwargs) -> None:
        label = "checked in" if kind == "check_in" else "spun"
        super().__init__(f"Already {label} today", **kwargs)
        self.kind = kind


class PersistenceError(HyperbolicError):
    """The database rejected a write or was unreachable."""

    status_code = 500
