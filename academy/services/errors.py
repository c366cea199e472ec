from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False)
class ProgressionError(Exception):
    """Domain-specific exception carrying a machine-readable code.

    Services raise it; routers translate it to an ``HTTPException`` so a
    failure is reported to the learner without ending the session.
    """

    code: str
    status_code: int = 400

    def __str__(self) -> str:  # pragma: no cover - human readable message
        return self.code


@dataclass(eq=False)
class ContentNotFound(ProgressionError):
    """A formation, part, course or exam id is absent from the catalog."""

    status_code: int = 404


@dataclass(eq=False)
class InvalidSubmission(ProgressionError):
    """The submission cannot be scored; nothing is written."""

    status_code: int = 400


@dataclass(eq=False)
class PolicyViolation(ProgressionError):
    """The action is not allowed by the gating rules or the user's role."""

    status_code: int = 403


@dataclass(eq=False)
class ConcurrentProgressUpdate(ProgressionError):
    code: str = "progress_conflict"
    status_code: int = 409


@dataclass(eq=False)
class AuthenticationFailed(ProgressionError):
    code: str = "invalid_credentials"
    status_code: int = 401
