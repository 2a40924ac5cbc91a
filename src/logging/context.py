# src/logging/context.py - v1
"""Contextual logging support: attach request_id, fingerprint, phase to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per craft request.
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_fingerprint: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "fingerprint", default=None
)
_phase: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "phase", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    request_id: str | None = None
    fingerprint: str | None = None
    phase: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        fingerprint=_fingerprint.get(),
        phase=_phase.get(),
    )


def set_request_context(request_id: str, fingerprint: str | None = None) -> None:
    """Set request-level context (called once per craft request)."""
    _request_id.set(request_id)
    _fingerprint.set(fingerprint)
    _phase.set(None)


def set_fingerprint(fingerprint: str | None) -> None:
    """Attach the request fingerprint once it is known."""
    _fingerprint.set(fingerprint)


def set_phase(phase: str | None) -> None:
    """Set the coordinator phase (cache_check, generating, extracting, ...)."""
    _phase.set(phase)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _fingerprint.set(None)
    _phase.set(None)
