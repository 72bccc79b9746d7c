"""Phase tracking for the audit pipeline.

Every audit runs the same phases in order; each starts out ``pending`` and
ends ``completed``, ``failed`` or ``skipped``. Listeners see every status
transition (the CLI prints them under ``-v``).
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable

import structlog

log = structlog.get_logger("depsentinel.progress")

AUDIT_PHASES = ("walk", "extract", "manifest", "reconcile")


@dataclass
class PhaseProgress:
    phase: str
    status: str = "pending"  # "pending" | "running" | "completed" | "failed" | "skipped"
    started: float | None = None
    finished: float | None = None
    detail: str = ""
    error: str | None = None

    @property
    def duration(self) -> float | None:
        if self.started is None or self.finished is None:
            return None
        return round(self.finished - self.started, 3)

    @property
    def done(self) -> bool:
        return self.status in ("completed", "failed", "skipped")

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase,
            "status": self.status,
            "duration": self.duration,
            "detail": self.detail,
            "error": self.error,
        }


PhaseListener = Callable[[PhaseProgress], None]


class ProgressTracker:
    """Record how far an audit got and how long each phase took."""

    def __init__(
        self,
        phases: Iterable[str] = AUDIT_PHASES,
        listeners: Iterable[PhaseListener] = (),
    ) -> None:
        self._phases: dict[str, PhaseProgress] = {name: PhaseProgress(name) for name in phases}
        self.listeners: list[PhaseListener] = list(listeners)

    @property
    def phases(self) -> list[PhaseProgress]:
        return list(self._phases.values())

    def __getitem__(self, phase: str) -> PhaseProgress:
        return self._phases[phase]

    def _entry(self, phase: str) -> PhaseProgress:
        # Ad-hoc phases are appended after the declared ones
        return self._phases.setdefault(phase, PhaseProgress(phase))

    @contextmanager
    def track(self, phase: str) -> Iterator[PhaseProgress]:
        """Run a block as *phase*; an escaping exception marks it failed and propagates."""
        p = self._entry(phase)
        p.status = "running"
        p.started = time.monotonic()
        self._notify(p)
        try:
            yield p
        except Exception as exc:
            p.status = "failed"
            p.error = str(exc)
            p.finished = time.monotonic()
            self._notify(p)
            raise
        p.status = "completed"
        p.finished = time.monotonic()
        self._notify(p)

    def skip(self, phase: str, reason: str) -> None:
        p = self._entry(phase)
        p.status = "skipped"
        p.detail = reason
        self._notify(p)

    def skip_remaining(self, reason: str) -> None:
        """Mark every phase that never ran as skipped."""
        for p in self.phases:
            if p.status == "pending":
                self.skip(p.phase, reason)

    def get_summary(self) -> dict[str, Any]:
        return {
            "phases": [p.to_dict() for p in self.phases],
            "total_duration": round(sum(p.duration or 0 for p in self.phases), 3),
        }

    def _notify(self, p: PhaseProgress) -> None:
        log.debug("phase.update", phase=p.phase, status=p.status, detail=p.detail)
        for listener in self.listeners:
            try:
                listener(p)
            except Exception:
                log.debug("phase.listener_error", phase=p.phase, exc_info=True)
