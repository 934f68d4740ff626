from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

from online.checks.results import CheckResult


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ConnectivityState:
    ok: bool | None = None
    last_run: str | None = None
    last_ok: str | None = None
    last_change: str | None = None
    latency_ms: int | None = None
    target: str | None = None
    error: str | None = None
    error_kind: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class StateStore:
    """Latest connectivity state plus an INIT/UP/DOWN transition history."""

    def __init__(self, max_events: int = 500) -> None:
        self._state = ConnectivityState()
        self._events: list[dict[str, Any]] = []
        self._max_events = max_events
        self._lock = threading.Lock()

    def _build_event(self, ts: str, event_name: str, res: CheckResult) -> dict[str, Any]:
        return {
            "ts": ts,
            "event": event_name,
            "ok": res.ok,
            "latency_ms": res.latency_ms,
            "target": str(res.target) if res.target else None,
            "error": str(res.error) if res.error else None,
            "error_kind": res.error.kind if res.error else None,
        }

    def update(self, res: CheckResult) -> dict[str, Any] | None:
        """Record a check result; returns the transition event, if any."""
        with self._lock:
            cs = self._state
            prev_ok = cs.ok

            cs.ok = res.ok
            cs.last_run = now_iso()
            cs.latency_ms = res.latency_ms
            cs.target = str(res.target) if res.target else None
            cs.error = str(res.error) if res.error else None
            cs.error_kind = res.error.kind if res.error else None

            if res.ok:
                cs.last_ok = cs.last_run

            event: dict[str, Any] | None = None
            if prev_ok is None:
                cs.last_change = cs.last_run
                event = self._build_event(cs.last_run, "INIT", res)
            elif prev_ok != res.ok:
                cs.last_change = cs.last_run
                event = self._build_event(cs.last_run, "UP" if res.ok else "DOWN", res)

            if event is not None:
                self._events.append(event)
            if len(self._events) > self._max_events:
                self._events = self._events[-self._max_events :]
            return event

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return self._state.to_dict()

    def events(self, limit: int = 50) -> list[dict[str, Any]]:
        with self._lock:
            return list(reversed(self._events[-limit:]))
