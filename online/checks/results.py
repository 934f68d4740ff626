from __future__ import annotations

from dataclasses import dataclass, field

from online.errors import OnlineError
from online.models import Target


@dataclass
class ProbeOutcome:
    target: Target
    ok: bool
    latency_ms: int
    error: OnlineError | None = None


@dataclass
class CheckResult:
    ok: bool
    latency_ms: int
    target: Target | None = None
    error: OnlineError | None = None
    attempts: list[ProbeOutcome] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.ok

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "latency_ms": self.latency_ms,
            "target": str(self.target) if self.target else None,
            "error": str(self.error) if self.error else None,
            "attempts": [
                {
                    "target": str(a.target),
                    "ok": a.ok,
                    "latency_ms": a.latency_ms,
                    "error": str(a.error) if a.error else None,
                }
                for a in self.attempts
            ],
        }
