from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(description="Health status")


class ConfigResponse(BaseModel):
    primary: str
    backup: str
    timeout_s: float | None = Field(default=None, description="Per-attempt bound, null when the OS decides")
    interval: int = Field(ge=1)


class ConnectivityStateResponse(BaseModel):
    ok: bool | None = None
    last_run: str | None = None
    last_ok: str | None = None
    last_change: str | None = None
    latency_ms: int | None = None
    target: str | None = None
    error: str | None = None
    error_kind: str | None = None


class StatusEventResponse(BaseModel):
    ts: str
    event: str
    ok: bool | None = None
    latency_ms: int | None = None
    target: str | None = None
    error: str | None = None
    error_kind: str | None = None


class AttemptResponse(BaseModel):
    target: str
    ok: bool
    latency_ms: int
    error: str | None = None


class CheckResponse(BaseModel):
    ok: bool
    latency_ms: int
    target: str | None = None
    error: str | None = None
    attempts: list[AttemptResponse] = Field(default_factory=list)
