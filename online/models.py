from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Captive portal endpoints of two unrelated vendors:
# - http://clients3.google.com/generate_204
# - http://detectportal.firefox.com/success.txt
PRIMARY_ADDR = "clients3.google.com:80"
BACKUP_ADDR = "detectportal.firefox.com:80"


class Target(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = Field(..., min_length=1)
    port: int = Field(..., ge=1, le=65535)

    @field_validator("host")
    @classmethod
    def _strip_brackets(cls, v: str) -> str:
        v = v.strip()
        if v.startswith("[") and v.endswith("]"):
            v = v[1:-1]
        elif "[" in v or "]" in v:
            raise ValueError(f"unbalanced brackets in host {v!r}")
        if not v:
            raise ValueError("host must not be empty")
        return v

    @classmethod
    def parse(cls, addr: str) -> "Target":
        """Build a target from a ``host:port`` string (``[v6]:port`` for IPv6 literals)."""
        addr = (addr or "").strip()
        host, sep, port = addr.rpartition(":")
        if not sep or not host:
            raise ValueError(f"expected host:port, got {addr!r}")
        if ":" in host and not host.startswith("["):
            raise ValueError(f"IPv6 literals must be bracketed: {addr!r}")
        return cls(host=host, port=port)

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


class Targets(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: Target
    backup: Target

    @classmethod
    def parse(cls, primary: str, backup: str) -> "Targets":
        return cls(primary=Target.parse(primary), backup=Target.parse(backup))


DEFAULT_TARGETS = Targets.parse(PRIMARY_ADDR, BACKUP_ADDR)
