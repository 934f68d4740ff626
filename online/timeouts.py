from __future__ import annotations

from datetime import timedelta

from online.errors import InvalidTimeout


def parse_timeout(timeout: int | float | timedelta | None) -> float | None:
    """Normalize a caller supplied bound into seconds.

    ``None`` means no explicit bound: the connect is left to the OS, whose own
    errors are more useful than an artificial timeout. Zero is a configuration
    error, not "wait forever".
    """
    if timeout is None:
        return None
    if isinstance(timeout, bool):
        raise InvalidTimeout(f"timeout must be a number of seconds, got {timeout!r}")
    if isinstance(timeout, timedelta):
        seconds = timeout.total_seconds()
    elif isinstance(timeout, (int, float)):
        seconds = float(timeout)
    else:
        raise InvalidTimeout(f"timeout must be a number of seconds, got {timeout!r}")

    if seconds == 0:
        raise InvalidTimeout("cannot set a 0 duration timeout")
    if not seconds > 0:
        raise InvalidTimeout(f"timeout must be positive, got {timeout!r}")
    if seconds == float("inf"):
        raise InvalidTimeout("an infinite timeout is spelled None")
    return seconds
