from __future__ import annotations

import asyncio
import errno as errno_codes
import socket

from online.models import Target

REFUSED = "connection-refused"
UNREACHABLE = "network-unreachable"
RESET = "connection-reset"
OS_TIMEOUT = "timed-out"
OTHER = "other"

_REASON_BY_ERRNO = {
    errno_codes.ECONNREFUSED: REFUSED,
    errno_codes.ENETUNREACH: UNREACHABLE,
    errno_codes.EHOSTUNREACH: UNREACHABLE,
    errno_codes.ECONNRESET: RESET,
    errno_codes.ECONNABORTED: RESET,
    errno_codes.ETIMEDOUT: OS_TIMEOUT,
}


class OnlineError(Exception):
    """Base class for every failure a connectivity check can report."""

    kind = "error"

    def __init__(self, message: str, target: Target | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.target = target

    def __str__(self) -> str:
        if self.target is None:
            return self.message
        return f"{self.target}: {self.message}"


class InvalidTimeout(OnlineError, ValueError):
    kind = "invalid-timeout"


class Unresolvable(OnlineError):
    kind = "unresolvable"


class TimedOut(OnlineError, TimeoutError):
    kind = "timed-out"


class TransportError(OnlineError):
    def __init__(
        self,
        message: str,
        target: Target | None = None,
        reason: str = OTHER,
        errno: int | None = None,
    ) -> None:
        super().__init__(message, target)
        self.reason = reason
        self.errno = errno

    @property
    def kind(self) -> str:
        return self.reason


def _root_os_error(exc: OSError) -> OSError:
    # anyio wraps the per-address failure in a generic OSError without errno.
    cause = exc.__cause__
    if exc.errno is None and isinstance(cause, OSError):
        return _root_os_error(cause)
    return exc


def classify(exc: BaseException, target: Target, bounded: bool) -> OnlineError:
    """Map an exception raised while connecting to ``target`` onto the error taxonomy.

    ``bounded`` tells whether the attempt ran under an explicit deadline: a
    ``TimeoutError`` is then the deadline firing, otherwise it is the OS giving up.
    """
    if isinstance(exc, OnlineError):
        return exc
    if isinstance(exc, socket.gaierror):
        err = Unresolvable(f"name resolution failed: {exc}", target)
    elif (
        isinstance(exc, (TimeoutError, asyncio.TimeoutError))
        and bounded
        and getattr(exc, "errno", None) != errno_codes.ETIMEDOUT
    ):
        # The deadline firing carries no errno; an OS ETIMEDOUT is reported verbatim.
        err = TimedOut("connection attempt timed out", target)
    elif isinstance(exc, OSError):
        root = _root_os_error(exc)
        reason = _REASON_BY_ERRNO.get(root.errno, OTHER)
        if reason == OTHER and isinstance(root, ConnectionRefusedError):
            reason = REFUSED
        elif reason == OTHER and isinstance(root, ConnectionResetError):
            reason = RESET
        elif reason == OTHER and isinstance(root, TimeoutError):
            reason = OS_TIMEOUT
        message = root.strerror or str(root) or reason
        err = TransportError(message, target, reason=reason, errno=root.errno)
    else:
        err = OnlineError(str(exc) or exc.__class__.__name__, target)
    err.__cause__ = exc
    return err
