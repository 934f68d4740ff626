"""Primary-then-backup connectivity check.

``check`` and ``check_async`` share the same policy:

* the primary target is tried first; if it answers the backup is never touched,
* on any primary failure the backup is tried once,
* if both fail, the primary's error is reported (a primary timeout therefore
  surfaces as ``TimedOut``); both outcomes are kept in ``CheckResult.attempts``.

Attempts are sequential, so a bounded check takes at most twice the timeout.
The connector decides how a single attempt runs (blocking socket, asyncio or
anyio); any object with a matching ``connect(target, timeout)`` method works.
"""
from __future__ import annotations

import logging
from datetime import timedelta

from online.checks.connectors import AsyncioConnector, BlockingConnector
from online.checks.results import CheckResult, ProbeOutcome
from online.errors import InvalidTimeout
from online.models import DEFAULT_TARGETS, Targets
from online.timeouts import parse_timeout

logger = logging.getLogger(__name__)

Timeout = int | float | timedelta | None


def _invalid(err: InvalidTimeout) -> CheckResult:
    logger.debug("rejected timeout: %s", err)
    return CheckResult(ok=False, latency_ms=0, error=err)


def _from_primary(primary: ProbeOutcome) -> CheckResult | None:
    if not primary.ok:
        logger.info("primary %s unreachable (%s), trying backup", primary.target, primary.error)
        return None
    return CheckResult(
        ok=True, latency_ms=primary.latency_ms, target=primary.target, attempts=[primary]
    )


def _fold(primary: ProbeOutcome, backup: ProbeOutcome) -> CheckResult:
    attempts = [primary, backup]
    latency_ms = primary.latency_ms + backup.latency_ms
    if backup.ok:
        return CheckResult(ok=True, latency_ms=latency_ms, target=backup.target, attempts=attempts)

    logger.warning(
        "both targets unreachable: %s (%s), %s (%s)",
        primary.target, primary.error, backup.target, backup.error,
    )
    return CheckResult(ok=False, latency_ms=latency_ms, error=primary.error, attempts=attempts)


def check(
    timeout: Timeout = None,
    *,
    targets: Targets | None = None,
    connector=None,
) -> CheckResult:
    """Blocking check. ``timeout`` bounds each attempt; ``None`` leaves it to the OS."""
    try:
        dur = parse_timeout(timeout)
    except InvalidTimeout as err:
        return _invalid(err)
    targets = targets or DEFAULT_TARGETS
    connector = connector or BlockingConnector()

    primary = connector.connect(targets.primary, dur)
    result = _from_primary(primary)
    if result is not None:
        return result
    return _fold(primary, connector.connect(targets.backup, dur))


async def check_async(
    timeout: Timeout = None,
    *,
    targets: Targets | None = None,
    connector=None,
) -> CheckResult:
    """Same as ``check``, on ``AsyncioConnector`` unless another connector is given."""
    try:
        dur = parse_timeout(timeout)
    except InvalidTimeout as err:
        return _invalid(err)
    targets = targets or DEFAULT_TARGETS
    connector = connector or AsyncioConnector()

    primary = await connector.connect(targets.primary, dur)
    result = _from_primary(primary)
    if result is not None:
        return result
    return _fold(primary, await connector.connect(targets.backup, dur))


def is_online(timeout: Timeout = None, **kwargs) -> bool:
    return check(timeout, **kwargs).ok


async def is_online_async(timeout: Timeout = None, **kwargs) -> bool:
    return (await check_async(timeout, **kwargs)).ok
