from __future__ import annotations

import logging
import time
from typing import Callable

from online.checks.prober import Timeout, check
from online.checks.results import CheckResult
from online.config import default_targets, settings
from online.errors import InvalidTimeout
from online.models import Targets
from online.notifier import NtfyConfig, NtfyNotifier
from online.state import StateStore

logger = logging.getLogger(__name__)


def _notify_transition(
    notifier: NtfyNotifier | None,
    event: dict | None,
    targets: Targets,
) -> None:
    if notifier is None or event is None:
        return
    if event["event"] not in {"UP", "DOWN"}:
        return

    try:
        notifier.notify_transition(event, targets)
    except Exception:
        # Notification errors should never stop the check loop.
        logger.warning("failed to send %s notification", event["event"], exc_info=True)


def build_notifier() -> NtfyNotifier | None:
    if not settings.NTFY_URL or not settings.NTFY_TOPIC:
        return None
    return NtfyNotifier(NtfyConfig(base_url=settings.NTFY_URL, topic=settings.NTFY_TOPIC))


def run_once(
    store: StateStore,
    notifier: NtfyNotifier | None = None,
    timeout: Timeout = None,
    targets: Targets | None = None,
    connector=None,
) -> CheckResult:
    targets = targets or default_targets()
    res = check(timeout, targets=targets, connector=connector)
    event = store.update(res)
    if event is not None:
        logger.info("connectivity %s (%s)", event["event"], res.error or res.target)
    _notify_transition(notifier, event, targets)
    return res


def probe(
    count: int = 0,
    delay: float = 0.5,
    timeout: Timeout = 5.0,
    stop_on_success: bool = False,
    on_result: Callable[[CheckResult], None] | None = None,
    targets: Targets | None = None,
    connector=None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[CheckResult]:
    """Run repeated checks, ``count`` of them (0 = until interrupted).

    Each result is handed to ``on_result`` as soon as it is known. An invalid
    timeout ends the run after the first result since it can never succeed.
    """
    targets = targets or default_targets()
    results: list[CheckResult] = []
    n = 0
    while count == 0 or n < count:
        res = check(timeout, targets=targets, connector=connector)
        n += 1
        if count:
            results.append(res)
        if on_result is not None:
            on_result(res)
        if res.ok and stop_on_success:
            logger.debug("stopping after first success (iteration %d)", n)
            break
        if isinstance(res.error, InvalidTimeout):
            break
        if count == 0 or n < count:
            sleep(delay)
    return results


def loop_forever(store: StateStore, interval_s: int) -> None:
    notifier = build_notifier()
    targets = default_targets()
    while True:
        start = time.perf_counter()
        run_once(
            store,
            notifier=notifier,
            timeout=settings.ONLINE_TIMEOUT_SECONDS,
            targets=targets,
        )
        elapsed = time.perf_counter() - start
        sleep_s = max(0.0, interval_s - elapsed)
        time.sleep(sleep_s)
