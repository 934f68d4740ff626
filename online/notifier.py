from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from online.formatting import format_transition
from online.models import Targets

# ntfy emoji tags per failure kind; anything unlisted only gets the generic tags.
_KIND_TAGS = {
    "unresolvable": "mag",
    "timed-out": "hourglass",
    "connection-refused": "no_entry",
    "network-unreachable": "satellite",
    "connection-reset": "boom",
}


@dataclass
class NtfyConfig:
    base_url: str
    topic: str
    priority_down: int = 4
    priority_up: int = 2
    # No route at all usually means the local link is gone, not a remote outage.
    priority_unreachable: int = 5


class NtfyNotifier:
    """Posts connectivity UP/DOWN transitions to an ntfy topic."""

    def __init__(self, cfg: NtfyConfig) -> None:
        self.cfg = cfg

    def _priority(self, event: dict[str, Any]) -> int:
        if event["event"] == "UP":
            return self.cfg.priority_up
        if event.get("error_kind") == "network-unreachable":
            return self.cfg.priority_unreachable
        return self.cfg.priority_down

    def _tags(self, event: dict[str, Any]) -> str:
        if event["event"] == "UP":
            return "white_check_mark,online"
        tags = ["globe_with_meridians", "offline"]
        kind_tag = _KIND_TAGS.get(event.get("error_kind") or "")
        if kind_tag:
            tags.append(kind_tag)
        return ",".join(tags)

    def notify_transition(self, event: dict[str, Any], targets: Targets) -> None:
        if event["event"] not in {"UP", "DOWN"}:
            return
        title, message = format_transition(event=event, targets=targets)
        url = f"{self.cfg.base_url.rstrip('/')}/{self.cfg.topic}"
        headers = {
            "Title": title,
            "Priority": str(self._priority(event)),
            "Tags": self._tags(event),
        }
        resp = requests.post(url, data=message.encode("utf-8"), headers=headers, timeout=5)
        resp.raise_for_status()
