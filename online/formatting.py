from __future__ import annotations

from typing import Any, Dict

from online.models import Targets


def format_transition(event: Dict[str, Any], targets: Targets) -> tuple[str, str]:
    status = event["event"]  # "UP" or "DOWN"
    title = f"[{status}] internet connectivity"
    if status == "DOWN" and event.get("error_kind"):
        title = f"{title} ({event['error_kind']})"

    lines = [
        f"Primary: {targets.primary}",
        f"Backup: {targets.backup}",
        f"Latency: {event.get('latency_ms')} ms",
    ]
    if event.get("target"):
        lines.append(f"Answered by: {event['target']}")
    if event.get("error"):
        lines.append(f"Error: {event['error']}")
    lines.append(f"Time: {event['ts']}")
    return title, "\n".join(lines)
