import os
from dotenv import load_dotenv

from online.models import BACKUP_ADDR, PRIMARY_ADDR, Targets

load_dotenv()


def _optional_float(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    return float(raw)


class Settings:
    ONLINE_PRIMARY_TARGET: str = os.getenv("ONLINE_PRIMARY_TARGET", PRIMARY_ADDR)
    ONLINE_BACKUP_TARGET: str = os.getenv("ONLINE_BACKUP_TARGET", BACKUP_ADDR)
    ONLINE_TIMEOUT_SECONDS: float | None = _optional_float(
        os.getenv("ONLINE_TIMEOUT_SECONDS")
    )
    ONLINE_LOG_LEVEL: str = os.getenv("ONLINE_LOG_LEVEL", "INFO")
    MONITOR_INTERVAL: int = int(os.getenv("MONITOR_INTERVAL", 30))
    MONITOR_MAX_EVENTS: int = int(os.getenv("MONITOR_MAX_EVENTS", 500))
    NTFY_URL: str = os.getenv("NTFY_URL")
    NTFY_TOPIC: str = os.getenv("NTFY_TOPIC")


settings = Settings()


def default_targets() -> Targets:
    return Targets.parse(settings.ONLINE_PRIMARY_TARGET, settings.ONLINE_BACKUP_TARGET)
