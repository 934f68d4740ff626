from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_console_handler: logging.Handler | None = None


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with a single console handler.

    Safe to call more than once: the handler installed by a previous call is replaced.
    """
    global _console_handler

    level_str = (level or "INFO").strip().upper()
    if level_str not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level_str = "INFO"
    log_level = getattr(logging, level_str, logging.INFO)

    root = logging.getLogger()
    if _console_handler and _console_handler in root.handlers:
        root.removeHandler(_console_handler)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT))
    _console_handler = ch

    root.setLevel(log_level)
    root.addHandler(ch)

    logging.getLogger("uvicorn.access").setLevel(max(log_level, logging.WARNING))
    logging.getLogger("urllib3").setLevel(max(log_level, logging.WARNING))
