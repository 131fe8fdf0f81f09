# src/tiercascade/logging_config.py
"""
Logging setup for applications embedding tiercascade.

The library only creates ``tiercascade.*`` module loggers and never installs
handlers on import. An application calls :func:`configure_logging` once:

    from tiercascade.logging_config import configure_logging, log_display

    configure_logging({"console_enabled": True, "levels": {"tiercascade": "DEBUG"}})
    log_display(logger, logging.INFO, "Cascade ready: %s", head.name)

While the console is disabled (the default) the console handler only lets
through records logged with :func:`log_display`, so cache hit/back-fill
chatter stays out of the terminal.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

DEFAULTS: dict[str, Any] = {
    "console_enabled": False,
    "console_level": "WARNING",
    "display_level": "INFO",
    "file_path": None,
    "file_level": "DEBUG",
    "file_max_bytes": 5 * 1024 * 1024,
    "file_backups": 3,
    "format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    "levels": {
        "tiercascade": "INFO",
        "redis": "WARNING",
        "aiosqlite": "WARNING",
    },
}

_installed: list[logging.Handler] = []


class DisplayFilter(logging.Filter):
    """Pass everything when the console is on, else only display records."""

    def __init__(self, console_enabled: bool = False, display_level: int = logging.INFO) -> None:
        super().__init__()
        self.console_enabled = console_enabled
        self.display_level = display_level

    def filter(self, record: logging.LogRecord) -> bool:
        if self.console_enabled:
            return True
        return bool(getattr(record, "display", False)) and record.levelno >= self.display_level


def configure_logging(settings: dict[str, Any] | None = None) -> list[logging.Handler]:
    """
    Install tiercascade's console (and optional rotating file) handlers.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        settings: Overrides for :data:`DEFAULTS`; ``levels`` maps logger
            names to level names.

    Returns:
        The handlers now attached to the root logger.
    """
    config = {**DEFAULTS, **(settings or {})}
    root = logging.getLogger()

    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config["format"])
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    if config["console_enabled"]:
        console.setLevel(config["console_level"])
    console.addFilter(
        DisplayFilter(
            console_enabled=config["console_enabled"],
            display_level=logging.getLevelName(config["display_level"]),
        )
    )
    _installed.append(console)

    if config["file_path"]:
        path = Path(config["file_path"]).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=config["file_max_bytes"],
            backupCount=config["file_backups"],
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(config["file_level"])
        _installed.append(file_handler)

    root.setLevel(logging.DEBUG)
    for handler in _installed:
        root.addHandler(handler)
    for name, level in config["levels"].items():
        logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).debug("Installed %d log handler(s)", len(_installed))
    return list(_installed)


def log_display(logger: logging.Logger, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
    """Log *msg* so it reaches the console even while the console is disabled."""
    extra = dict(kwargs.pop("extra", None) or {})
    extra["display"] = True
    logger.log(level, msg, *args, extra=extra, **kwargs)
