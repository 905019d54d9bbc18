"""Stage-tagged console logging and optional JSON log file setup."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, MutableMapping, TextIO

from .config import Verbosity


_LOGGER_NAME = "nymclient"

_LEVELS = {
    Verbosity.QUIET: logging.ERROR,
    Verbosity.NORMAL: logging.INFO,
    Verbosity.VERBOSE: logging.DEBUG,
}

_COLORS = {
    "DEBUG": "\033[0;36m",
    "INFO": "\033[0;32m",
    "WARNING": "\033[0;33m",
    "ERROR": "\033[0;31m",
    "CRITICAL": "\033[1;31m",
}
_RESET = "\033[0m"


class _StageDefaults(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "stage"):
            record.stage = "pipeline"
        return True


class ConsoleFormatter(logging.Formatter):
    def __init__(self, color: bool = False) -> None:
        super().__init__("[%(levelname)s] [%(stage)s] %(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if not self.color:
            return text
        return f"{_COLORS.get(record.levelname, '')}{text}{_RESET}"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts_utc": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "stage": getattr(record, "stage", "pipeline"),
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        if hasattr(record, "event"):
            payload["event"] = getattr(record, "event")
        return json.dumps(payload, ensure_ascii=True)


class StageLogger(logging.LoggerAdapter):
    """Logger adapter that tags every record with a pipeline stage."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs


def configure_logging(
    verbosity: Verbosity = Verbosity.NORMAL,
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    stream = stream or sys.stderr
    console = logging.StreamHandler(stream)
    console.setLevel(_LEVELS[verbosity])
    console.setFormatter(ConsoleFormatter(color=bool(getattr(stream, "isatty", lambda: False)())))
    console.addFilter(_StageDefaults())
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JsonFormatter())
        file_handler.addFilter(_StageDefaults())
        logger.addHandler(file_handler)

    logger.debug("logging configured", extra={"event": "logging_configured"})
    return logger


def get_logger(stage: str = "pipeline") -> StageLogger:
    return StageLogger(logging.getLogger(_LOGGER_NAME), {"stage": stage})
