"""
Logging for release watch runs.

One ``release_watch`` logger per process: Rich on the console and an
optional JSONL (or plain) file in the report directory. Events carry
structured fields through ``extra``; provider checks log through a
``ProviderLogger`` so every record from that check is tagged with the
provider key, and with the source ("feed" or "page") where one applies.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
import json
import logging
from pathlib import Path
from typing import Any, MutableMapping

from rich.logging import RichHandler

from ..config import LoggingConfig


LOGGER_NAME = "release_watch"

# Context fields shown in front of console messages, in this order.
_CONTEXT_FIELDS = ("provider", "source")

_RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def setup_logging(cfg: LoggingConfig, run_output_dir: Path | None) -> logging.Logger:
    """Configure the release_watch logger for one run.

    Handlers from a previous call are closed and replaced, so repeated runs
    in one process do not duplicate output.
    """
    level = _level_from_string(cfg.level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    if cfg.console:
        console_handler = RichHandler(rich_tracebacks=True, show_time=False, show_level=True, markup=False)
        console_handler.setLevel(level)
        console_handler.setFormatter(ContextFormatter())
        logger.addHandler(console_handler)

    if cfg.file and run_output_dir is not None:
        run_output_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(run_output_dir / cfg.filename, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(JsonlFormatter() if cfg.format == "jsonl" else ContextFormatter(plain=True))
        logger.addHandler(file_handler)

    return logger


class ProviderLogger(logging.LoggerAdapter):
    """Adapter that stamps provider (and optionally source) on every record.

    Fields passed per call through ``extra`` win over the bound ones.
    """

    def __init__(self, logger: logging.Logger, provider: str, source: str | None = None):
        context = {"provider": provider}
        if source is not None:
            context["source"] = source
        super().__init__(logger, context)

    def for_source(self, source: str | Enum) -> "ProviderLogger":
        return ProviderLogger(self.logger, self.extra["provider"], _plain(source))

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def log_event(
    logger: logging.Logger | logging.LoggerAdapter | None,
    message: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Log a message with structured fields.

    Enum values are logged by value and None fields are dropped.
    """
    if logger is None:
        return
    extra = {key: _plain(value) for key, value in fields.items() if value is not None}
    logger.log(level, message, extra=extra)


class ContextFormatter(logging.Formatter):
    """Prefix the message with its provider/source context, e.g. ``[openai/feed]``."""

    def __init__(self, plain: bool = False):
        super().__init__("%(asctime)s %(levelname)s %(message)s" if plain else "%(message)s")

    def formatMessage(self, record: logging.LogRecord) -> str:
        context = "/".join(str(getattr(record, name)) for name in _CONTEXT_FIELDS if getattr(record, name, None))
        formatted = super().formatMessage(record)
        message = record.message
        if not context or not message:
            return formatted
        return formatted.replace(message, f"[{context}] {message}", 1)


class JsonlFormatter(logging.Formatter):
    """One JSON object per line: time, level, logger, message, then event fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value) for key, value in record.__dict__.items() if key not in _RESERVED
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _level_from_string(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)
