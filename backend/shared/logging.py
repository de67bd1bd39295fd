"""Structured logging configuration with structlog.

The ledger core logs through structlog routed into stdlib logging, so an
embedding application can attach its own handlers.

Environment variables (read through LoggingSettings):
- LOG_FORMAT: "json" for log aggregation, "console" or unset for
  human-readable colored output.
- LOG_LEVEL: "DEBUG", "INFO" (default), "WARNING", "ERROR", or "CRITICAL".
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Literal

import structlog
from pydantic import field_validator
from pydantic_settings import BaseSettings

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from typing import Any

LOG_FILE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


class LoggingSettings(BaseSettings):
    model_config = {"env_prefix": "LOG_"}

    format: Literal["json", "console", ""] = ""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("format", "level", mode="before")
    @classmethod
    def _normalize_case(cls, v: str) -> str:
        return v.lower() if v.lower() in {"json", "console", ""} else v.upper()

    @property
    def json_mode(self) -> bool:
        return self.format == "json"

    @property
    def level_number(self) -> int:
        return getattr(logging, self.level)


def _serialize_enums(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Replace Enum instances (e.g. GameStatus) with their .value for readable log output."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def _is_test() -> bool:
    return "pytest" in sys.modules


def _build_formatter(*, json_mode: bool, colors: bool = False) -> logging.Formatter:
    renderer = structlog.processors.JSONRenderer() if json_mode else structlog.dev.ConsoleRenderer(colors=colors)
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def setup_logging(
    log_dir: Path | str | None = None,
    level: int | None = None,
    settings: LoggingSettings | None = None,
) -> Path | None:
    """Configure structlog with stdout and optional file output.

    Format and level come from LoggingSettings (environment) unless an
    explicit level is given. When log_dir is provided, a datetime-stamped
    log file is created inside it and its path returned; otherwise None.
    Raises pydantic.ValidationError for an unknown LOG_FORMAT or LOG_LEVEL.
    """
    settings = settings or LoggingSettings()
    if level is None:
        level = settings.level_number

    # format_exc_info runs in the ProcessorFormatter, not here, so file
    # output does not process tracebacks twice.
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _serialize_enums,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(_build_formatter(json_mode=settings.json_mode, colors=sys.stdout.isatty()))
    root_logger.addHandler(stdout_handler)

    if log_dir is None or _is_test():
        return None

    dir_path = Path(log_dir)
    dir_path.mkdir(parents=True, exist_ok=True)
    file_path = dir_path / f"{datetime.now(tz=UTC).strftime(LOG_FILE_TIMESTAMP_FORMAT)}.log"
    file_handler = logging.FileHandler(file_path)
    file_handler.setFormatter(_build_formatter(json_mode=settings.json_mode))
    root_logger.addHandler(file_handler)
    return file_path


def bind_game_context(game_id: str | None) -> None:
    """Attach the active game id to every subsequent log line in this context.

    Passing None removes the binding (e.g. after the game ends).
    """
    if game_id is None:
        structlog.contextvars.unbind_contextvars("game_id")
        return
    structlog.contextvars.bind_contextvars(game_id=game_id)
