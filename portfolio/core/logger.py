import logging
import threading
from dataclasses import dataclass, field
from enum import StrEnum

import orjson
import structlog
from beartype import beartype

from portfolio.core.settings import settings

# Single console lock shared by every connection task and worker thread.
CONSOLE_LOCK = threading.Lock()


class LoggerError(Exception):
    """Exception for logger related issues."""


class LogLevel(StrEnum):
    """LogLevel types for logger configuration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogIcon(StrEnum):
    """Icon mappings for different log categories."""

    DEFAULT = "📋"

    # Status & Results
    SUCCESS = "✅"
    ERROR = "❌"
    WARNING = "⚠️"
    CRITICAL = "🔴"

    # Operations
    START = "🚀"
    COMPLETE = "✨"
    STOP = "🛑"

    # Components & Services
    ADAPTER = "🔌"
    ROUTER = "🧭"

    # Technical Systems
    NETWORK = "🌐"

    # Data & Content
    UPLOAD = "📤"
    DOWNLOAD = "📥"

    # Security & Compliance
    FORBIDDEN = "🚫"


@dataclass
class LoggerConfig:
    """Renderer choice and level threshold, read from settings by default."""
    debug: bool = field(default_factory=lambda: settings.DEBUG)
    log_level: LogLevel = field(default_factory=lambda: LogLevel(settings.LOG_LEVEL))


class ConsolePrintLogger(structlog.PrintLogger):
    """PrintLogger whose writes are serialized through ``CONSOLE_LOCK``."""

    def msg(self, message: str) -> None:
        with CONSOLE_LOCK:
            super().msg(message)

    log = debug = info = warn = warning = msg
    fatal = failure = err = error = critical = exception = msg


def console_logger_factory(*args) -> ConsolePrintLogger:
    return ConsolePrintLogger()


def orjson_dumps(obj, **kwargs) -> str:
    """orjson serializer returning ``str`` so it can feed a print logger."""
    return orjson.dumps(obj, **kwargs).decode()


class BusinessRulesProcessor:
    """
    Apply business rules to log events.

    Business Rules:
    - Rule 1: Convert event messages to uppercase for consistency.
    - Rule 2: Truncate event messages exceeding 80 characters to prevent log bloat.
    - Rule 3: Validate that icon kwarg, if provided, is a LogIcon enum member.
    - Rule 4: Prepend icons to event messages only in DEBUG mode.
    """

    def __init__(self, debug: bool) -> None:
        self.debug = debug

    @beartype
    def __call__(self, logger, name: str, event_dict: dict) -> dict:
        """Transform event with uppercase, length limit, and optional icon."""
        try:
            event = str(event_dict.get("event", ""))[:80].upper()
            icon_enum = LogIcon(event_dict.pop("icon", LogIcon.DEFAULT))

            if self.debug:
                event = f"{icon_enum.value} {event}"

            event_dict["event"] = event
            return event_dict
        except ValueError as err:
            raise LoggerError("Wrong Icon chosen, please choose a valid LogIcon enum member") from err
        except Exception as ex:
            raise LoggerError(f"Error with extra kwargs passed to the logger: {ex}") from ex


def dev_pipeline_renderer(logger, name: str, event_dict: dict) -> str:
    """Render log events in human-readable format with pipe-separated fields."""
    reserved_keys = {"timestamp", "level", "event", "filename", "lineno", "exception"}

    timestamp = event_dict.get("timestamp", "")
    level = event_dict.get("level", LogLevel.INFO.value).upper()
    event = event_dict.get("event", "")
    filename = event_dict.get("filename", "")
    lineno = event_dict.get("lineno", "")

    location = f"{filename}:{lineno}" if filename else ""

    extra_kwargs = " | ".join(
        f"{k}={v}" for k, v in event_dict.items() if k not in reserved_keys
    )

    parts = [timestamp, level, event, extra_kwargs, location]
    line = " | ".join(filter(None, parts))
    if exception := event_dict.get("exception"):
        line = f"{line}\n{exception}"
    return line


def setup_logging(config: LoggerConfig) -> None:
    """Configure structlog once per process: dev pipe renderer in debug, orjson lines otherwise."""
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
            additional_ignores=["logger"]
        ),
        BusinessRulesProcessor(debug=config.debug),
    ]

    if config.debug:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            dev_pipeline_renderer,
        ]
    else:
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(serializer=orjson_dumps),
        ]

    structlog.configure(
        processors=processors,
        logger_factory=console_logger_factory,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, config.log_level.value)),
        cache_logger_on_first_use=True,
    )


setup_logging(LoggerConfig())

logger = structlog.get_logger()
