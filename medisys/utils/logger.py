"""
Structured logging utilities.
Every record carries the current turn id and the agent handling it, so a
single turn can be followed from routing to the final message.
"""

import logging
import json
from typing import Any
from contextvars import ContextVar

# Context variables for the turn being processed
correlation_id_ctx: ContextVar[str | None] = ContextVar("correlation_id", default=None)
agent_ctx: ContextVar[str | None] = ContextVar("agent", default=None)


class StructuredFormatter(logging.Formatter):
    """
    Formats records as one JSON object per line.
    Context fields passed to StructuredLogger end up as top-level keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }

        correlation_id = correlation_id_ctx.get()
        if correlation_id:
            log_data["turn_id"] = correlation_id

        agent = agent_ctx.get()
        if agent:
            log_data["agent"] = agent

        log_data.update(getattr(record, "extra_fields", {}))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class PlainFormatter(logging.Formatter):
    """Console formatter that appends context fields as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = getattr(record, "extra_fields", {})
        if fields:
            line += " " + " ".join(f"{key}={value}" for key, value in fields.items())
        return line


class StructuredLogger:
    """
    Thin wrapper around a standard logger.
    Log calls take an event name plus arbitrary keyword context fields.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _log(
        self, level: int, event: str, exc_info: bool = False, **extra_fields: Any
    ) -> None:
        self.logger.log(
            level, event, extra={"extra_fields": extra_fields}, exc_info=exc_info
        )

    def debug(self, event: str, **extra_fields: Any) -> None:
        self._log(logging.DEBUG, event, **extra_fields)

    def info(self, event: str, **extra_fields: Any) -> None:
        self._log(logging.INFO, event, **extra_fields)

    def warning(self, event: str, exc_info: bool = False, **extra_fields: Any) -> None:
        self._log(logging.WARNING, event, exc_info=exc_info, **extra_fields)

    def error(self, event: str, exc_info: bool = False, **extra_fields: Any) -> None:
        """
        Log an error event.

        Args:
            event: Event name
            exc_info: If True, include the active exception traceback
            **extra_fields: Additional context fields
        """
        self._log(logging.ERROR, event, exc_info=exc_info, **extra_fields)


def get_logger(name: str) -> StructuredLogger:
    """Returns a structured logger for the given module name."""
    return StructuredLogger(name)


def set_correlation_id(correlation_id: str | None) -> None:
    """Binds the current turn id to the running context."""
    correlation_id_ctx.set(correlation_id)


def get_correlation_id() -> str | None:
    return correlation_id_ctx.get()


def set_active_agent(agent: str | None) -> None:
    """Binds the agent handling the current turn to the running context."""
    agent_ctx.set(agent)


def configure_logging(level: str = "INFO", use_structured: bool = True) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        use_structured: If True, use JSON logging; otherwise plain console lines
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)

    if use_structured:
        formatter = StructuredFormatter(datefmt="%Y-%m-%d %H:%M:%S")
    else:
        formatter = PlainFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # The SDK's HTTP client is chatty at INFO
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))
