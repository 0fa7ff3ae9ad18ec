"""Logging utilities for KB MCP Atlassian.

When the process serves MCP over stdio, stdout carries protocol frames and
nothing else. This module decides once, at startup, whether the process is
such a protocol endpoint and routes every log line accordingly:

- protocol endpoint: all levels go to stderr, without color
- interactive: ERROR/WARN go to stderr, INFO/DEBUG to stdout, with color

Per-module handles (``get_logger``) share a single ``LoggerState`` holding the
severity threshold, so ``set_log_level`` affects every handle at once.
"""

from __future__ import annotations

import logging
import os
import pprint
import sys
import traceback
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, TextIO

import click

LOGGER_NAME = "kb-mcp-atlassian"

# Libraries that log through the stdlib root logger.
THIRD_PARTY_LOGGERS = ["mcp", "mcp.server", "atlassian", "urllib3"]


class LogLevel(IntEnum):
    """Log severity. A lower value is more severe."""

    ERROR = 0
    WARN = 1
    INFO = 2
    DEBUG = 3

    @property
    def logging_level(self) -> int:
        return _STDLIB_LEVELS[self]

    @property
    def color(self) -> str:
        return _COLORS[self]

    @classmethod
    def from_name(cls, name: str | None) -> LogLevel | None:
        """Match a level name case-insensitively, None if unrecognized."""
        if not name:
            return None
        name = name.strip().lower()
        if name == "warning":
            name = "warn"
        for level in cls:
            if level.name.lower() == name:
                return level
        return None

    @classmethod
    def from_logging_level(cls, levelno: int) -> LogLevel:
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARN
        if levelno >= logging.INFO:
            return cls.INFO
        return cls.DEBUG


_STDLIB_LEVELS = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}

_COLORS = {
    LogLevel.ERROR: "red",
    LogLevel.WARN: "yellow",
    LogLevel.INFO: "blue",
    LogLevel.DEBUG: "bright_black",
}


class ExecutionMode(Enum):
    INTERACTIVE = "interactive"
    PROTOCOL_ENDPOINT = "protocol-endpoint"


def _is_tty(stream: Any) -> bool:
    try:
        return bool(stream.isatty())
    except (AttributeError, ValueError, OSError):
        # No isatty() or the stream is already closed
        return False


def detect_execution_mode(
    env: Mapping[str, str] | None = None, stream: Any = None
) -> ExecutionMode:
    """Classify the process as an MCP protocol endpoint or an interactive run.

    The process is a protocol endpoint when ``MCP_SERVER_MODE`` is not set to
    ``false`` and stdout is not attached to a terminal.

    Args:
        env: Environment mapping, ``os.environ`` when omitted
        stream: The primary output stream, ``sys.stdout`` when omitted

    Returns:
        The detected ExecutionMode
    """
    if env is None:
        env = os.environ
    if stream is None:
        stream = sys.stdout

    if env.get("MCP_SERVER_MODE", "").strip().lower() == "false":
        return ExecutionMode.INTERACTIVE
    if _is_tty(stream):
        return ExecutionMode.INTERACTIVE
    return ExecutionMode.PROTOCOL_ENDPOINT


def log_level_from_env(env: Mapping[str, str] | None = None) -> LogLevel:
    """Read LOG_LEVEL, falling back to INFO when unset or unrecognized."""
    if env is None:
        env = os.environ
    level = LogLevel.from_name(env.get("LOG_LEVEL"))
    # ERROR is 0, so test for None rather than truthiness
    return LogLevel.INFO if level is None else level


def format_data(data: Any) -> str:
    """Render the optional payload that follows a log line."""
    if isinstance(data, str):
        return data
    if isinstance(data, BaseException):
        return "".join(
            traceback.format_exception(type(data), data, data.__traceback__)
        ).rstrip("\n")
    return pprint.pformat(data)


class DiagnosticFormatter(logging.Formatter):
    """Formats records as ``[LEVEL][module] message``.

    The ``[LEVEL][module]`` prefix is colored when the state allows it.
    """

    def __init__(self, state: LoggerState) -> None:
        super().__init__()
        self.state = state

    def format(self, record: logging.LogRecord) -> str:
        level = LogLevel.from_logging_level(record.levelno)
        module_name = getattr(record, "module_name", None)
        if module_name is None:
            module_name = record.name.removeprefix(f"{LOGGER_NAME}.")
        prefix = f"[{level.name}][{module_name}]"
        if self.state.color_enabled:
            prefix = click.style(prefix, fg=level.color)
        return f"{prefix} {record.getMessage()}"


class RoutingHandler(logging.Handler):
    """Writes records to the stream the state selects for their level.

    Each line is a single write followed by a flush. A ``data`` attribute on
    the record is written as a second write on the same stream.
    """

    def __init__(self, state: LoggerState) -> None:
        super().__init__(logging.DEBUG)
        self.state = state
        self.setFormatter(DiagnosticFormatter(state))

    def filter(self, record: logging.LogRecord) -> bool:
        level = LogLevel.from_logging_level(record.levelno)
        return self.state.is_enabled_for(level) and super().filter(record)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            stream = self.state.stream_for(LogLevel.from_logging_level(record.levelno))
            stream.write(self.format(record) + "\n")
            stream.flush()
            data = getattr(record, "data", None)
            if data is not None:
                stream.write(format_data(data) + "\n")
                stream.flush()
        except Exception:
            self.handleError(record)


class ThresholdFilter(logging.Filter):
    """Drops third-party records below the shared severity threshold."""

    def __init__(self, state: LoggerState) -> None:
        super().__init__()
        self.state = state

    def filter(self, record: logging.LogRecord) -> bool:
        return self.state.is_enabled_for(LogLevel.from_logging_level(record.levelno))


@dataclass(eq=False)
class LoggerState:
    """Process-scoped logging settings shared by every DiagnosticLogger.

    ``execution_mode`` and the streams are fixed at construction; only
    ``min_level`` changes afterwards, through ``set_level``. The threshold is
    not synchronized; a briefly stale value in another thread is tolerated.
    """

    execution_mode: ExecutionMode
    min_level: LogLevel = LogLevel.INFO
    primary_stream: TextIO = field(default_factory=lambda: sys.stdout)
    diagnostic_stream: TextIO = field(default_factory=lambda: sys.stderr)
    handler: RoutingHandler = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.handler = RoutingHandler(self)

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        primary_stream: TextIO | None = None,
        diagnostic_stream: TextIO | None = None,
    ) -> LoggerState:
        """Build the state from LOG_LEVEL, MCP_SERVER_MODE and stdout's TTY status."""
        primary_stream = primary_stream or sys.stdout
        diagnostic_stream = diagnostic_stream or sys.stderr
        return cls(
            execution_mode=detect_execution_mode(env, primary_stream),
            min_level=log_level_from_env(env),
            primary_stream=primary_stream,
            diagnostic_stream=diagnostic_stream,
        )

    @property
    def is_protocol_endpoint(self) -> bool:
        return self.execution_mode is ExecutionMode.PROTOCOL_ENDPOINT

    @property
    def color_enabled(self) -> bool:
        return not self.is_protocol_endpoint

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level <= self.min_level

    def stream_for(self, level: LogLevel) -> TextIO:
        if self.is_protocol_endpoint or level <= LogLevel.WARN:
            return self.diagnostic_stream
        return self.primary_stream

    def set_level(self, level: LogLevel | str) -> None:
        if isinstance(level, str):
            parsed = LogLevel.from_name(level)
            if parsed is None:
                raise ValueError(f"Unknown log level: {level!r}")
            level = parsed
        self.min_level = LogLevel(level)


class DiagnosticLogger:
    """A logging handle labelled with the name of the module using it."""

    def __init__(self, module_name: str, state: LoggerState | None = None) -> None:
        self.module_name = module_name
        self._state = state

    @property
    def state(self) -> LoggerState:
        # Resolved per call so a later configure_logging() is picked up.
        return self._state if self._state is not None else get_logger_state()

    def _log(self, level: LogLevel, message: str, data: Any = None) -> None:
        state = self.state
        if not state.is_enabled_for(level):
            return
        record = logging.LogRecord(
            name=f"{LOGGER_NAME}.{self.module_name}",
            level=level.logging_level,
            pathname=__file__,
            lineno=0,
            msg=message,
            args=None,
            exc_info=None,
        )
        record.module_name = self.module_name
        record.data = data
        state.handler.handle(record)

    def error(self, message: str, data: Any = None) -> None:
        self._log(LogLevel.ERROR, message, data)

    def warn(self, message: str, data: Any = None) -> None:
        self._log(LogLevel.WARN, message, data)

    def info(self, message: str, data: Any = None) -> None:
        self._log(LogLevel.INFO, message, data)

    def debug(self, message: str, data: Any = None) -> None:
        self._log(LogLevel.DEBUG, message, data)

    def __repr__(self) -> str:
        return f"DiagnosticLogger({self.module_name!r})"


_logger_state: LoggerState | None = None


def get_logger_state() -> LoggerState:
    """Return the process-wide state, creating it from the environment on first use."""
    global _logger_state
    if _logger_state is None:
        _logger_state = LoggerState.from_env()
    return _logger_state


def configure_logging(state: LoggerState | None) -> None:
    """Replace the process-wide state (None resets it to lazy detection)."""
    global _logger_state
    _logger_state = state


def get_logger(module_name: str, state: LoggerState | None = None) -> DiagnosticLogger:
    """Create a handle for ``module_name``.

    Args:
        module_name: Label printed after the level in every line
        state: Explicit state to bind to, the process-wide state when omitted

    Returns:
        A new DiagnosticLogger
    """
    return DiagnosticLogger(module_name, state)


def set_log_level(level: LogLevel | str, state: LoggerState | None = None) -> None:
    """Change the severity threshold for all handles sharing the state."""
    if state is None:
        state = get_logger_state()
    state.set_level(level)
    if _logger_state is state:
        logging.getLogger().setLevel(state.min_level.logging_level)


def setup_logging(state: LoggerState | None = None) -> logging.Logger:
    """
    Route all logging through the given (or process-wide) state.

    The ``kb-mcp-atlassian`` logger gets the state's routing handler, and the
    root logger writes third-party records to the diagnostic stream only, so
    nothing but protocol frames reaches stdout in protocol mode.

    Args:
        state: The LoggerState to install; becomes the process-wide state

    Returns:
        The configured application logger
    """
    if state is None:
        state = get_logger_state()
    configure_logging(state)

    app_logger = logging.getLogger(LOGGER_NAME)
    for handler in app_logger.handlers[:]:
        app_logger.removeHandler(handler)
    app_logger.addHandler(state.handler)
    app_logger.setLevel(logging.DEBUG)
    app_logger.propagate = False

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(state.min_level.logging_level)

    # Remove existing handlers to prevent duplication
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(state.diagnostic_stream)
    handler.setFormatter(logging.Formatter("%(levelname)s - %(name)s - %(message)s"))
    handler.addFilter(ThresholdFilter(state))
    root_logger.addHandler(handler)

    for logger_name in THIRD_PARTY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.NOTSET)

    return app_logger


def mask_sensitive(value: str | None, keep_chars: int = 4) -> str:
    """Masks sensitive strings for logging.

    Args:
        value: The string to mask
        keep_chars: Number of characters to keep visible at start and end

    Returns:
        Masked string with most characters replaced by asterisks
    """
    if not value:
        return "Not Provided"
    if len(value) <= keep_chars * 2:
        return "*" * len(value)
    return f"{value[:keep_chars]}{'*' * (len(value) - keep_chars * 2)}{value[-keep_chars:]}"


def log_config_param(
    logger: logging.Logger | DiagnosticLogger,
    service: str,
    param: str,
    value: str | None,
    sensitive: bool = False,
) -> None:
    """Logs a configuration parameter, masking if sensitive.

    Args:
        logger: The logger to use
        service: The service name (Atlassian or MCP)
        param: The parameter name
        value: The parameter value
        sensitive: Whether the value should be masked
    """
    display_value = mask_sensitive(value) if sensitive else (value or "Not Provided")
    logger.info(f"{service} {param}: {display_value}")
