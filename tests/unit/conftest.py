"""Shared fixtures for KB MCP Atlassian unit tests."""

import io
import logging

import pytest

from kb_mcp_atlassian.utils.logging import (
    LOGGER_NAME,
    ExecutionMode,
    LoggerState,
    LogLevel,
    ThresholdFilter,
    configure_logging,
)


class TTYStringIO(io.StringIO):
    """In-memory stream that claims to be a terminal."""

    def isatty(self):
        return True


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo any process-wide logging changes made by a test."""
    root_logger = logging.getLogger()
    app_logger = logging.getLogger(LOGGER_NAME)
    root_level = root_logger.level
    app_handlers = app_logger.handlers[:]
    app_level = app_logger.level
    app_propagate = app_logger.propagate
    configure_logging(None)
    yield
    configure_logging(None)
    # Only drop the handlers setup_logging() installed; pytest manages its own.
    for handler in root_logger.handlers[:]:
        if any(isinstance(f, ThresholdFilter) for f in handler.filters):
            root_logger.removeHandler(handler)
    root_logger.setLevel(root_level)
    app_logger.handlers[:] = app_handlers
    app_logger.setLevel(app_level)
    app_logger.propagate = app_propagate


@pytest.fixture
def streams():
    """Return (primary, diagnostic) in-memory streams."""
    return io.StringIO(), io.StringIO()


@pytest.fixture
def interactive_state(streams):
    primary, diagnostic = streams
    return LoggerState(
        execution_mode=ExecutionMode.INTERACTIVE,
        min_level=LogLevel.INFO,
        primary_stream=primary,
        diagnostic_stream=diagnostic,
    )


@pytest.fixture
def protocol_state(streams):
    primary, diagnostic = streams
    return LoggerState(
        execution_mode=ExecutionMode.PROTOCOL_ENDPOINT,
        min_level=LogLevel.DEBUG,
        primary_stream=primary,
        diagnostic_stream=diagnostic,
    )


@pytest.fixture
def credentials_env():
    return {
        "ATLASSIAN_SITE_NAME": "test.atlassian.net",
        "ATLASSIAN_USER_EMAIL": "test@example.com",
        "ATLASSIAN_API_TOKEN": "test_api_token_value",
    }


@pytest.fixture
def tty_stream():
    return TTYStringIO()
