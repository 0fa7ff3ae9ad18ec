"""
Utility functions for the KB MCP Atlassian server.
"""

from .logging import (
    DiagnosticLogger,
    ExecutionMode,
    LoggerState,
    LogLevel,
    get_logger,
    set_log_level,
    setup_logging,
)
from .urls import build_site_url, is_atlassian_cloud_url

__all__ = [
    "DiagnosticLogger",
    "ExecutionMode",
    "LogLevel",
    "LoggerState",
    "build_site_url",
    "get_logger",
    "is_atlassian_cloud_url",
    "set_log_level",
    "setup_logging",
]
