"""Configuration for the KB MCP Atlassian server.

Values are taken from command-line options first and fall back to
environment variables; the two optional server fields finally fall back to
fixed defaults.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .exceptions import REQUIRED_CREDENTIALS, MissingCredentialsError
from .utils.logging import DiagnosticLogger, log_config_param
from .utils.urls import build_site_url, is_atlassian_cloud_url

DEFAULT_SERVER_NAME = "kb-mcp-atlassian-server"
DEFAULT_SERVER_VERSION = "1.0.0"

# (ServerConfig field, CLI option key, environment variable)
_FIELD_SOURCES: tuple[tuple[str, str, str], ...] = (
    ("site_name", "atlassian_site_name", "ATLASSIAN_SITE_NAME"),
    ("user_email", "atlassian_user_email", "ATLASSIAN_USER_EMAIL"),
    ("api_token", "atlassian_api_token", "ATLASSIAN_API_TOKEN"),
    ("server_name", "mcp_server_name", "MCP_SERVER_NAME"),
    ("server_version", "mcp_server_version", "MCP_SERVER_VERSION"),
)

_DEFAULTS = {
    "server_name": DEFAULT_SERVER_NAME,
    "server_version": DEFAULT_SERVER_VERSION,
}


@dataclass(frozen=True)
class ServerConfig:
    """Validated server configuration.

    Construction fails with MissingCredentialsError unless all three
    credentials are non-empty; instances are never modified afterwards.
    """

    site_name: str  # e.g. your-domain.atlassian.net
    user_email: str
    api_token: str = field(repr=False)
    server_name: str = DEFAULT_SERVER_NAME
    server_version: str = DEFAULT_SERVER_VERSION

    def __post_init__(self) -> None:
        missing = [
            field_name
            for field_name, _, _, _ in REQUIRED_CREDENTIALS
            if not getattr(self, field_name)
        ]
        if missing:
            raise MissingCredentialsError(missing)

    @property
    def site_url(self) -> str:
        return build_site_url(self.site_name)

    @property
    def jira_url(self) -> str:
        return self.site_url

    @property
    def confluence_url(self) -> str:
        return f"{self.site_url}/wiki"

    @property
    def is_cloud(self) -> bool:
        """Whether the site is hosted on Atlassian Cloud."""
        return is_atlassian_cloud_url(self.site_url)

    def log_summary(self, logger: logging.Logger | DiagnosticLogger) -> None:
        """Log the effective configuration, masking the API token."""
        log_config_param(logger, "Atlassian", "Site", self.site_url)
        log_config_param(logger, "Atlassian", "User Email", self.user_email)
        log_config_param(
            logger, "Atlassian", "API Token", self.api_token, sensitive=True
        )
        log_config_param(logger, "MCP", "Server Name", self.server_name)
        log_config_param(logger, "MCP", "Server Version", self.server_version)


def _first_non_empty(*values: str | None) -> str | None:
    for value in values:
        if value:
            return value
    return None


def resolve_config(
    cli_args: Mapping[str, str | None],
    env: Mapping[str, str] | None = None,
) -> ServerConfig:
    """Merge command-line options with environment variables.

    Args:
        cli_args: Parsed options keyed by option name (``atlassian_site_name``,
            ``atlassian_user_email``, ``atlassian_api_token``, ``mcp_server_name``,
            ``mcp_server_version``). Missing keys and None values count as unset.
        env: Environment mapping, ``os.environ`` when omitted

    Returns:
        The fully populated ServerConfig

    Raises:
        MissingCredentialsError: If a required credential is empty or unset in
            both sources
    """
    if env is None:
        env = os.environ

    values: dict[str, str | None] = {}
    for field_name, option_key, env_var in _FIELD_SOURCES:
        values[field_name] = _first_non_empty(
            cli_args.get(option_key), env.get(env_var), _DEFAULTS.get(field_name)
        )

    missing = [
        field_name
        for field_name, _, _, _ in REQUIRED_CREDENTIALS
        if not values[field_name]
    ]
    if missing:
        raise MissingCredentialsError(missing)

    return ServerConfig(**values)
