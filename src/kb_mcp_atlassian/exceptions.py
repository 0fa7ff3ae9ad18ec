"""Exceptions raised while bootstrapping the KB MCP Atlassian server."""

REQUIRED_CREDENTIALS: tuple[tuple[str, str, str, str], ...] = (
    # (field, flag, env var, description)
    (
        "site_name",
        "--atlassian-site-name <site>",
        "ATLASSIAN_SITE_NAME",
        "Atlassian site name",
    ),
    (
        "user_email",
        "--atlassian-user-email <email>",
        "ATLASSIAN_USER_EMAIL",
        "Atlassian user email",
    ),
    (
        "api_token",
        "--atlassian-api-token <token>",
        "ATLASSIAN_API_TOKEN",
        "Atlassian API token",
    ),
)


class KBMCPAtlassianError(Exception):
    """Base class for all errors raised by this package."""


class MissingCredentialsError(KBMCPAtlassianError):
    """Raised when required Atlassian credentials are absent after merging
    command-line options and environment variables.

    Attributes:
        missing: Names of the ServerConfig fields that could not be resolved.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"Missing required Atlassian credentials: {', '.join(self.missing)}"
        )

    def usage_lines(self) -> list[str]:
        """Build the operator-facing diagnostic.

        Every required parameter is listed with both its flag and its
        environment variable, whichever of them are actually missing.
        """
        flag_width = max(len(flag) for _, flag, _, _ in REQUIRED_CREDENTIALS) + 3
        lines = [
            "Error: Missing required Atlassian credentials",
            "",
            "Required parameters:",
        ]
        lines.extend(
            f"  {flag.ljust(flag_width)}{description}"
            for _, flag, _, description in REQUIRED_CREDENTIALS
        )
        lines.append("")
        lines.append("These can also be provided via environment variables:")
        lines.extend(f"  {env_var}" for _, _, env_var, _ in REQUIRED_CREDENTIALS)
        return lines

    def usage_message(self) -> str:
        return "\n".join(self.usage_lines())


class ServerStartupError(KBMCPAtlassianError):
    """Raised when the MCP server fails to start or stops with an error."""
