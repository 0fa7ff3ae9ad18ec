import asyncio
import sys

import click
from dotenv import load_dotenv

from kb_mcp_atlassian.config import (
    DEFAULT_SERVER_NAME,
    DEFAULT_SERVER_VERSION,
    resolve_config,
)
from kb_mcp_atlassian.exceptions import MissingCredentialsError, ServerStartupError
from kb_mcp_atlassian.utils.logging import LoggerState, get_logger, setup_logging

__version__ = "2.1.1"

logger = get_logger("cli")


@click.command(name="kb-mcp-atlassian-server")
@click.version_option(__version__, prog_name="kb-mcp-atlassian-server")
@click.option(
    "--env-file", type=click.Path(exists=True, dir_okay=False), help="Path to .env file"
)
@click.option(
    "--atlassian-site-name",
    metavar="<site>",
    help="Atlassian site name (e.g., your-domain.atlassian.net)",
)
@click.option(
    "--atlassian-user-email", metavar="<email>", help="Atlassian user email"
)
@click.option("--atlassian-api-token", metavar="<token>", help="Atlassian API token")
@click.option(
    "--mcp-server-name",
    metavar="<name>",
    help=f"MCP server name (default: {DEFAULT_SERVER_NAME})",
)
@click.option(
    "--mcp-server-version",
    metavar="<version>",
    help=f"MCP server version (default: {DEFAULT_SERVER_VERSION})",
)
def main(
    env_file: str | None,
    atlassian_site_name: str | None,
    atlassian_user_email: str | None,
    atlassian_api_token: str | None,
    mcp_server_name: str | None,
    mcp_server_version: str | None,
) -> None:
    """MCP Server for interacting with Atlassian Jira and Confluence

    Every option falls back to its environment variable (ATLASSIAN_SITE_NAME,
    ATLASSIAN_USER_EMAIL, ATLASSIAN_API_TOKEN, MCP_SERVER_NAME,
    MCP_SERVER_VERSION). LOG_LEVEL selects error, warn, info or debug output.
    """
    # Environment variables are a fallback: a default .env never overrides
    # what is already exported, an explicit --env-file does.
    if env_file:
        load_dotenv(env_file, override=True)
    else:
        load_dotenv()

    setup_logging(LoggerState.from_env())
    if env_file:
        logger.debug(f"Loaded environment from file: {env_file}")

    try:
        config = resolve_config(
            {
                "atlassian_site_name": atlassian_site_name,
                "atlassian_user_email": atlassian_user_email,
                "atlassian_api_token": atlassian_api_token,
                "mcp_server_name": mcp_server_name,
                "mcp_server_version": mcp_server_version,
            }
        )
    except MissingCredentialsError as e:
        logger.debug(f"Unresolved credentials: {', '.join(e.missing)}")
        click.echo(e.usage_message(), err=True)
        sys.exit(1)

    from kb_mcp_atlassian.servers import start_server

    try:
        asyncio.run(start_server(config))
    except ServerStartupError as e:
        click.echo(f"Failed to start server: {e}", err=True)
        sys.exit(1)


__all__ = ["main", "__version__"]

if __name__ == "__main__":
    main()
