"""FastMCP server setup for the Atlassian knowledge base."""

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from atlassian import Confluence, Jira
from fastmcp import FastMCP

from kb_mcp_atlassian.config import ServerConfig
from kb_mcp_atlassian.exceptions import ServerStartupError
from kb_mcp_atlassian.utils.logging import get_logger

from .context import MainAppContext

logger = get_logger("server")


def build_app_context(config: ServerConfig) -> MainAppContext:
    """Create the Jira and Confluence clients for the configured site."""
    if not config.is_cloud:
        logger.warn(
            f"Site '{config.site_url}' does not look like an Atlassian Cloud site; "
            "using basic authentication with the API token anyway."
        )
    jira = Jira(
        url=config.jira_url,
        username=config.user_email,
        password=config.api_token,
        cloud=config.is_cloud,
    )
    confluence = Confluence(
        url=config.confluence_url,
        username=config.user_email,
        password=config.api_token,
        cloud=config.is_cloud,
    )
    logger.debug(f"Jira client ready for {config.jira_url}")
    logger.debug(f"Confluence client ready for {config.confluence_url}")
    return MainAppContext(config=config, jira=jira, confluence=confluence)


def make_lifespan(
    config: ServerConfig,
) -> Callable[[FastMCP], AbstractAsyncContextManager[dict]]:
    @asynccontextmanager
    async def main_lifespan(app: FastMCP[MainAppContext]) -> AsyncIterator[dict]:
        logger.info(f"{config.server_name} lifespan starting...")
        app_context = build_app_context(config)
        yield {"app_lifespan_context": app_context}
        logger.info(f"{config.server_name} lifespan shutting down.")

    return main_lifespan


def create_server(config: ServerConfig) -> FastMCP[MainAppContext]:
    """Build the FastMCP server named and versioned after the config."""
    return FastMCP(
        name=config.server_name,
        version=config.server_version,
        lifespan=make_lifespan(config),
    )


async def start_server(config: ServerConfig) -> None:
    """Run the MCP server over stdio until the client disconnects.

    Args:
        config: The validated server configuration

    Raises:
        ServerStartupError: If the server cannot be built or stops with an error
    """
    logger.info(f"Starting {config.server_name} v{config.server_version}")
    config.log_summary(logger)
    try:
        server = create_server(config)
        logger.info("Starting server with STDIO transport.")
        await server.run_async(transport="stdio")
    except ServerStartupError:
        raise
    except Exception as e:
        raise ServerStartupError(str(e) or type(e).__name__) from e
