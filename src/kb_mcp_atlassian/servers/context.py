from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from atlassian import Confluence, Jira

    from kb_mcp_atlassian.config import ServerConfig


@dataclass(frozen=True)
class MainAppContext:
    """
    Context built once at server startup from the validated ServerConfig.
    Holds the Jira and Confluence clients shared by every request.
    """

    config: ServerConfig
    jira: Jira
    confluence: Confluence
