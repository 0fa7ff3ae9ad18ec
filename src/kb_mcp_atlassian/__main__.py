"""Entry point for ``python -m kb_mcp_atlassian``."""

from kb_mcp_atlassian import main

main()
