"""URL helpers for turning an Atlassian site name into service URLs."""

import re
from urllib.parse import urlparse


def build_site_url(site_name: str) -> str:
    """Normalize a site name into a base URL.

    Args:
        site_name: Either a bare host (``your-domain.atlassian.net``) or a
            full URL (``https://your-domain.atlassian.net/``)

    Returns:
        The site URL with an ``https://`` scheme and no trailing slash
    """
    site = site_name.strip()
    if "://" not in site:
        site = f"https://{site}"
    return site.rstrip("/")


def is_atlassian_cloud_url(url: str | None) -> bool:
    """Determine if a URL belongs to Atlassian Cloud or Server/Data Center.

    Args:
        url: The URL to check

    Returns:
        True if the URL is for an Atlassian Cloud instance, False for Server/Data Center
    """
    if not url:
        return False

    hostname = urlparse(url).hostname or ""

    # Localhost and private network addresses are always Server/Data Center
    if hostname == "localhost" or re.match(
        r"^(127\.|10\.|192\.168\.|172\.(1[6-9]|2[0-9]|3[0-1])\.)", hostname
    ):
        return False

    return hostname.endswith((".atlassian.net", ".jira.com", ".jira-dev.com"))
