from typing import Final
from urllib.parse import urlparse

GRAPH_DEFAULT_SCOPE: Final[str] = "https://graph.microsoft.com/.default"


def authority_from_url(resource_url: str) -> str:
    """Return the URL authority (scheme + host).

    Args:
        resource_url: Absolute resource URL (e.g., "https://graph.microsoft.com/v1.0").

    Returns:
        The "<scheme>://<host>" portion of the URL.

    Raises:
        ValueError: If ``resource_url`` is not absolute or lacks a host.
    """
    parsed = urlparse(resource_url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError("resource_url must be an absolute URL")
    return f"{parsed.scheme}://{parsed.netloc}"


def default_scope_for(resource_url: str) -> str:
    return f"{authority_from_url(resource_url)}/.default"
