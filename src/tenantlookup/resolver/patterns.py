"""Pure string functions used to classify and normalize identifiers.

None of these touch the network, so each can be tested in isolation.
"""

from __future__ import annotations

import re
from typing import Final

from .models import InputKind

GUID_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\Z",
    re.IGNORECASE,
)

AUTHORITY_HOSTS: Final[tuple[str, ...]] = (
    "login.windows.net",
    "login.microsoftonline.com",
)

_CHALLENGE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r'authorization_uri="https://(?:'
    + "|".join(re.escape(host) for host in AUTHORITY_HOSTS)
    + r")/([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})[/\"]",
    re.IGNORECASE,
)

_SCHEME = re.compile(r"^[a-z][a-z0-9+.-]*://")
_PORT = re.compile(r":[0-9]*\Z")
_WWW = re.compile(r"^(?:www\.)+")
_QUOTES = re.compile(r"[\"'`]")
_DOMAIN = re.compile(r"^[a-z0-9.-]+\.[a-z]{2,}\Z")


def is_guid(value: str) -> bool:
    return bool(GUID_PATTERN.match(value.strip()))


def normalize_domain(raw: str) -> str | None:
    """Reduce an e-mail address, URL or host name to a bare domain.

    Args:
        raw: Free text, e.g. ``"HTTPS://WWW.Example.com/path?x=1"`` or
            ``"user@Example.COM"``.

    Returns:
        The lowercase domain (``"example.com"``), or ``None`` when what is
        left does not look like a domain.
    """
    value = _QUOTES.sub("", raw.strip().lower()).strip()
    if "@" in value:
        value = value.rsplit("@", 1)[1]
    value = _SCHEME.sub("", value)
    value = re.split(r"[/?#]", value, maxsplit=1)[0]
    value = _PORT.sub("", value)
    value = _WWW.sub("", value)
    if not _DOMAIN.match(value):
        return None
    return value


def classify_input(raw: str) -> InputKind:
    value = raw.strip()
    if GUID_PATTERN.match(value):
        return InputKind.GUID
    if value and normalize_domain(value) is not None:
        return InputKind.DOMAIN
    return InputKind.INVALID


def tenant_id_from_challenge(header: str | None) -> str | None:
    """Pull the tenant GUID out of an ARM ``WWW-Authenticate`` challenge.

    The header looks like ``Bearer authorization_uri="https://login.windows.net/<tenant>",
    error="invalid_token", ...``. Only the known Entra authority hosts are
    accepted.
    """
    if not header:
        return None
    match = _CHALLENGE_PATTERN.search(header)
    if match is None:
        return None
    return match.group(1).lower()
