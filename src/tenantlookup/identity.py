"""Caller identity from the hosting platform's authentication headers.

Container Apps / App Service authentication forwards the signed-in user as a
base64 JSON document in ``X-MS-CLIENT-PRINCIPAL``. This is only used to gate
access; it plays no part in tenant resolution.
"""

from __future__ import annotations

import base64
import binascii
import getpass
import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

PRINCIPAL_HEADER = "X-MS-CLIENT-PRINCIPAL"
LOCAL_OID = "00000000-0000-0000-0000-000000000000"
LOCAL_USER_FALLBACK = "local-user"


class IdentitySettings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("environment", "APP_ENV"),
    )
    local_user_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("local_user_name", "LOCAL_USER_NAME"),
    )
    local_user_upn: str | None = Field(
        default=None,
        validation_alias=AliasChoices("local_user_upn", "LOCAL_USER_UPN"),
    )

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


@dataclass(frozen=True)
class CallerIdentity:
    upn: str | None
    name: str | None
    oid: str | None
    mode: str

    def to_dict(self) -> dict[str, Any]:
        return {"upn": self.upn, "name": self.name, "oid": self.oid, "mode": self.mode}


def parse_client_principal(header_value: str | None) -> CallerIdentity | None:
    """Decode an ``X-MS-CLIENT-PRINCIPAL`` header.

    Returns:
        The caller, or ``None`` if the header is absent or malformed.
    """
    if not header_value:
        return None
    try:
        principal = json.loads(base64.b64decode(header_value, validate=False))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        logger.warning("Ignoring malformed %s header", PRINCIPAL_HEADER)
        return None
    if not isinstance(principal, dict):
        return None

    raw_claims = principal.get("claims") or []
    if not isinstance(raw_claims, list):
        logger.warning("Ignoring %s header without a claims list", PRINCIPAL_HEADER)
        return None

    # Later claims of the same type replace earlier ones.
    claims: dict[str, Any] = {}
    for claim in raw_claims:
        if isinstance(claim, dict) and isinstance(claim.get("typ"), str):
            claims[claim["typ"]] = claim.get("val")

    upn = claims.get("upn") or claims.get("preferred_username") or claims.get("emails")
    return CallerIdentity(
        upn=upn or None,
        name=claims.get("name") or None,
        oid=claims.get("oid") or None,
        mode=principal.get("auth_typ") or "aca",
    )


def _os_user() -> str:
    try:
        return getpass.getuser()
    except (OSError, KeyError):
        # No passwd entry and no USER/LOGNAME, e.g. in a bare container.
        return LOCAL_USER_FALLBACK


def local_dev_identity(settings: IdentitySettings | None = None) -> CallerIdentity:
    cfg = settings or IdentitySettings()
    name, upn = cfg.local_user_name, cfg.local_user_upn
    if not (name and upn):
        os_user = _os_user()
        name = name or os_user
        upn = upn or f"{os_user}@local.dev"
    return CallerIdentity(
        upn=upn,
        name=name,
        oid=LOCAL_OID,
        mode="local-dev",
    )


def caller_identity(
    header_value: str | None, settings: IdentitySettings | None = None
) -> CallerIdentity | None:
    """Identity from the platform header, or a local stand-in outside production.

    Only a missing header falls back to the local identity; a malformed one
    yields ``None``.
    """
    if header_value:
        return parse_client_principal(header_value)
    cfg = settings or IdentitySettings()
    if cfg.is_production:
        return None
    return local_dev_identity(cfg)
