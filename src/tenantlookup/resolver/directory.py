from __future__ import annotations

import logging
import urllib.parse

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tenantlookup.azure.auth import scopes
from tenantlookup.azure.auth.provider import CredentialProvider

from .models import Mode, StepResult, TenantInfo

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.microsoft.com"

# Upstream bodies are kept for diagnostics only; cap what we carry around.
_MAX_DETAIL_CHARS = 2000


class DirectoryPayloadError(ValueError):
    """A successful directory response whose body is not a tenant record."""


class VerifiedDomain(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    is_default: bool = Field(default=False, alias="isDefault")
    is_initial: bool = Field(default=False, alias="isInitial")


class DirectoryRecord(BaseModel):
    """Tenant information as returned by ``findTenantInformationBy*``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    tenant_id: str | None = Field(default=None, alias="tenantId")
    display_name: str | None = Field(default=None, alias="displayName")
    default_domain_name: str | None = Field(default=None, alias="defaultDomainName")
    verified_domains: list[VerifiedDomain] = Field(
        default_factory=list, alias="verifiedDomains"
    )


def default_domain(record: DirectoryRecord) -> str | None:
    """Pick the tenant's default domain.

    Precedence: ``defaultDomainName``, then the verified domain flagged
    ``isDefault``, then the one flagged ``isInitial``.
    """
    if record.default_domain_name:
        return record.default_domain_name
    for flag in ("is_default", "is_initial"):
        for domain in record.verified_domains:
            if getattr(domain, flag) and domain.name:
                return domain.name
    return None


def tenant_info_from_record(
    record: DirectoryRecord,
    mode: Mode,
    tenant_id: str,
    subscription_id: str | None = None,
) -> TenantInfo:
    return TenantInfo(
        tenant_id=record.tenant_id or tenant_id,
        mode=mode,
        display_name=record.display_name or None,
        default_domain=default_domain(record),
        subscription_id=subscription_id,
    )


class DirectoryClient:
    """Graph ``tenantRelationships`` lookups by tenant ID or domain name."""

    def __init__(
        self,
        credentials: CredentialProvider,
        *,
        session: requests.Session | None = None,
        base_url: str = GRAPH_BASE_URL,
        scope: str = scopes.GRAPH_DEFAULT_SCOPE,
        timeout: float | None = None,
    ) -> None:
        self._credentials = credentials
        self._session = session or requests.Session()
        self._base_url = base_url.rstrip("/")
        self._scope = scope
        self._timeout = timeout

    def find_by_tenant_id(self, tenant_id: str) -> StepResult[DirectoryRecord]:
        quoted = urllib.parse.quote(tenant_id, safe="")
        return self._find(
            f"findTenantInformationByTenantId(tenantId='{quoted}')"
        )

    def find_by_domain_name(self, domain: str) -> StepResult[DirectoryRecord]:
        quoted = urllib.parse.quote(domain, safe="")
        return self._find(
            f"findTenantInformationByDomainName(domainName='{quoted}')"
        )

    def _find(self, function: str) -> StepResult[DirectoryRecord]:
        """Call one lookup function.

        Raises:
            AuthUnavailable: No credential could be obtained.
            requests.RequestException: Transport failure.
            DirectoryPayloadError: 2xx response that is not a tenant record.
        """
        credential = self._credentials.acquire_token(self._scope)
        url = f"{self._base_url}/v1.0/tenantRelationships/{function}"
        response = self._session.get(
            url,
            headers={**credential.authorization_header, "Accept": "application/json"},
            timeout=self._timeout,
        )

        if not response.ok:
            logger.warning("Directory lookup returned HTTP %s", response.status_code)
            return StepResult.failed(
                "directory_error",
                status_code=response.status_code,
                detail=response.text[:_MAX_DETAIL_CHARS],
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise DirectoryPayloadError("Directory response is not JSON.") from exc
        if not isinstance(payload, dict):
            raise DirectoryPayloadError("Directory response is not a JSON object.")
        try:
            return StepResult.success(DirectoryRecord.model_validate(payload))
        except ValidationError as exc:
            raise DirectoryPayloadError(
                f"Directory response has an unexpected shape: {exc.error_count()} errors"
            ) from exc
