from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tenantlookup.azure.auth import scopes

from .arm import ARM_API_VERSION, ARM_BASE_URL
from .directory import GRAPH_BASE_URL


class ResolverSettings(BaseSettings):
    """Upstream endpoints and transport options for the resolver.

    Environment variables use the ``TENANT_LOOKUP_`` prefix, e.g.
    ``TENANT_LOOKUP_HTTP_TIMEOUT=10``.
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANT_LOOKUP_",
        case_sensitive=False,
        extra="ignore",
    )

    arm_base_url: str = ARM_BASE_URL
    arm_api_version: str = ARM_API_VERSION
    graph_base_url: str = GRAPH_BASE_URL
    graph_scope: str = scopes.GRAPH_DEFAULT_SCOPE
    # Handed to requests; None waits on the upstream indefinitely.
    http_timeout: float | None = None
    emit_events: bool = True

    @field_validator("arm_base_url", "graph_base_url")
    @classmethod
    def _absolute_url(cls, v: str) -> str:
        scopes.authority_from_url(v)
        return v.rstrip("/")

    @field_validator("http_timeout")
    @classmethod
    def _positive_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("http_timeout must be positive.")
        return v
