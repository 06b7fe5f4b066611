from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import AliasChoices, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Strategy(str, Enum):
    """Supported authentication strategies."""

    DEFAULT = "default"
    CLI = "cli"
    MANAGED_IDENTITY = "managed_identity"
    CLIENT_SECRET = "client_secret"
    CLIENT_CERTIFICATE = "client_certificate"


class AuthConfig(BaseSettings):
    """Configuration for the primary and fallback Azure credentials.

    This model reads environment variables automatically and performs
    cross-field validation for both the primary ``strategy`` and the
    ``fallback_strategy`` tried when the primary one cannot issue a token.

    Environment variables (aliases supported where noted):
        - AZURE_AUTH_STRATEGY
        - AZURE_AUTH_FALLBACK_STRATEGY
        - AZURE_TENANT_ID
        - AZURE_CLIENT_ID (alias: AZURE_MANAGED_IDENTITY_CLIENT_ID)
        - AZURE_CLIENT_SECRET
        - AZURE_CLIENT_CERTIFICATE_PATH
        - AZURE_CLIENT_CERTIFICATE_PASSWORD
        - AZURE_AUTHORITY_HOST
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
    )

    # With validation_alias set, the field name is only accepted as input when
    # it is listed in the alias choices too.

    strategy: Strategy = Field(
        default=Strategy.MANAGED_IDENTITY,
        validation_alias=AliasChoices("strategy", "AZURE_AUTH_STRATEGY"),
    )
    fallback_strategy: Strategy = Field(
        default=Strategy.DEFAULT,
        validation_alias=AliasChoices(
            "fallback_strategy", "AZURE_AUTH_FALLBACK_STRATEGY"
        ),
    )
    tenant_id: str | None = Field(
        default=None, validation_alias=AliasChoices("tenant_id", "AZURE_TENANT_ID")
    )
    client_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "client_id", "AZURE_CLIENT_ID", "AZURE_MANAGED_IDENTITY_CLIENT_ID"
        ),
    )
    client_secret: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("client_secret", "AZURE_CLIENT_SECRET"),
    )
    certificate_path: Path | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "certificate_path", "AZURE_CLIENT_CERTIFICATE_PATH"
        ),
    )
    certificate_password: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "certificate_password", "AZURE_CLIENT_CERTIFICATE_PASSWORD"
        ),
    )
    authority: str | None = Field(
        default=None,
        validation_alias=AliasChoices("authority", "AZURE_AUTHORITY_HOST"),
    )

    @field_validator("certificate_path")
    @classmethod
    def _ensure_existing_path(cls, v: Path | None) -> Path | None:
        """Ensure configured paths exist if provided."""
        if v is not None and not v.exists():
            raise ValueError(f"Path does not exist: {v}")
        return v

    @model_validator(mode="after")
    def _cross_field_validation(self) -> "AuthConfig":
        """Validate required fields for the selected strategies."""
        if self.strategy is self.fallback_strategy:
            raise ValueError("fallback_strategy must differ from strategy.")

        for s in (self.strategy, self.fallback_strategy):
            if s is Strategy.CLIENT_SECRET:
                if not (self.tenant_id and self.client_id and self.client_secret):
                    raise ValueError(
                        "client_secret requires tenant_id, client_id, and client_secret."
                    )
            elif s is Strategy.CLIENT_CERTIFICATE:
                if not (self.tenant_id and self.client_id and self.certificate_path):
                    raise ValueError(
                        "client_certificate requires tenant_id, client_id, and certificate_path."
                    )
        # DEFAULT, CLI, MANAGED_IDENTITY validated at runtime.
        return self
