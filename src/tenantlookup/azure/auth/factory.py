from __future__ import annotations

from azure.core.credentials import TokenCredential
from azure.identity import (
    AzureCliCredential,
    CertificateCredential,
    ClientSecretCredential,
    DefaultAzureCredential,
    ManagedIdentityCredential,
)

from .config import AuthConfig, Strategy


def get_credential(
    config: AuthConfig | None = None, strategy: Strategy | None = None
) -> TokenCredential:
    """Construct a :class:`TokenCredential` based on :class:`AuthConfig`.

    Args:
        config: Auth configuration. If ``None``, settings are read from the
            environment.
        strategy: Strategy to build. Defaults to the config's primary
            strategy; pass ``config.fallback_strategy`` for the secondary one.

    Returns:
        A concrete :class:`TokenCredential`.
    """
    cfg = config or AuthConfig()
    authority = cfg.authority  # may be None

    match strategy or cfg.strategy:
        case Strategy.CLI:
            # The CLI credential uses whatever authority `az login` used.
            return AzureCliCredential()
        case Strategy.MANAGED_IDENTITY:
            return ManagedIdentityCredential(client_id=cfg.client_id)
        case Strategy.CLIENT_SECRET:
            return ClientSecretCredential(
                tenant_id=cfg.tenant_id,
                client_id=cfg.client_id,
                client_secret=cfg.client_secret.get_secret_value(),
                authority=authority,
            )
        case Strategy.CLIENT_CERTIFICATE:
            return CertificateCredential(
                tenant_id=cfg.tenant_id,
                client_id=cfg.client_id,
                certificate_path=str(cfg.certificate_path),
                password=(
                    cfg.certificate_password.get_secret_value()
                    if cfg.certificate_password
                    else None
                ),
                authority=authority,
            )
        case _:
            return DefaultAzureCredential(authority=authority)
