from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Sequence

from .config import AuthConfig
from .factory import get_credential

if TYPE_CHECKING:
    from azure.core.credentials import TokenCredential

logger = logging.getLogger(__name__)

CredentialFactory = Callable[[], "TokenCredential"]


class AuthUnavailable(Exception):
    """Raised when none of the configured mechanisms could issue a token.

    Attributes:
        failures: Mechanism name mapped to the message of its failure, in the
            order the mechanisms were attempted.
    """

    def __init__(self, failures: dict[str, str]) -> None:
        self.failures = dict(failures)
        detail = "; ".join(f"{name}: {msg}" for name, msg in self.failures.items())
        super().__init__(f"No Azure credential available. {detail}".strip())


@dataclass(frozen=True)
class Credential:
    """A bearer token and the scope it was issued for."""

    token: str = field(repr=False)
    scope: str
    expires_on: int
    mechanism: str

    @property
    def authorization_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


class CredentialProvider:
    """Obtain bearer tokens, trying each mechanism once in order.

    Nothing is cached: every call to :meth:`acquire_token` builds fresh
    credentials, so a mechanism that failed on one call is tried again on
    the next.
    """

    def __init__(self, mechanisms: Sequence[tuple[str, CredentialFactory]]) -> None:
        if not mechanisms:
            raise ValueError("At least one credential mechanism is required.")
        self._mechanisms = list(mechanisms)

    @classmethod
    def from_config(cls, config: AuthConfig | None = None) -> "CredentialProvider":
        """Build the primary/fallback pair described by ``config``."""
        cfg = config or AuthConfig()
        return cls(
            [
                (cfg.strategy.value, lambda: get_credential(cfg, cfg.strategy)),
                (
                    cfg.fallback_strategy.value,
                    lambda: get_credential(cfg, cfg.fallback_strategy),
                ),
            ]
        )

    @property
    def mechanism_names(self) -> list[str]:
        return [name for name, _ in self._mechanisms]

    def acquire_token(self, scope: str) -> Credential:
        """Return a token for ``scope`` from the first mechanism that works.

        Args:
            scope: OAuth scope, e.g. ``https://graph.microsoft.com/.default``.

        Returns:
            The issued :class:`Credential`.

        Raises:
            AuthUnavailable: If every mechanism failed.
        """
        failures: dict[str, str] = {}
        for name, factory in self._mechanisms:
            try:
                access_token = self._attempt(factory, scope)
            except Exception as exc:  # any failure moves on to the next mechanism
                logger.warning("[%s] token request failed: %s", name, exc)
                failures[name] = str(exc) or type(exc).__name__
                continue

            logger.info("[%s] token OK", name)
            return Credential(
                token=access_token.token,
                scope=scope,
                expires_on=access_token.expires_on,
                mechanism=name,
            )

        logger.error("No credential mechanism succeeded (%s)", ", ".join(failures))
        raise AuthUnavailable(failures)

    @staticmethod
    def _attempt(factory: CredentialFactory, scope: str):
        credential = factory()
        try:
            return credential.get_token(scope)
        finally:
            close = getattr(credential, "close", None)
            if callable(close):
                close()
