"""Authentication helpers for the directory lookups.

Public API:
- CredentialProvider → acquire_token(scope) with primary/fallback mechanisms
- Credential (issued bearer token), AuthUnavailable (both mechanisms failed)
- get_credential() → TokenCredential
- AuthConfig (settings), Strategy (enum of auth strategies)
- GRAPH_DEFAULT_SCOPE (constant for Microsoft Graph)
- authority_from_url(), default_scope_for() (scope helpers)
"""

from .config import AuthConfig, Strategy
from .factory import get_credential
from .provider import AuthUnavailable, Credential, CredentialProvider
from .scopes import (
    GRAPH_DEFAULT_SCOPE,
    authority_from_url,
    default_scope_for,
)

__all__ = [
    "AuthConfig",
    "AuthUnavailable",
    "Credential",
    "CredentialProvider",
    "Strategy",
    "get_credential",
    "GRAPH_DEFAULT_SCOPE",
    "authority_from_url",
    "default_scope_for",
]
