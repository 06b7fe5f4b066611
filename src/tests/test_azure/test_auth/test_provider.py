from __future__ import annotations

import logging
from typing import Any

import pytest

from tenantlookup.azure.auth import GRAPH_DEFAULT_SCOPE
from tenantlookup.azure.auth.config import AuthConfig, Strategy
from tenantlookup.azure.auth.provider import AuthUnavailable, CredentialProvider


def test_primary_success__fallback_never_built(fake_credential) -> None:
    primary = fake_credential(token="mi-token")
    built: list[str] = []

    def _fallback():
        built.append("default")
        return fake_credential(token="dac-token")

    provider = CredentialProvider([("managed_identity", lambda: primary), ("default", _fallback)])
    cred = provider.acquire_token(GRAPH_DEFAULT_SCOPE)

    assert cred.token == "mi-token"
    assert cred.mechanism == "managed_identity"
    assert cred.scope == GRAPH_DEFAULT_SCOPE
    assert primary.scopes == [GRAPH_DEFAULT_SCOPE]
    assert primary.closed
    assert built == []


def test_primary_failure__falls_back_once(fake_credential) -> None:
    primary = fake_credential(error=RuntimeError("no IMDS endpoint"))
    secondary = fake_credential(token="dac-token")
    provider = CredentialProvider(
        [("managed_identity", lambda: primary), ("default", lambda: secondary)]
    )

    cred = provider.acquire_token(GRAPH_DEFAULT_SCOPE)

    assert cred.token == "dac-token"
    assert cred.mechanism == "default"
    assert primary.scopes == [GRAPH_DEFAULT_SCOPE]  # single attempt
    assert cred.authorization_header == {"Authorization": "Bearer dac-token"}


def test_construction_failure__counts_as_mechanism_failure(fake_credential) -> None:
    def _broken():
        raise ValueError("bad configuration")

    provider = CredentialProvider(
        [("cli", _broken), ("default", lambda: fake_credential(token="t"))]
    )
    assert provider.acquire_token("scope/.default").mechanism == "default"


def test_both_fail__auth_unavailable_combines_messages(fake_credential) -> None:
    provider = CredentialProvider(
        [
            ("managed_identity", lambda: fake_credential(error=RuntimeError("mi down"))),
            ("default", lambda: fake_credential(error=RuntimeError("no az login"))),
        ]
    )

    with pytest.raises(AuthUnavailable) as excinfo:
        provider.acquire_token(GRAPH_DEFAULT_SCOPE)

    err = excinfo.value
    assert err.failures == {"managed_identity": "mi down", "default": "no az login"}
    assert "mi down" in str(err) and "no az login" in str(err)


def test_failures_not_cached_across_calls(fake_credential) -> None:
    """A mechanism that failed once is tried again on the next call."""
    outcomes: list[Any] = [RuntimeError("transient"), None]
    attempts: list[int] = []

    def _flaky():
        attempts.append(1)
        error = outcomes.pop(0)
        return fake_credential(token="mi-token", error=error)

    provider = CredentialProvider(
        [("managed_identity", _flaky), ("default", lambda: fake_credential(token="d"))]
    )

    assert provider.acquire_token("s").mechanism == "default"
    assert provider.acquire_token("s").mechanism == "managed_identity"
    assert len(attempts) == 2


def test_token_never_logged(fake_credential, caplog: pytest.LogCaptureFixture) -> None:
    provider = CredentialProvider([("managed_identity", lambda: fake_credential(token="s3cr3t-token"))])
    with caplog.at_level(logging.DEBUG):
        cred = provider.acquire_token("s")

    assert "s3cr3t-token" not in caplog.text
    assert "s3cr3t-token" not in repr(cred)
    assert "[managed_identity] token OK" in caplog.text


def test_empty_mechanisms__rejected() -> None:
    with pytest.raises(ValueError):
        CredentialProvider([])


def test_from_config__builds_primary_then_fallback(stub_azure: dict[str, Any]) -> None:
    provider = CredentialProvider.from_config(
        AuthConfig(strategy=Strategy.CLI, fallback_strategy=Strategy.DEFAULT)
    )
    assert provider.mechanism_names == ["cli", "default"]
    # Credentials are built lazily, per call.
    assert stub_azure["AzureCliCredential"].call_count == 0
