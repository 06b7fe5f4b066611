from __future__ import annotations

import os
from typing import Any, Iterator

import pytest

import tenantlookup.azure.auth.factory as factory


@pytest.fixture(autouse=True)
def clear_azure_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove AZURE_* vars to prevent cross-test leakage.

    Yields:
        Iterator[None]: Context manager semantics for pytest.
    """
    to_clear = [k for k in os.environ.keys() if k.upper().startswith("AZURE_")]
    for k in to_clear:
        monkeypatch.delenv(k, raising=False)
    yield


class _Recorder:
    """Factory to create recorder classes that capture init kwargs."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.cls = self._make(name)

    @staticmethod
    def _make(name: str):
        class _C:
            last_args: tuple[Any, ...] | None = None
            last_kwargs: dict[str, Any] | None = None
            call_count: int = 0

            def __init__(self, *args: Any, **kwargs: Any) -> None:
                type(self).last_args = args
                type(self).last_kwargs = dict(kwargs)
                type(self).call_count += 1

        _C.__name__ = name
        _C.__qualname__ = name
        return _C


@pytest.fixture()
def stub_azure(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    """Swap the factory's azure.identity classes for recorders.

    Returns:
        dict[str, Any]: Exposes recorder classes for assertion (e.g., call kwargs).
    """
    names = [
        "DefaultAzureCredential",
        "AzureCliCredential",
        "ManagedIdentityCredential",
        "ClientSecretCredential",
        "CertificateCredential",
    ]
    recorders = {n: _Recorder(n) for n in names}
    for n, rec in recorders.items():
        monkeypatch.setattr(factory, n, rec.cls)
    return {n: rec.cls for n, rec in recorders.items()}


class FakeAccessToken:
    def __init__(self, token: str, expires_on: int = 1_900_000_000) -> None:
        self.token = token
        self.expires_on = expires_on


class FakeCredential:
    """Credential double returning a fixed token or raising a fixed error."""

    def __init__(self, token: str | None = None, error: Exception | None = None):
        self._token = token
        self._error = error
        self.scopes: list[str] = []
        self.closed = False

    def get_token(self, *scopes: str, **kwargs: Any) -> FakeAccessToken:
        self.scopes.extend(scopes)
        if self._error is not None:
            raise self._error
        return FakeAccessToken(self._token)

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def fake_credential() -> type[FakeCredential]:
    return FakeCredential
