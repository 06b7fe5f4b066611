from __future__ import annotations

from typing import Any, Callable

import pytest

from tenantlookup.resolver.arm import SubscriptionProbe
from tenantlookup.resolver.core import TenantResolver
from tenantlookup.resolver.directory import DirectoryClient

from fakes import FakeProvider, FakeSession, RecordingSink


@pytest.fixture()
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def make_resolver(
    session: FakeSession, provider: FakeProvider, sink: RecordingSink
) -> Callable[..., TenantResolver]:
    def _make(**kwargs: Any) -> TenantResolver:
        directory = DirectoryClient(provider, session=session)  # type: ignore[arg-type]
        probe = SubscriptionProbe(session=session)  # type: ignore[arg-type]
        return TenantResolver(directory, probe, events=kwargs.pop("events", sink), **kwargs)

    return _make
