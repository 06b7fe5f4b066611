from __future__ import annotations

import uuid

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tenantlookup.resolver.models import InputKind
from tenantlookup.resolver.patterns import (
    classify_input,
    is_guid,
    normalize_domain,
    tenant_id_from_challenge,
)

TENANT = "72f988bf-86f1-41af-91ab-2d7cd011db47"

guids = st.uuids().map(str)
domains = st.from_regex(
    r"(?:[a-z0-9](?:[a-z0-9-]{0,20}[a-z0-9])?\.){1,3}[a-z]{2,6}", fullmatch=True
).filter(lambda d: not d.startswith("www."))


@given(guids, st.booleans())
def test_guids__always_classified_as_guid(value: str, upper: bool) -> None:
    value = value.upper() if upper else value
    assert classify_input(f"  {value} ") is InputKind.GUID
    assert is_guid(value)


@given(st.text(min_size=1))
def test_non_guid__falls_through_to_domain_normalization(value: str) -> None:
    if is_guid(value):
        return
    expected = InputKind.DOMAIN if normalize_domain(value) else InputKind.INVALID
    assert classify_input(value) is expected


@given(st.text())
def test_normalize_domain__idempotent(value: str) -> None:
    once = normalize_domain(value)
    if once is not None:
        assert normalize_domain(once) == once


@given(domains)
def test_normalize_domain__bare_domains_unchanged(domain: str) -> None:
    assert normalize_domain(domain) == domain


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("HTTPS://WWW.Example.com/path?x=1", "example.com"),
        ("user@Example.COM", "example.com"),
        ("first.last@sub.contoso.co.uk", "sub.contoso.co.uk"),
        ("a@b@fabrikam.net", "fabrikam.net"),
        ("  contoso.onmicrosoft.com  ", "contoso.onmicrosoft.com"),
        ("http://contoso.com:8443/", "contoso.com"),
        ("contoso.com#frag", "contoso.com"),
        ("www.www.contoso.com", "contoso.com"),
        ('"contoso.com"', "contoso.com"),
        ("'www.contoso.com'", "contoso.com"),
    ],
)
def test_normalize_domain__examples(raw: str, expected: str) -> None:
    assert normalize_domain(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["not a domain", "", "localhost", "contoso.c0m", "contoso.c", TENANT, "https://"],
)
def test_normalize_domain__rejects(raw: str) -> None:
    assert normalize_domain(raw) is None


def test_classify__examples() -> None:
    assert classify_input(TENANT) is InputKind.GUID
    assert classify_input("user@contoso.com") is InputKind.DOMAIN
    assert classify_input("not a domain") is InputKind.INVALID
    assert classify_input("   ") is InputKind.INVALID
    # 8-4-4-4-12 only; a bare 32-hex string is not a GUID here.
    assert classify_input(uuid.UUID(TENANT).hex) is InputKind.INVALID


@pytest.mark.parametrize("host", ["login.windows.net", "login.microsoftonline.com"])
def test_tenant_id_from_challenge__known_hosts(host: str) -> None:
    header = (
        f'Bearer authorization_uri="https://{host}/{TENANT}", '
        'error="invalid_token", error_description="The authentication failed."'
    )
    assert tenant_id_from_challenge(header) == TENANT


def test_tenant_id_from_challenge__lowercases() -> None:
    header = f'Bearer authorization_uri="https://login.windows.net/{TENANT.upper()}"'
    assert tenant_id_from_challenge(header) == TENANT


@pytest.mark.parametrize(
    "header",
    [
        None,
        "",
        'Bearer realm="x"',
        f'Bearer authorization_uri="https://login.evil.example/{TENANT}"',
        'Bearer authorization_uri="https://login.windows.net/common"',
        f'Bearer authorization_uri="https://login.windows.net/{TENANT}x"',
    ],
)
def test_tenant_id_from_challenge__rejects(header: str | None) -> None:
    assert tenant_id_from_challenge(header) is None
