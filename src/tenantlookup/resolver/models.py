from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class InputKind(str, Enum):
    """Classification of a raw identifier."""

    GUID = "guid"
    DOMAIN = "domain"
    INVALID = "invalid"


class Mode(str, Enum):
    """Which strategy produced a result."""

    SUBSCRIPTION_ID = "subscriptionId"
    TENANT_ID = "tenantId"
    DOMAIN = "domain"


class FailureKind(str, Enum):
    """Classified failures surfaced to the caller."""

    EMPTY_INPUT = "EmptyInput"
    INVALID_INPUT = "InvalidInput"
    UPSTREAM_UNAVAILABLE = "UpstreamUnavailable"
    DIRECTORY_LOOKUP_FAILED = "DirectoryLookupFailed"
    AUTH_UNAVAILABLE = "AuthUnavailable"

    @property
    def status_code(self) -> int:
        """HTTP status a request layer should answer with."""
        if self in (FailureKind.EMPTY_INPUT, FailureKind.INVALID_INPUT):
            return 400
        return 502


@dataclass(frozen=True)
class TenantInfo:
    """Normalized tenant identity."""

    tenant_id: str
    mode: Mode
    display_name: str | None = None
    default_domain: str | None = None
    subscription_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"mode": self.mode.value, "tenantId": self.tenant_id}
        if self.subscription_id is not None:
            out["subscriptionId"] = self.subscription_id
        out["displayName"] = self.display_name
        out["defaultDomain"] = self.default_domain
        return out


@dataclass(frozen=True)
class ResolutionFailure:
    """A classified failure.

    ``message`` is safe to show to the end user. ``stage`` and ``mode`` say
    where resolution stopped, for logging or display.
    """

    kind: FailureKind
    message: str
    stage: str
    mode: Mode | None = None

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "kind": self.kind.value, "stage": self.stage}


@dataclass(frozen=True)
class ResolutionOutcome:
    """Either a :class:`TenantInfo` or a :class:`ResolutionFailure`, never both."""

    info: TenantInfo | None = None
    failure: ResolutionFailure | None = None

    def __post_init__(self) -> None:
        if (self.info is None) == (self.failure is None):
            raise ValueError("Exactly one of info or failure must be set.")

    @classmethod
    def success(cls, info: TenantInfo) -> "ResolutionOutcome":
        return cls(info=info)

    @classmethod
    def fail(
        cls,
        kind: FailureKind,
        message: str,
        stage: str,
        mode: Mode | None = None,
    ) -> "ResolutionOutcome":
        return cls(failure=ResolutionFailure(kind, message, stage, mode))

    @property
    def ok(self) -> bool:
        return self.info is not None

    @property
    def status_code(self) -> int:
        return 200 if self.info is not None else self.failure.status_code

    def to_dict(self) -> dict[str, Any]:
        if self.info is not None:
            return self.info.to_dict()
        return self.failure.to_dict()


@dataclass(frozen=True)
class StepResult(Generic[T]):
    """Outcome of one strategy step.

    A failed step is an expected branch, not an error: ``reason`` names what
    went wrong and ``status_code`` is the upstream HTTP status.

    ``detail`` is caller-facing diagnostics: the upstream response body, the
    challenge header or the transport error text. It may echo the identifier
    or other customer data, so it is never logged or put into events.
    """

    value: T | None = None
    reason: str | None = None
    status_code: int | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def success(cls, value: T) -> "StepResult[T]":
        return cls(value=value)

    @classmethod
    def failed(
        cls, reason: str, status_code: int | None = None, detail: str | None = None
    ) -> "StepResult[T]":
        return cls(reason=reason, status_code=status_code, detail=detail)
