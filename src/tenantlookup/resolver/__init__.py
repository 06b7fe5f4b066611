"""Tenant resolution.

Public API:
- TenantResolver → resolve(raw), resolve_subscription(raw)
- ResolutionOutcome, TenantInfo, ResolutionFailure, FailureKind, Mode, InputKind
- classify_input(), normalize_domain(), tenant_id_from_challenge() (pure helpers)
- ResolverSettings (settings)
"""

from .core import TenantResolver
from .directory import DirectoryClient, DirectoryRecord, default_domain
from .events import EventSink, LoggingEventSink, LookupEvent
from .models import (
    FailureKind,
    InputKind,
    Mode,
    ResolutionFailure,
    ResolutionOutcome,
    TenantInfo,
)
from .patterns import classify_input, is_guid, normalize_domain, tenant_id_from_challenge
from .settings import ResolverSettings

__all__ = [
    "TenantResolver",
    "DirectoryClient",
    "DirectoryRecord",
    "default_domain",
    "EventSink",
    "LoggingEventSink",
    "LookupEvent",
    "FailureKind",
    "InputKind",
    "Mode",
    "ResolutionFailure",
    "ResolutionOutcome",
    "TenantInfo",
    "classify_input",
    "is_guid",
    "normalize_domain",
    "tenant_id_from_challenge",
    "ResolverSettings",
]
