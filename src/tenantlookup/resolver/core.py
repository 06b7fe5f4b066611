from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, TypeVar

import requests

from tenantlookup.azure.auth import AuthConfig
from tenantlookup.azure.auth.provider import AuthUnavailable, CredentialProvider

from .arm import SubscriptionProbe
from .directory import DirectoryClient, DirectoryPayloadError, tenant_info_from_record
from .events import EventSink, LoggingEventSink, LookupEvent, emit_quietly
from .models import FailureKind, InputKind, Mode, ResolutionOutcome, StepResult
from .patterns import classify_input, is_guid, normalize_domain
from .settings import ResolverSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")

EMPTY_MESSAGE = "Enter a subscription ID, tenant ID, or domain."
INVALID_MESSAGE = "That doesn't look like a subscription ID, tenant ID, or domain."
UNRESOLVED_GUID_MESSAGE = "That ID doesn't match a subscription or tenant we can see."
INVALID_SUBSCRIPTION_MESSAGE = "Invalid subscriptionId format."
PROBE_FAILED_MESSAGE = "Could not determine the tenant for that subscription."
DIRECTORY_FAILED_MESSAGE = "The tenant directory lookup failed."
AUTH_MESSAGE = "Directory credentials are unavailable."


@dataclass
class _Trace:
    """Where a single resolution call got to. Never shared between calls."""

    input_kind: InputKind = InputKind.INVALID
    mode: Mode | None = None
    stage: str = "validate"


class TenantResolver:
    """Resolve a subscription ID, tenant ID or domain to tenant identity.

    A GUID is tried as a subscription first (ARM probe, then a directory
    lookup of the owning tenant) and then as a tenant ID. Anything else is
    normalized to a domain and looked up by domain name. Each upstream call
    is made at most once per call and nothing is cached.
    """

    def __init__(
        self,
        directory: DirectoryClient,
        probe: SubscriptionProbe,
        *,
        events: EventSink | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._directory = directory
        self._probe = probe
        self._events = events
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: ResolverSettings | None = None,
        *,
        auth: AuthConfig | None = None,
        credentials: CredentialProvider | None = None,
        session: requests.Session | None = None,
        events: EventSink | None = None,
    ) -> "TenantResolver":
        """Wire the default collaborators from settings.

        Args:
            settings: Endpoints and transport options; read from the
                environment when omitted.
            auth: Credential configuration, used when ``credentials`` is not
                given.
            credentials: Ready-made credential provider.
            session: Shared HTTP session for both upstreams.
            events: Event sink. Defaults to a :class:`LoggingEventSink` when
                ``settings.emit_events`` is set.
        """
        cfg = settings or ResolverSettings()
        http = session or requests.Session()
        provider = credentials or CredentialProvider.from_config(auth)
        directory = DirectoryClient(
            provider,
            session=http,
            base_url=cfg.graph_base_url,
            scope=cfg.graph_scope,
            timeout=cfg.http_timeout,
        )
        probe = SubscriptionProbe(
            session=http,
            base_url=cfg.arm_base_url,
            api_version=cfg.arm_api_version,
            timeout=cfg.http_timeout,
        )
        if events is None and cfg.emit_events:
            events = LoggingEventSink()
        return cls(directory, probe, events=events)

    def resolve(self, raw: str) -> ResolutionOutcome:
        """Resolve free text to a tenant.

        Args:
            raw: Subscription GUID, tenant GUID, domain, e-mail address or URL.

        Returns:
            A successful outcome carrying :class:`TenantInfo`, or a classified
            failure.
        """
        return self._run(self._resolve, raw)

    def resolve_subscription(self, raw: str) -> ResolutionOutcome:
        """Resolve a subscription ID only, without the tenant or domain fallbacks.

        A probe that does not yield a tenant is reported as
        ``UpstreamUnavailable``.
        """
        return self._run(self._resolve_subscription_only, raw)

    def _run(
        self, resolve: Callable[[str, _Trace], ResolutionOutcome], raw: str
    ) -> ResolutionOutcome:
        started = self._clock()
        trace = _Trace()
        try:
            outcome = resolve(raw or "", trace)
        except AuthUnavailable as exc:
            logger.error("Credential acquisition failed at stage %s: %s", trace.stage, exc)
            outcome = ResolutionOutcome.fail(
                FailureKind.AUTH_UNAVAILABLE, AUTH_MESSAGE, trace.stage, trace.mode
            )
        self._emit(trace, outcome, started)
        return outcome

    def _resolve(self, raw: str, trace: _Trace) -> ResolutionOutcome:
        value = raw.strip()
        if not value:
            return ResolutionOutcome.fail(
                FailureKind.EMPTY_INPUT, EMPTY_MESSAGE, trace.stage
            )

        trace.input_kind = classify_input(value)
        if trace.input_kind is InputKind.GUID:
            outcome = self._via_subscription(value, trace)
            if outcome is None:
                outcome = self._via_tenant_id(value, trace)
            if outcome is not None:
                return outcome
            logger.info("GUID matched neither a subscription nor a tenant")

        return self._via_domain(value, trace)

    def _resolve_subscription_only(self, raw: str, trace: _Trace) -> ResolutionOutcome:
        value = raw.strip()
        if not value:
            return ResolutionOutcome.fail(
                FailureKind.EMPTY_INPUT, EMPTY_MESSAGE, trace.stage
            )
        if not is_guid(value):
            trace.input_kind = classify_input(value)
            return ResolutionOutcome.fail(
                FailureKind.INVALID_INPUT,
                INVALID_SUBSCRIPTION_MESSAGE,
                trace.stage,
                Mode.SUBSCRIPTION_ID,
            )

        trace.input_kind = InputKind.GUID
        outcome = self._via_subscription(value, trace)
        if outcome is None:
            return ResolutionOutcome.fail(
                FailureKind.UPSTREAM_UNAVAILABLE,
                PROBE_FAILED_MESSAGE,
                trace.stage,
                Mode.SUBSCRIPTION_ID,
            )
        return outcome

    def _via_subscription(
        self, subscription_id: str, trace: _Trace
    ) -> ResolutionOutcome | None:
        """Probe ARM, then look up the owning tenant.

        Returns ``None`` when the probe does not yield a tenant, so the
        caller can move on to the next strategy.
        """
        trace.mode = Mode.SUBSCRIPTION_ID
        trace.stage = "subscription_probe"
        probe = self._step(trace, self._probe.probe, subscription_id)
        if not probe.ok:
            return None

        tenant_id = probe.value
        trace.stage = "directory_by_tenant_id"
        lookup = self._step(trace, self._directory.find_by_tenant_id, tenant_id)
        if not lookup.ok:
            # The subscription's tenant is known; the directory refused it.
            return ResolutionOutcome.fail(
                FailureKind.DIRECTORY_LOOKUP_FAILED,
                DIRECTORY_FAILED_MESSAGE,
                trace.stage,
                trace.mode,
            )
        return ResolutionOutcome.success(
            tenant_info_from_record(
                lookup.value,
                Mode.SUBSCRIPTION_ID,
                tenant_id,
                subscription_id=subscription_id,
            )
        )

    def _via_tenant_id(self, tenant_id: str, trace: _Trace) -> ResolutionOutcome | None:
        trace.mode = Mode.TENANT_ID
        trace.stage = "directory_by_tenant_id"
        lookup = self._step(trace, self._directory.find_by_tenant_id, tenant_id)
        if not lookup.ok:
            return None
        return ResolutionOutcome.success(
            tenant_info_from_record(lookup.value, Mode.TENANT_ID, tenant_id)
        )

    def _via_domain(self, value: str, trace: _Trace) -> ResolutionOutcome:
        trace.stage = "normalize"
        domain = normalize_domain(value)
        if domain is None:
            message = (
                UNRESOLVED_GUID_MESSAGE
                if trace.input_kind is InputKind.GUID
                else INVALID_MESSAGE
            )
            return ResolutionOutcome.fail(
                FailureKind.INVALID_INPUT, message, trace.stage, trace.mode
            )

        trace.mode = Mode.DOMAIN
        trace.stage = "directory_by_domain"
        lookup = self._step(trace, self._directory.find_by_domain_name, domain)
        if lookup.ok and not lookup.value.tenant_id:
            logger.warning("%s: directory record has no tenantId", trace.stage)
        elif lookup.ok:
            record = lookup.value
            return ResolutionOutcome.success(
                tenant_info_from_record(record, Mode.DOMAIN, record.tenant_id)
            )
        return ResolutionOutcome.fail(
            FailureKind.DIRECTORY_LOOKUP_FAILED,
            DIRECTORY_FAILED_MESSAGE,
            trace.stage,
            trace.mode,
        )

    def _step(
        self, trace: _Trace, call: Callable[[str], StepResult[T]], arg: str
    ) -> StepResult[T]:
        """Run one upstream call, turning transport and payload errors into a failed step.

        The error text is kept as the step's ``detail`` for callers.

        Only the stage, reason and status code are logged; the identifier and
        upstream bodies can carry customer data.
        """
        try:
            result = call(arg)
        except requests.RequestException as exc:
            logger.warning("%s: transport error (%s)", trace.stage, type(exc).__name__)
            return StepResult.failed("transport_error", detail=str(exc))
        except DirectoryPayloadError as exc:
            logger.warning("%s: malformed directory payload", trace.stage)
            return StepResult.failed("payload_error", detail=str(exc))

        if not result.ok:
            logger.info(
                "%s: step failed (reason=%s, status=%s)",
                trace.stage,
                result.reason,
                result.status_code,
            )
        return result

    def _emit(
        self, trace: _Trace, outcome: ResolutionOutcome, started: float
    ) -> None:
        if self._events is None:
            return
        if outcome.ok:
            mode, result, stage = outcome.info.mode, "success", None
        else:
            mode = outcome.failure.mode
            result, stage = outcome.failure.kind.value, outcome.failure.stage
        event = LookupEvent(
            timestamp=datetime.now(timezone.utc),
            input_kind=trace.input_kind.value,
            mode=mode.value if mode else None,
            outcome=result,
            stage=stage,
            duration_ms=int((self._clock() - started) * 1000),
        )
        emit_quietly(self._events, event)
