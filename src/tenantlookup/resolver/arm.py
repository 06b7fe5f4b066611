from __future__ import annotations

import logging
import urllib.parse

import requests

from .models import StepResult
from .patterns import tenant_id_from_challenge

logger = logging.getLogger(__name__)

ARM_BASE_URL = "https://management.azure.com"
ARM_API_VERSION = "2022-12-01"


class SubscriptionProbe:
    """Learn a subscription's tenant from ARM's unauthenticated challenge.

    ARM answers an anonymous ``GET /subscriptions/{id}`` with HTTP 401 and a
    ``WWW-Authenticate`` header whose ``authorization_uri`` ends in the
    owning tenant's GUID. Nothing else about the subscription is revealed.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        base_url: str = ARM_BASE_URL,
        api_version: str = ARM_API_VERSION,
        timeout: float | None = None,
    ) -> None:
        self._session = session or requests.Session()
        self._base_url = base_url.rstrip("/")
        self._api_version = api_version
        self._timeout = timeout

    def probe(self, subscription_id: str) -> StepResult[str]:
        """Return the tenant GUID that owns ``subscription_id``.

        Raises:
            requests.RequestException: Transport failure.
        """
        quoted = urllib.parse.quote(subscription_id, safe="")
        response = self._session.get(
            f"{self._base_url}/subscriptions/{quoted}",
            params={"api-version": self._api_version},
            timeout=self._timeout,
        )

        if response.status_code != 401:
            logger.info("Subscription probe got HTTP %s, expected 401", response.status_code)
            return StepResult.failed(
                "unexpected_status", status_code=response.status_code
            )

        header = response.headers.get("WWW-Authenticate")
        if not header:
            return StepResult.failed("missing_challenge", status_code=401)

        tenant_id = tenant_id_from_challenge(header)
        if tenant_id is None:
            return StepResult.failed(
                "unparseable_challenge", status_code=401, detail=header
            )
        return StepResult.success(tenant_id)
