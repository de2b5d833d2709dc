"""CRM synchronization of stored leads.

``MockCRMClient`` stands in for the HubSpot, Salesforce, and Dynamics
contact APIs: it simulates latency and occasional failures and returns
a made-up CRM id. ``CRMSyncService`` pushes a lead through a client and
records the outcome on the lead. ``run_background_sync`` is the
fire-and-forget entry point scheduled after a card has been stored.
"""

import random
import string
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from src.storage.lead_store import (
    LeadNotFoundError,
    LeadStore,
    PersistenceError,
    StoredLead,
)
from src.storage.models import SyncStatus, utcnow
from src.utils.logger import get_logger

from .providers import PROVIDERS, CRMProvider

logger = get_logger(__name__)


RATE_LIMIT_MESSAGE = "rate limit exceeded"

SIMULATED_ERRORS: tuple[str, ...] = (
    RATE_LIMIT_MESSAGE,
    "temporary service unavailable",
    "invalid authentication token",
    "duplicate contact detected",
)

MIN_FAILURE_RATE = 0.02
RETRY_FAILURE_DISCOUNT = 0.03


class CRMSyncError(RuntimeError):
    """Raised when a CRM rejects or fails a contact push.

    Args:
        message: Error reported by the CRM.
        retryable: Whether the same push may succeed later.
    """

    def __init__(self, message: str, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


def build_contact_payload(lead: StoredLead) -> dict[str, str | None]:
    """Map a lead onto the contact fields CRMs expect.

    The first word of the name becomes the first name and the remaining
    words the last name.
    """
    first_name = last_name = None
    if lead.name:
        parts = lead.name.split()
        first_name = parts[0] if parts else None
        last_name = " ".join(parts[1:])

    return {
        "email": lead.email,
        "firstName": first_name,
        "lastName": last_name,
        "company": lead.company,
        "jobTitle": lead.job_title,
        "phone": lead.phone,
        "website": lead.website,
    }


class MockCRMClient:
    """Simulated CRM contacts API.

    Args:
        failure_rate: Chance that a first attempt fails. Each retry lowers
            it by 0.03, down to 0.02 (or to ``failure_rate`` if lower).
        jitter_s: Maximum random latency added to the provider's base.
        simulate_latency: Sleep for the simulated latency.
        rng: Random source, injectable for reproducible runs.
        sleep: Sleep function, injectable for tests.
    """

    def __init__(
        self,
        failure_rate: float = 0.1,
        jitter_s: float = 0.5,
        simulate_latency: bool = True,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.failure_rate = failure_rate
        self.jitter_s = jitter_s
        self.simulate_latency = simulate_latency
        self._rng = rng or random.Random()
        self._sleep = sleep

    def failure_rate_for(self, retry_attempt: int) -> float:
        discounted = self.failure_rate - retry_attempt * RETRY_FAILURE_DISCOUNT
        return min(self.failure_rate, max(discounted, MIN_FAILURE_RATE))

    def push_contact(
        self,
        lead: StoredLead,
        provider: CRMProvider,
        retry_attempt: int = 0,
    ) -> str:
        """Create the lead as a contact in the CRM.

        Args:
            lead: Stored lead to push.
            provider: Target CRM.
            retry_attempt: How many times this push has been retried.

        Returns:
            The id the CRM assigned to the contact.

        Raises:
            CRMSyncError: On a simulated failure; rate limiting is retryable.
        """
        info = PROVIDERS[provider]

        if self.simulate_latency:
            self._sleep(info.base_latency_s + self._rng.random() * self.jitter_s)

        if self._rng.random() < self.failure_rate_for(retry_attempt):
            message = self._rng.choice(SIMULATED_ERRORS)
            raise CRMSyncError(message, retryable=message == RATE_LIMIT_MESSAGE)

        logger.info(
            "Mock %s API call to %s with payload %s",
            provider.value,
            info.api_url,
            build_contact_payload(lead),
        )
        token = "".join(
            self._rng.choice(string.ascii_lowercase + string.digits) for _ in range(6)
        )
        return f"{provider.value.upper()}_{int(time.time() * 1000)}_{token}"


@dataclass(frozen=True)
class SyncOutcome:
    """Result of one sync attempt for a lead."""

    lead_id: str
    provider: CRMProvider
    status: SyncStatus
    message: str
    crm_id: str | None = None
    synced_at: datetime | None = None
    retry_in: float | None = None

    @property
    def success(self) -> bool:
        return self.status == SyncStatus.SUCCESS


@dataclass(frozen=True)
class SyncStatusReport:
    """Current CRM sync state of a lead."""

    is_synced: bool
    crm_id: str | None
    crm_provider: str | None
    synced_at: datetime | None
    last_sync_status: str | None


class CRMSyncService:
    """Pushes stored leads to a CRM and records the result.

    Args:
        store: Lead store holding the leads and their sync state.
        client: CRM client used for the push.
        max_retries: Retry attempts allowed for retryable failures.
        retry_delay_s: Suggested wait before the next retry.
    """

    def __init__(
        self,
        store: LeadStore,
        client: MockCRMClient,
        max_retries: int = 3,
        retry_delay_s: float = 60.0,
    ) -> None:
        self.store = store
        self.client = client
        self.max_retries = max_retries
        self.retry_delay_s = retry_delay_s

    def sync_lead(
        self,
        lead_id: str,
        provider: CRMProvider = CRMProvider.HUBSPOT,
        retry_attempt: int = 0,
    ) -> SyncOutcome:
        """Push one lead to a CRM.

        Args:
            lead_id: Id of a stored lead.
            provider: Target CRM.
            retry_attempt: Number of earlier attempts for this lead.

        Returns:
            A ``success`` outcome, or a ``retry`` outcome with ``retry_in``
            when the CRM rate limited the push and retries remain.

        Raises:
            LeadNotFoundError: If the lead does not exist.
            CRMSyncError: If the push failed for good; the lead is marked
                ``failed``.
        """
        provider = CRMProvider(provider)
        lead = self.store.get_lead(lead_id)
        if lead is None:
            raise LeadNotFoundError(lead_id)

        info = PROVIDERS[provider]
        logger.info("Syncing lead %s to %s (attempt %d)", lead_id, info.name, retry_attempt)

        try:
            crm_id = self.client.push_contact(lead, provider, retry_attempt)
        except CRMSyncError as exc:
            if exc.retryable and retry_attempt < self.max_retries:
                self.store.update_sync_status(
                    lead_id, SyncStatus.RETRY, crm_provider=provider.value
                )
                logger.warning("Lead %s rate limited by %s, retry scheduled", lead_id, info.name)
                return SyncOutcome(
                    lead_id=lead_id,
                    provider=provider,
                    status=SyncStatus.RETRY,
                    message="Rate limited, retry scheduled",
                    retry_in=self.retry_delay_s,
                )
            self.store.update_sync_status(
                lead_id, SyncStatus.FAILED, crm_provider=provider.value
            )
            raise

        synced_at = utcnow()
        self.store.update_sync_status(
            lead_id,
            SyncStatus.SUCCESS,
            crm_id=crm_id,
            crm_provider=provider.value,
            synced_at=synced_at,
        )
        logger.info("Synced lead %s to %s with CRM id %s", lead_id, info.name, crm_id)
        return SyncOutcome(
            lead_id=lead_id,
            provider=provider,
            status=SyncStatus.SUCCESS,
            message=f"Lead successfully synced to {info.name}",
            crm_id=crm_id,
            synced_at=synced_at,
        )

    def get_status(self, lead_id: str) -> SyncStatusReport:
        """Return the stored sync state of a lead.

        Raises:
            LeadNotFoundError: If the lead does not exist.
        """
        lead = self.store.get_lead(lead_id)
        if lead is None:
            raise LeadNotFoundError(lead_id)
        return SyncStatusReport(
            is_synced=lead.crm_id is not None,
            crm_id=lead.crm_id,
            crm_provider=lead.crm_provider,
            synced_at=lead.crm_synced_at,
            last_sync_status=lead.last_crm_sync_status,
        )


def run_background_sync(
    service: CRMSyncService,
    lead_id: str,
    provider: CRMProvider = CRMProvider.HUBSPOT,
    sleep: Callable[[float], None] = time.sleep,
) -> SyncOutcome | None:
    """Sync a lead after the request that stored it has been answered.

    Rate-limited pushes are retried after the service's retry delay.
    Failures are logged and never raised: the caller already has its
    response.

    Returns:
        The final successful outcome, or ``None`` if the sync failed.
    """
    attempt = 0
    while True:
        try:
            outcome = service.sync_lead(lead_id, provider, attempt)
        except (CRMSyncError, LeadNotFoundError, PersistenceError) as exc:
            logger.error("CRM sync failed for lead %s: %s", lead_id, exc)
            return None

        if outcome.status != SyncStatus.RETRY:
            return outcome

        attempt += 1
        sleep(outcome.retry_in or 0.0)
