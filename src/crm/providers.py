"""CRM platforms that leads can be pushed to."""

from dataclasses import dataclass
from enum import StrEnum


class CRMProvider(StrEnum):
    """Supported CRM platforms."""

    HUBSPOT = "hubspot"
    SALESFORCE = "salesforce"
    DYNAMICS = "dynamics"


@dataclass(frozen=True)
class ProviderInfo:
    """Static details about a CRM platform's contacts API."""

    name: str
    api_url: str
    rate_limit: int
    rate_window: str
    base_latency_s: float


PROVIDERS: dict[CRMProvider, ProviderInfo] = {
    CRMProvider.HUBSPOT: ProviderInfo(
        name="HubSpot",
        api_url="https://api.hubapi.com/crm/v3/objects/contacts",
        rate_limit=100,
        rate_window="10 seconds",
        base_latency_s=0.8,
    ),
    CRMProvider.SALESFORCE: ProviderInfo(
        name="Salesforce",
        api_url="https://your-instance.salesforce.com/services/data/v55.0/sobjects/Contact",
        rate_limit=1000,
        rate_window="day",
        base_latency_s=1.2,
    ),
    CRMProvider.DYNAMICS: ProviderInfo(
        name="Microsoft Dynamics",
        api_url="https://your-org.api.crm.dynamics.com/api/data/v9.2/contacts",
        rate_limit=6000,
        rate_window="5 minutes",
        base_latency_s=1.0,
    ),
}
