"""Process-wide service handles for the API server and CLI.

Each collaborator (OCR reader, lead store, CRM sync) is constructed
explicitly from configuration and passed to the code that uses it. The
card parser itself depends on none of them.
"""

from dataclasses import dataclass

from src.crm.sync import CRMSyncService, MockCRMClient
from src.extraction.card_parser import CardParser
from src.ocr.card_reader import CardReader
from src.storage.lead_store import LeadStore
from src.utils.config import AppConfig
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Services:
    """Collaborators shared by every request handled by this process."""

    config: AppConfig
    reader: CardReader
    parser: CardParser
    store: LeadStore
    crm: CRMSyncService

    def close(self) -> None:
        self.store.close()


def build_services(config: AppConfig) -> Services:
    """Construct all service handles from configuration.

    Args:
        config: Application configuration.

    Returns:
        Ready-to-use services; call ``close()`` on shutdown.
    """
    store = LeadStore(config.storage.database_url, echo=config.storage.echo)
    client = MockCRMClient(
        failure_rate=config.crm.failure_rate,
        jitter_s=config.crm.jitter_s,
        simulate_latency=config.crm.simulate_latency,
    )
    crm = CRMSyncService(
        store,
        client,
        max_retries=config.crm.max_retries,
        retry_delay_s=config.crm.retry_delay_s,
    )
    logger.info("Services initialized")
    return Services(
        config=config,
        reader=CardReader(config),
        parser=CardParser(),
        store=store,
        crm=crm,
    )
