"""Shared test fixtures for the lead capture test suite."""

import random
from collections.abc import Iterator
from pathlib import Path

import numpy as np
import pytest

from src.crm.sync import CRMSyncService, MockCRMClient
from src.storage.lead_store import LeadStore

SAMPLE_CARD_TEXT = (
    "John Smith\n"
    "Senior Engineer\n"
    "Acme Technologies Inc.\n"
    "john.smith@acme.com\n"
    "(555) 123-4567\n"
    "www.acme.com"
)


@pytest.fixture
def sample_card_text() -> str:
    """Return OCR text of a typical business card."""
    return SAMPLE_CARD_TEXT


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a simple synthetic RGB card-like image."""
    image = np.full((200, 350, 3), 255, dtype=np.uint8)
    image[60:80, 40:300] = (0, 0, 0)
    image[110:125, 40:220] = (0, 0, 0)
    return image


@pytest.fixture
def lead_store() -> Iterator[LeadStore]:
    """Create a lead store backed by in-memory SQLite."""
    store = LeadStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def reliable_crm_client() -> MockCRMClient:
    """Create a mock CRM client that never fails or sleeps."""
    return MockCRMClient(
        failure_rate=0.0,
        simulate_latency=False,
        rng=random.Random(7),
    )


@pytest.fixture
def crm_service(lead_store: LeadStore, reliable_crm_client: MockCRMClient) -> CRMSyncService:
    """Create a CRM sync service over the in-memory store."""
    return CRMSyncService(lead_store, reliable_crm_client, retry_delay_s=0.0)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
