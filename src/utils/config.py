"""Configuration management for the business card lead capture service.

Loads and validates YAML configuration with sensible defaults for image
preprocessing, OCR, lead storage, CRM sync, and the HTTP API.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from src.crm.providers import CRMProvider

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("configs/config.yaml")


class PreprocessingConfig(BaseModel):
    """Configuration for the card image preprocessing steps."""

    enabled: bool = True
    min_width: int = 1000
    deskew_enabled: bool = True
    denoise_enabled: bool = True
    denoise_method: str = "bilateral"
    contrast_enabled: bool = True
    clahe_clip_limit: float = 2.0
    clahe_tile_size: int = 8
    binarize_enabled: bool = True
    binarize_method: str = "adaptive"


class OCRConfig(BaseModel):
    """Configuration for the Tesseract OCR engine."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 3
    source_label: str = "Tesseract OCR"


class StorageConfig(BaseModel):
    """Configuration for the lead database."""

    database_url: str = "sqlite:///./leads.db"
    echo: bool = False


class CRMConfig(BaseModel):
    """Configuration for the (mock) CRM synchronization."""

    enabled: bool = True
    default_provider: CRMProvider = CRMProvider.HUBSPOT
    failure_rate: float = 0.1
    simulate_latency: bool = True
    jitter_s: float = 0.5
    max_retries: int = 3
    retry_delay_s: float = 60.0


class APIConfig(BaseModel):
    """Configuration for the HTTP server."""

    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    crm: CRMConfig = Field(default_factory=CRMConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    log_level: str = "INFO"
    log_file: str | None = None


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    ``DATABASE_URL`` in the environment takes precedence over the
    ``storage.database_url`` value from the file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        config = AppConfig(**raw)
    else:
        logger.info("No config file found at %s, using defaults", path)
        config = AppConfig()

    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        config.storage.database_url = database_url
    return config
