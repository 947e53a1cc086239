"""Configuration management for the intake pipeline.

Loads and validates YAML configuration with defaults for OCR, image
conversion, text extraction, and translation settings.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class OCRConfig(BaseModel):
    """Configuration for the Tesseract OCR engine."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 3


class ConversionConfig(BaseModel):
    """Configuration for image to searchable-PDF conversion."""

    page_format: str = "a4"
    margin: float = 20.0
    font_size: float = 12.0
    line_height_factor: float = 1.2


class ExtractionConfig(BaseModel):
    """Configuration for text extraction and field recovery."""

    y_threshold: float = 5.0
    max_sentences: int = 2
    summary_char_limit: int = 150
    min_language_markers: int = 2


class TranslationConfig(BaseModel):
    """Configuration for the excuse-summary translation service."""

    enabled: bool = True
    base_url: str = "https://api.mymemory.translated.net/get"
    source_lang: str = "tl"
    target_lang: str = "en"
    timeout_seconds: float = 10.0


class AppConfig(BaseModel):
    """Top-level application configuration."""

    ocr: OCRConfig = Field(default_factory=OCRConfig)
    conversion: ConversionConfig = Field(default_factory=ConversionConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    translation: TranslationConfig = Field(default_factory=TranslationConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
