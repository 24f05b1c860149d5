"""Pydantic settings models for document text extraction.

Two settings classes load from separate YAML config files with environment
variable override support. Source priority (highest to lowest):

    1. Constructor arguments
    2. Environment variables (with prefix, e.g., EXTRACTION_MAX_CHARS)
    3. .env file
    4. YAML config file (e.g., config/extraction.yaml)
    5. Default values defined here

Config paths are resolved relative to PROJECT_ROOT so the library behaves the
same regardless of the host application's working directory.
"""

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

# Resolve project root: settings.py -> config/ -> doctext/ -> src/ -> repo root
PROJECT_ROOT = Path(__file__).resolve().parents[3]

_CONFIG_DIR = PROJECT_ROOT / "config"
_ENV_FILE = PROJECT_ROOT / ".env"

# Upper bound for the OCR worker pool; Tesseract is memory-heavy
MAX_OCR_WORKERS = 3


class ExtractionSettings(BaseSettings):
    """Extraction ceilings, OCR engine options and output budget."""

    # Output budget
    max_chars: int = 10_000

    # PDF text pass
    pdf_max_pages: int = 10
    min_total_chars: int = 100

    # PDF OCR pass
    ocr_max_pages: int = 5
    ocr_scale: float = 2.0
    ocr_language: str = "eng"
    tesseract_cmd: str = "tesseract"
    ocr_page_timeout_seconds: float = 60.0
    ocr_workers: int = 1

    # Presentations
    pptx_max_slides: int = 20

    model_config = SettingsConfigDict(
        yaml_file=str(_CONFIG_DIR / "extraction.yaml"),
        env_file=str(_ENV_FILE),
        env_prefix="EXTRACTION_",
        extra="ignore",
    )

    @field_validator("ocr_workers")
    @classmethod
    def _clamp_workers(cls, value: int) -> int:
        return max(1, min(value, MAX_OCR_WORKERS))

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


class LoggingSettings(BaseSettings):
    """Log file location, rotation and handler levels."""

    log_dir: str = "logs"
    log_max_bytes: int = 10_485_760  # 10MB
    log_backup_count: int = 5
    log_level_file: str = "DEBUG"
    log_level_console: str = "INFO"

    model_config = SettingsConfigDict(
        yaml_file=str(_CONFIG_DIR / "logging.yaml"),
        env_prefix="LOGGING_",
        extra="ignore",
    )

    @field_validator("log_level_file", "log_level_console")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )
