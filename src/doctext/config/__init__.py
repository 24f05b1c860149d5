"""Configuration package -- typed, validated settings from YAML + .env."""

from .settings import ExtractionSettings, LoggingSettings

__all__ = [
    "ExtractionSettings",
    "LoggingSettings",
    "load_all_settings",
]


def load_all_settings() -> tuple[ExtractionSettings, LoggingSettings]:
    """Load and return all configuration objects.

    Returns a tuple of (ExtractionSettings, LoggingSettings), each populated
    from its own YAML file with environment variable overrides.
    """
    return ExtractionSettings(), LoggingSettings()
