"""Logging configuration for host applications embedding the extractor."""

from .setup import LOG_FILE_NAME, configure_logging, setup_logging

__all__ = ["LOG_FILE_NAME", "configure_logging", "setup_logging"]
