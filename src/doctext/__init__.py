"""Bounded plain-text extraction from uploaded documents."""

from doctext.extractor import (
    DetectedFormat,
    Document,
    ExtractionEngine,
    ExtractionMethod,
    ExtractionResult,
    extract_document,
    get_document_type,
    is_supported_document,
)

__version__ = "1.0.0"

__all__ = [
    "DetectedFormat",
    "Document",
    "ExtractionEngine",
    "ExtractionMethod",
    "ExtractionResult",
    "extract_document",
    "get_document_type",
    "is_supported_document",
]
