"""Shared types for the extraction pipeline.

Defines the input Document, the DetectedFormat and ExtractionMethod enums, the
PDF-only PageAssessment/OCRJob work records, and the ExtractionResult returned
by the orchestrator.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path, PurePath
from typing import Any

# A PDF page whose embedded text is longer than this is trusted as digital
TRUSTED_PAGE_MIN_CHARS = 50


class DetectedFormat(Enum):
    """Document format chosen by the classifier."""

    PDF = "PDF"
    TXT = "TXT"
    DOC = "DOC"
    DOCX = "DOCX"
    PPT = "PPT"
    PPTX = "PPTX"
    XLS = "XLS"
    XLSX = "XLSX"
    UNSUPPORTED = "UNSUPPORTED"


class ExtractionMethod(Enum):
    """How the text of an ExtractionResult was obtained."""

    EMBEDDED = "embedded"
    OCR_MIXED = "ocr-mixed"
    METADATA_ONLY = "metadata-only"
    UNSUPPORTED = "unsupported"
    FAILED = "failed"


@dataclass(frozen=True)
class Document:
    """An uploaded file handed to the extractor.

    Attributes:
        content: Raw file bytes.
        name: Declared file name, used for extension sniffing.
        mime_type: Declared content type, used as a secondary signal.
        last_modified: Optional modification time shown in metadata notices.
    """

    content: bytes
    name: str
    mime_type: str | None = None
    last_modified: datetime | None = None

    @classmethod
    def from_path(cls, path: Path, mime_type: str | None = None) -> Document:
        """Read a file from disk into a Document.

        The MIME type is guessed from the file name when not given, and the
        file's mtime becomes ``last_modified``.
        """
        path = Path(path)
        if mime_type is None:
            mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            content=path.read_bytes(),
            name=path.name,
            mime_type=mime_type,
            last_modified=datetime.fromtimestamp(path.stat().st_mtime),
        )

    @property
    def extension(self) -> str:
        return PurePath(self.name.lower()).suffix

    @property
    def size_kb(self) -> str:
        return f"{len(self.content) / 1024:.2f}"


@dataclass(frozen=True)
class PageAssessment:
    """Scan-detector verdict for a single PDF page."""

    page_number: int
    embedded_char_count: int
    trusted: bool

    @classmethod
    def assess(cls, page_number: int, text: str) -> PageAssessment:
        """Build an assessment from a page's trimmed embedded text."""
        count = len(text)
        return cls(
            page_number=page_number,
            embedded_char_count=count,
            trusted=count > TRUSTED_PAGE_MIN_CHARS,
        )


@dataclass
class OCRJob:
    """One rasterized page waiting for, or holding, its OCR text."""

    page_number: int
    raster_image: Any
    result_text: str | None = None


@dataclass
class ExtractionResult:
    """Outcome of a single extraction call.

    Attributes:
        text: Normalized text, or a human-readable advisory.
        method: How the text was obtained.
        truncated: Whether the text was cut to the character budget.
        source_page_count: Total pages (PDF) or slides (PPTX), if known.
        detected_format: Format the classifier chose for this document.
        original_length: Normalized length before truncation.
    """

    text: str
    method: ExtractionMethod = field(default=ExtractionMethod.FAILED)
    truncated: bool = False
    source_page_count: int | None = None
    detected_format: DetectedFormat = field(default=DetectedFormat.UNSUPPORTED)
    original_length: int = 0
