"""PDF text-layer reader and per-page scan detection.

The text pass reads embedded text objects with PyMuPDF for at most
``max_pages`` pages. Each page is assessed on its own: a page with more than
50 characters of embedded text is trusted as digitally produced, anything
less is treated as a scan that needs OCR. A page whose text cannot be read at
all is assessed as untrusted rather than failing the document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import pymupdf

from doctext.extractor.types import PageAssessment

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = "\n\n"


@dataclass
class TextPass:
    """Outcome of reading a PDF's embedded text layer.

    Attributes:
        total_pages: Page count of the whole document.
        processed_pages: Pages actually read (capped).
        assessments: One scan-detector verdict per processed page.
        text: ``--- Page N ---`` blocks for every trusted page, in order.
        accumulated_chars: Length of the trusted blocks as accumulated for the
            minimum-text check, each block counted with its leading blank
            line separator.
    """

    total_pages: int
    processed_pages: int
    assessments: list[PageAssessment] = field(default_factory=list)
    text: str = ""
    accumulated_chars: int = 0

    @property
    def untrusted_pages(self) -> list[int]:
        return [a.page_number for a in self.assessments if not a.trusted]


def open_pdf(data: bytes) -> pymupdf.Document:
    """Open PDF bytes, refusing password-protected documents.

    Raises:
        ValueError: If the document needs a password.
        pymupdf.FileDataError: If the bytes are not a readable PDF.
    """
    doc = pymupdf.open(stream=data, filetype="pdf")
    if doc.needs_pass:
        doc.close()
        raise ValueError("PDF is password-protected (encrypted)")
    return doc


def page_text(page: pymupdf.Page) -> str:
    """Embedded text of one page, whitespace-trimmed."""
    return page.get_text("text").strip()


def read_text_layer(doc: pymupdf.Document, max_pages: int) -> TextPass:
    """Run the text pass over the first *max_pages* pages of *doc*."""
    total_pages = doc.page_count
    processed = min(total_pages, max_pages)
    result = TextPass(total_pages=total_pages, processed_pages=processed)
    blocks: list[str] = []

    for index in range(processed):
        page_number = index + 1
        try:
            text = page_text(doc.load_page(index))
        except MemoryError:
            raise
        except Exception as e:
            logger.warning("Failed to extract text from page %d: %s", page_number, e)
            text = ""

        assessment = PageAssessment.assess(page_number, text)
        result.assessments.append(assessment)

        if assessment.trusted:
            blocks.append(f"--- Page {page_number} ---\n{text}")
            result.accumulated_chars += len(BLOCK_SEPARATOR) + len(blocks[-1])
            logger.info(
                "Extracted embedded text from page %d: %d characters",
                page_number,
                assessment.embedded_char_count,
            )
        else:
            logger.info(
                "Page %d appears to be scanned (%d embedded characters); OCR required",
                page_number,
                assessment.embedded_char_count,
            )

    result.text = BLOCK_SEPARATOR.join(blocks)
    return result


def needs_ocr(text_pass: TextPass, force_ocr: bool, min_total_chars: int) -> bool:
    """Decide whether the OCR pass replaces the text pass."""
    if force_ocr or text_pass.untrusted_pages:
        return True
    return text_pass.accumulated_chars < min_total_chars
