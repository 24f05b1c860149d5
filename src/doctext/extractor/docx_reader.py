"""Word-processing text puller for DOCX (and mislabeled DOC) uploads.

Uses python-docx to read body paragraphs, then table rows. Only raw text is
returned; styles and layout are discarded.
"""

from __future__ import annotations

import io
import logging

import docx

from doctext.extractor.legacy import is_encrypted_ooxml

logger = logging.getLogger(__name__)


def read_docx(data: bytes) -> str:
    """Extract raw text from DOCX bytes.

    Args:
        data: Raw file bytes.

    Returns:
        Paragraph text followed by table rows (cells joined by `` | ``), one
        item per line. Empty string if the document holds no text.

    Raises:
        ValueError: If the package is password-protected.
        Exception: Whatever python-docx raises for non-zip or corrupt input
            (``PackageNotFoundError``, ``BadZipFile``, ``KeyError``...).
    """
    if is_encrypted_ooxml(data):
        raise ValueError("document is password-protected (encrypted package)")

    document = docx.Document(io.BytesIO(data))
    lines: list[str] = []

    for paragraph in document.paragraphs:
        text = paragraph.text.strip()
        if text:
            lines.append(text)

    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells]
            if any(cells):
                lines.append(" | ".join(cells))

    logger.debug(
        "python-docx read %d paragraphs and %d tables",
        len(document.paragraphs),
        len(document.tables),
    )
    return "\n".join(lines)
