"""Plain-text reader for TXT uploads."""

from __future__ import annotations

import codecs
import logging

logger = logging.getLogger(__name__)


def read_text(data: bytes) -> str:
    """Decode TXT bytes as UTF-8, dropping a leading BOM.

    Undecodable byte sequences are replaced with U+FFFD rather than raising,
    so a mis-encoded upload still yields its readable parts.
    """
    if data.startswith(codecs.BOM_UTF8):
        data = data[len(codecs.BOM_UTF8):]
    text = data.decode("utf-8", errors="replace")
    logger.debug("Decoded %d bytes of plain text into %d characters", len(data), len(text))
    return text
