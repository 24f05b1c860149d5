"""Whitespace normalization and character-budget enforcement.

Extracted text ends up inside conversational AI prompts with their own size
limits, so every result passes through here before it is returned:

1. Runs of spaces/tabs collapse to a single space, and spaces around line
   breaks are dropped.
2. Runs of blank lines collapse to a single blank line.
3. Text longer than the budget is cut at the budget and a notice is appended
   stating the true length (and page/slide count where known).
"""

from __future__ import annotations

import logging
import re

from doctext.extractor.types import DetectedFormat, ExtractionMethod, ExtractionResult

logger = logging.getLogger(__name__)

_HORIZONTAL_WHITESPACE = re.compile(r"[^\S\n]+")
_SPACE_AROUND_NEWLINE = re.compile(r" ?\n ?")
_BLANK_LINE_RUN = re.compile(r"\n{3,}")


def normalize_text(text: str) -> str:
    """Collapse whitespace runs and blank-line runs, then trim."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _HORIZONTAL_WHITESPACE.sub(" ", text)
    text = _SPACE_AROUND_NEWLINE.sub("\n", text)
    text = _BLANK_LINE_RUN.sub("\n\n", text)
    return text.strip()


def truncation_notice(
    original_length: int,
    source_count: int | None = None,
    unit: str = "pages",
) -> str:
    """Suffix appended to truncated text."""
    detail = f"Full document has {original_length} characters"
    if source_count is not None:
        detail += f" from {source_count} {unit}"
    return f"...\n\n[Document truncated - {detail}]"


def enforce_budget(
    text: str,
    max_chars: int,
    source_count: int | None = None,
    unit: str = "pages",
) -> tuple[str, bool]:
    """Cut *text* to *max_chars* and append a notice if it was longer.

    Returns:
        Tuple of (possibly truncated text, truncated flag).
    """
    if len(text) <= max_chars:
        return text, False

    logger.info(
        "Truncating extracted text from %d to %d characters", len(text), max_chars
    )
    return text[:max_chars] + truncation_notice(len(text), source_count, unit), True


def build_result(
    raw_text: str,
    method: ExtractionMethod,
    detected_format: DetectedFormat,
    max_chars: int,
    source_count: int | None = None,
    unit: str = "pages",
    count_in_notice: bool = False,
) -> ExtractionResult:
    """Normalize *raw_text* and wrap it in an ExtractionResult.

    Args:
        raw_text: Assembled reader output or advisory.
        method: Extraction method tag for the result.
        detected_format: Classifier verdict for the document.
        max_chars: Character budget.
        source_count: Total page/slide count of the source, if known.
        unit: Noun for ``source_count`` in the truncation notice.
        count_in_notice: Whether the truncation notice mentions the count.
    """
    normalized = normalize_text(raw_text)
    text, truncated = enforce_budget(
        normalized,
        max_chars,
        source_count if count_in_notice else None,
        unit,
    )
    return ExtractionResult(
        text=text,
        method=method,
        truncated=truncated,
        source_page_count=source_count,
        detected_format=detected_format,
        original_length=len(normalized),
    )
