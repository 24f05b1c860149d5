"""Presentation text reader for PPTX uploads.

A .pptx file is a zip package; each slide lives in ``ppt/slides/slideN.xml``.
Slide parts are sorted by their numeric index (slide10 after slide9) and the
text of every ``<a:t>`` run is pulled with a regular expression, which avoids
building an XML tree for every slide. When a slide's markup is ambiguous for
the regex (numeric character references, CDATA, self-closing or nested runs)
the slide is re-read with ElementTree instead.

Every slide in range yields exactly one block in the output, including slides
without text.
"""

from __future__ import annotations

import io
import logging
import re
import zipfile
from dataclasses import dataclass
from xml.etree import ElementTree as ET

from doctext.extractor.legacy import ZIP_MEMBER_ERRORS, is_encrypted_ooxml

logger = logging.getLogger(__name__)

DRAWINGML_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"

_SLIDE_PART = re.compile(r"^ppt/slides/slide(\d+)\.xml$")
_TEXT_RUN = re.compile(r"<a:t(?:\s[^>]*)?>([^<]*)</a:t>")
_TEXT_RUN_OPEN = re.compile(r"<a:t[\s>/]")
_ENTITY = re.compile(r"&(amp|lt|gt|quot|apos);")
_UNHANDLED_MARKUP = re.compile(r"&#|<!\[CDATA\[")
_WHITESPACE = re.compile(r"\s+")

_ENTITIES = {"amp": "&", "lt": "<", "gt": ">", "quot": '"', "apos": "'"}

NO_TEXT_MARKER = "[No text content or only images]"
UNREADABLE_MARKER = "[Could not extract text]"


@dataclass
class PresentationText:
    """Assembled text of a presentation plus slide statistics."""

    text: str
    slide_count: int
    processed_slides: int
    slides_with_text: int


def _decode_entities(fragment: str) -> str:
    return _ENTITY.sub(lambda m: _ENTITIES[m.group(1)], fragment)


def _is_ambiguous(xml: str, run_count: int) -> bool:
    """Whether the regex may have misread this slide's text runs."""
    if len(_TEXT_RUN_OPEN.findall(xml)) != run_count:
        return True
    return bool(_UNHANDLED_MARKUP.search(xml))


def slide_text_with_parser(xml: str) -> str:
    """Pull ``a:t`` text with ElementTree. Raises ``ET.ParseError`` on bad XML."""
    root = ET.fromstring(xml.encode("utf-8"))
    fragments = [
        element.text
        for element in root.iter(f"{{{DRAWINGML_NS}}}t")
        if element.text
    ]
    return _WHITESPACE.sub(" ", " ".join(fragments)).strip()


def slide_text(xml: str) -> str:
    """Extract the visible text of one slide's XML as a single line."""
    fragments = _TEXT_RUN.findall(xml)

    if _is_ambiguous(xml, len(fragments)):
        try:
            return slide_text_with_parser(xml)
        except ET.ParseError as e:
            logger.debug("Slide XML did not parse (%s); keeping regex result", e)

    texts = [_decode_entities(fragment) for fragment in fragments if fragment]
    return _WHITESPACE.sub(" ", " ".join(texts)).strip()


def list_slide_parts(names: list[str]) -> list[str]:
    """Slide part names in ascending numeric slide order."""
    numbered = []
    for name in names:
        match = _SLIDE_PART.match(name)
        if match:
            numbered.append((int(match.group(1)), name))
    numbered.sort()
    return [name for _, name in numbered]


def read_pptx(data: bytes, file_name: str, max_slides: int = 20) -> PresentationText:
    """Extract slide text from PPTX bytes.

    Args:
        data: Raw file bytes.
        file_name: Declared file name, shown in the output header.
        max_slides: Slide ceiling; later slides are noted but not read.

    Returns:
        PresentationText with one ``--- Slide N ---`` block per processed
        slide. ``slide_count`` is 0 when the package has no slide parts.

    Raises:
        ValueError: If the presentation is password-protected.
        zipfile.BadZipFile: If the bytes are not a zip archive.
    """
    if is_encrypted_ooxml(data):
        raise ValueError("presentation is password-protected (encrypted package)")

    with zipfile.ZipFile(io.BytesIO(data)) as package:
        slide_parts = list_slide_parts(package.namelist())
        slide_count = len(slide_parts)
        logger.info("Found %d slides in presentation %s", slide_count, file_name)

        if not slide_parts:
            return PresentationText(
                text="", slide_count=0, processed_slides=0, slides_with_text=0
            )

        blocks = [f"[PowerPoint Presentation: {file_name}]\nTotal Slides: {slide_count}"]
        slides_with_text = 0
        processed = slide_parts[:max_slides]

        for slide_number, part in enumerate(processed, start=1):
            try:
                xml = package.read(part).decode("utf-8", errors="replace")
                text = slide_text(xml)
            except ZIP_MEMBER_ERRORS as e:
                logger.warning(
                    "Failed to read slide %d of %s: %s", slide_number, file_name, e
                )
                text = UNREADABLE_MARKER
            else:
                if text:
                    slides_with_text += 1
                else:
                    text = NO_TEXT_MARKER
            blocks.append(f"--- Slide {slide_number} ---\n{text}")

    if slide_count > max_slides:
        blocks.append(
            f"[Note: Presentation has {slide_count} slides. Only first "
            f"{max_slides} slides were processed for text extraction.]"
        )

    logger.info(
        "Extracted text from %d of %d processed slides in %s",
        slides_with_text,
        len(processed),
        file_name,
    )
    return PresentationText(
        text="\n\n".join(blocks),
        slide_count=slide_count,
        processed_slides=len(processed),
        slides_with_text=slides_with_text,
    )
