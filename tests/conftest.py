"""Shared fixtures: in-memory document builders and a recording OCR fake."""

from __future__ import annotations

import io
import time
import zipfile
from xml.sax.saxutils import escape

import docx
import pymupdf
import pytest

from doctext.config.settings import ExtractionSettings
from doctext.extractor.engine import ExtractionEngine
from doctext.extractor.rasterizer import PageRasterizer

# 64 characters: comfortably above the 50-character trust threshold
DIGITAL_LINE = "The quick brown fox jumps over the lazy dog beside the riverbank"

PPTX_NAMESPACES = (
    'xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
    'xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main"'
)


def make_pdf(page_texts: list[str]) -> bytes:
    """Build a PDF with one page per entry; empty strings give blank pages."""
    doc = pymupdf.open()
    for text in page_texts:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=10)
    data = doc.tobytes()
    doc.close()
    return data


def make_encrypted_pdf() -> bytes:
    doc = pymupdf.open()
    page = doc.new_page()
    page.insert_text((72, 72), DIGITAL_LINE, fontsize=10)
    data = doc.tobytes(
        encryption=pymupdf.PDF_ENCRYPT_AES_256,
        user_pw="secret",
        owner_pw="owner-secret",
    )
    doc.close()
    return data


def slide_xml(*runs: str) -> str:
    """Slide markup with one ``a:t`` run per argument (text is escaped)."""
    body = "".join(
        f"<p:sp><p:txBody><a:p><a:r><a:t>{escape(run)}</a:t></a:r></a:p></p:txBody></p:sp>"
        for run in runs
    )
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f"<p:sld {PPTX_NAMESPACES}><p:cSld><p:spTree>{body}</p:spTree></p:cSld></p:sld>"
    )


def make_pptx(slides: list[str], raw: bool = False) -> bytes:
    """Build a minimal PPTX package.

    Each entry is the text of one slide, or complete slide XML when *raw* is
    true. Parts are written in lexicographic name order (slide1, slide10,
    slide11, slide2...) so readers must sort numerically.
    """
    parts = {}
    for number, content in enumerate(slides, start=1):
        if not raw:
            content = slide_xml(content) if content else slide_xml()
        parts[f"ppt/slides/slide{number}.xml"] = content
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as package:
        package.writestr("[Content_Types].xml", "<Types/>")
        package.writestr("ppt/presentation.xml", "<p:presentation/>")
        for name in sorted(parts):
            package.writestr(name, parts[name])
        package.writestr("ppt/slides/_rels/slide1.xml.rels", "<Relationships/>")
    return buffer.getvalue()


def make_docx(paragraphs: list[str], table: list[list[str]] | None = None) -> bytes:
    document = docx.Document()
    for text in paragraphs:
        document.add_paragraph(text)
    if table:
        grid = document.add_table(rows=len(table), cols=len(table[0]))
        for row_index, row in enumerate(table):
            for col_index, value in enumerate(row):
                grid.cell(row_index, col_index).text = value
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def make_xlsx(modified: str | None = "2024-03-05T10:15:00Z") -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as package:
        package.writestr("[Content_Types].xml", "<Types/>")
        package.writestr("xl/workbook.xml", "<workbook/>")
        if modified is not None:
            package.writestr(
                "docProps/core.xml",
                '<cp:coreProperties xmlns:cp="http://schemas.openxmlformats.org/'
                'package/2006/metadata/core-properties" '
                'xmlns:dcterms="http://purl.org/dc/terms/" '
                'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">'
                f'<dcterms:modified xsi:type="dcterms:W3CDTF">{modified}</dcterms:modified>'
                "</cp:coreProperties>",
            )
    return buffer.getvalue()


def damage_zip_member(data: bytes, name: str) -> bytes:
    """Invert the stored bytes of one zip member so reading it fails."""
    with zipfile.ZipFile(io.BytesIO(data)) as package:
        info = package.getinfo(name)
    # Local file header: 30 fixed bytes, then file name and extra field
    start = info.header_offset + 30 + len(info.filename.encode()) + len(info.extra)
    damaged = bytearray(data)
    for offset in range(start, start + info.compress_size):
        damaged[offset] ^= 0xFF
    return bytes(damaged)


def make_ole_blob(encrypted: bool = False) -> bytes:
    """Bytes that start with the compound-binary signature."""
    body = b"\x00" * 504 + "WordDocument".encode("utf-16-le")
    if encrypted:
        body += "EncryptedPackage".encode("utf-16-le")
    return b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + body


class FakeOcr:
    """OCR adapter that records calls instead of running Tesseract."""

    def __init__(
        self,
        fail_pages: tuple[int, ...] = (),
        blank_pages: tuple[int, ...] = (),
        delays: dict[int, float] | None = None,
    ) -> None:
        self.calls: list[int] = []
        self.fail_pages = fail_pages
        self.blank_pages = blank_pages
        self.delays = delays or {}

    def recognize(self, image, page_number: int) -> str:
        self.calls.append(page_number)
        delay = self.delays.get(page_number)
        if delay:
            time.sleep(delay)
        if page_number in self.fail_pages:
            raise RuntimeError("tesseract crashed")
        if page_number in self.blank_pages:
            return "   \n"
        return f"Recognized scanned text for page {page_number}"


class FailingRasterizer(PageRasterizer):
    """Rasterizer that cannot render the given pages."""

    def __init__(self, fail_pages: tuple[int, ...]) -> None:
        super().__init__(scale=1.0)
        self.fail_pages = fail_pages

    def render(self, page):
        if page.number + 1 in self.fail_pages:
            raise RuntimeError("render failed")
        return super().render(page)


@pytest.fixture
def settings() -> ExtractionSettings:
    return ExtractionSettings(
        max_chars=10_000,
        pdf_max_pages=10,
        ocr_max_pages=5,
        min_total_chars=100,
        ocr_scale=1.0,
        ocr_page_timeout_seconds=30,
        ocr_workers=1,
        pptx_max_slides=20,
    )


@pytest.fixture
def fake_ocr() -> FakeOcr:
    return FakeOcr()


@pytest.fixture
def engine(settings, fake_ocr) -> ExtractionEngine:
    return ExtractionEngine(settings, ocr=fake_ocr, rasterizer=PageRasterizer(scale=1.0))
