"""Advisories for legacy binary Office formats and spreadsheets.

Legacy .doc/.ppt/.xls files use the compound-file binary container, which
this package does not parse. The orchestrator first tries the modern reader
(some uploads are OOXML content with an old extension) and only falls back to
the notices built here when that yields nothing. Spreadsheets never get a text
model: they always produce a metadata notice.

Container sniffing helpers live here too, since the same signature check
distinguishes a genuine legacy file from an encrypted OOXML package.
"""

from __future__ import annotations

import io
import logging
import re
import zipfile
import zlib
from datetime import datetime

from doctext.extractor.types import Document

logger = logging.getLogger(__name__)

# Compound File Binary Format header
OLE_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

# Stream name (UTF-16LE directory entry) of an encrypted OOXML package
_ENCRYPTED_PACKAGE_ENTRY = "EncryptedPackage".encode("utf-16-le")

# Failures reading one zip member: missing part, CRC mismatch, encrypted or
# unsupported compression, damaged or truncated deflate stream
ZIP_MEMBER_ERRORS = (
    KeyError,
    OSError,
    EOFError,
    RuntimeError,
    NotImplementedError,
    zipfile.BadZipFile,
    zlib.error,
)

_CORE_MODIFIED = re.compile(
    r"<dcterms:modified[^>]*>\s*([^<\s]+)\s*</dcterms:modified>"
)


def is_compound_binary(data: bytes) -> bool:
    return data.startswith(OLE_SIGNATURE)


def is_encrypted_ooxml(data: bytes) -> bool:
    """True for password-protected Office files.

    Office stores encrypted .docx/.pptx/.xlsx as a compound-binary container
    holding an ``EncryptedPackage`` stream instead of a plain zip.
    """
    return is_compound_binary(data) and _ENCRYPTED_PACKAGE_ENTRY in data


def legacy_word_advisory(document: Document) -> str:
    return f"""[Legacy Word Document (.doc)]
File Name: {document.name}
File Size: {document.size_kb} KB

This is an older Word document format (.doc). While the file has been successfully uploaded and stored, text extraction is limited for legacy .doc files.

To enable full text extraction and chat capabilities:
1. Open this document in Microsoft Word
2. Save it as a modern Word document (.docx) using "Save As"
3. Re-upload the .docx version

Alternatively, you can:
- Export the document as a PDF for full text extraction
- Copy the text content and save it as a .txt file

The document is still available for download and sharing."""


def legacy_powerpoint_advisory(document: Document) -> str:
    return f"""[Legacy PowerPoint Format (.ppt)]
File Name: {document.name}
File Size: {document.size_kb} KB

This is an older PowerPoint format (.ppt). Text extraction is only supported for modern .pptx files.

To enable text extraction:
1. Open this presentation in PowerPoint
2. Save it as .pptx format using "Save As"
3. Re-upload the .pptx version

Alternatively, export as PDF for full text extraction.
The presentation is still available for download and sharing."""


def xlsx_modified_date(data: bytes) -> datetime | None:
    """Read ``dcterms:modified`` from an XLSX package's core properties.

    Returns None for legacy .xls bytes, packages without core properties,
    damaged core properties, or unparseable timestamps.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as package:
            core = package.read("docProps/core.xml").decode("utf-8", errors="replace")
    except ZIP_MEMBER_ERRORS as e:
        logger.debug("No readable core properties in spreadsheet: %s", e)
        return None

    match = _CORE_MODIFIED.search(core)
    if not match:
        return None
    try:
        return datetime.fromisoformat(match.group(1).replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable dcterms:modified value %r", match.group(1))
        return None


def spreadsheet_notice(document: Document) -> str:
    """Metadata-only notice for XLS/XLSX uploads."""
    modified = document.last_modified or xlsx_modified_date(document.content)
    modified_label = modified.strftime("%Y-%m-%d") if modified else "Unknown"
    protection = ""
    if is_encrypted_ooxml(document.content):
        protection = "\nProtection: Password-protected (encrypted workbook)"

    return f"""[Excel Spreadsheet]
File Name: {document.name}
File Type: Excel Spreadsheet
File Size: {document.size_kb} KB
Last Modified: {modified_label}{protection}

Note: This is an Excel spreadsheet file. The file has been successfully uploaded and stored.
While full data extraction from Excel files is not yet supported, you can still:
- Share this spreadsheet with students
- Download and work with it in Excel
- Export it as CSV for text-based analysis"""
