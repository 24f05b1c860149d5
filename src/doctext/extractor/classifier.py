"""Format classification from file name and declared content type.

The extension decides first; the declared MIME type is only consulted when
the extension is missing or unknown. Both helpers are pure and safe to call
before extraction to pre-filter uploads.
"""

from __future__ import annotations

from doctext.extractor.types import DetectedFormat, Document

EXTENSION_FORMATS: dict[str, DetectedFormat] = {
    ".pdf": DetectedFormat.PDF,
    ".txt": DetectedFormat.TXT,
    ".doc": DetectedFormat.DOC,
    ".docx": DetectedFormat.DOCX,
    ".ppt": DetectedFormat.PPT,
    ".pptx": DetectedFormat.PPTX,
    ".xls": DetectedFormat.XLS,
    ".xlsx": DetectedFormat.XLSX,
}

MIME_FORMATS: dict[str, DetectedFormat] = {
    "application/pdf": DetectedFormat.PDF,
    "text/plain": DetectedFormat.TXT,
    "application/msword": DetectedFormat.DOC,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (
        DetectedFormat.DOCX
    ),
    "application/vnd.ms-powerpoint": DetectedFormat.PPT,
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": (
        DetectedFormat.PPTX
    ),
    "application/vnd.ms-excel": DetectedFormat.XLS,
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": (
        DetectedFormat.XLSX
    ),
}

SUPPORTED_FORMATS_LABEL = "PDF, TXT, DOC, DOCX, PPT, PPTX, XLS, XLSX"


def normalized_mime(document: Document) -> str:
    """Lower-cased MIME type without parameters (``; charset=...``)."""
    if not document.mime_type:
        return ""
    return document.mime_type.split(";", 1)[0].strip().lower()


def get_document_type(document: Document) -> DetectedFormat:
    """Classify a document by extension, then by declared MIME type."""
    by_extension = EXTENSION_FORMATS.get(document.extension)
    if by_extension is not None:
        return by_extension
    return MIME_FORMATS.get(normalized_mime(document), DetectedFormat.UNSUPPORTED)


def is_supported_document(document: Document) -> bool:
    return get_document_type(document) is not DetectedFormat.UNSUPPORTED
