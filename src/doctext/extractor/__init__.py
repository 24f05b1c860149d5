"""Document text extraction for PDF, TXT, Word, PowerPoint and Excel uploads.

Public API:
    ExtractionEngine(settings, ocr, rasterizer).extract(document, force_ocr)
        -> ExtractionResult
    extract_document(document, force_ocr) -> ExtractionResult
    get_document_type(document) -> DetectedFormat
    is_supported_document(document) -> bool
"""

from doctext.extractor.classifier import get_document_type, is_supported_document
from doctext.extractor.engine import ExtractionEngine, extract_document
from doctext.extractor.ocr import OcrAdapter, TesseractOcrAdapter
from doctext.extractor.rasterizer import PageRasterizer
from doctext.extractor.types import (
    DetectedFormat,
    Document,
    ExtractionMethod,
    ExtractionResult,
    OCRJob,
    PageAssessment,
)

__all__ = [
    "DetectedFormat",
    "Document",
    "ExtractionEngine",
    "ExtractionMethod",
    "ExtractionResult",
    "OCRJob",
    "OcrAdapter",
    "PageAssessment",
    "PageRasterizer",
    "TesseractOcrAdapter",
    "extract_document",
    "get_document_type",
    "is_supported_document",
]
