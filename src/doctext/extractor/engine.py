"""Extraction orchestrator: classify, dispatch to a reader, normalize.

``ExtractionEngine.extract`` is the single entry point. It never raises for
bad input: unsupported formats, legacy containers, encrypted or corrupt files
and partial page failures all come back as an ExtractionResult whose text is
a human-readable advisory. Only ``MemoryError`` is allowed to propagate.

Readers raise whatever their library raises; ``_failure_result`` is the one
place those errors become advisories, matched on the error message for
password and corruption keywords.

The OCR adapter and page rasterizer are held by the engine instance rather
than configured at module level, so tests and host applications can inject
their own.
"""

from __future__ import annotations

import logging
import re

from doctext.config.settings import ExtractionSettings
from doctext.extractor.classifier import (
    SUPPORTED_FORMATS_LABEL,
    get_document_type,
    normalized_mime,
)
from doctext.extractor.docx_reader import read_docx
from doctext.extractor.legacy import (
    is_compound_binary,
    legacy_powerpoint_advisory,
    legacy_word_advisory,
    spreadsheet_notice,
)
from doctext.extractor.normalizer import build_result
from doctext.extractor.ocr import OcrAdapter, TesseractOcrAdapter
from doctext.extractor.pdf_pipeline import extract_pdf
from doctext.extractor.pptx_reader import read_pptx
from doctext.extractor.rasterizer import PageRasterizer
from doctext.extractor.text_reader import read_text
from doctext.extractor.types import (
    DetectedFormat,
    Document,
    ExtractionMethod,
    ExtractionResult,
)

logger = logging.getLogger(__name__)

__all__ = ["ExtractionEngine", "extract_document"]

_PASSWORD_PATTERN = re.compile(r"password|encrypt", re.IGNORECASE)
_CORRUPT_PATTERN = re.compile(r"corrupt|not a zip|bad ?zip|truncated", re.IGNORECASE)

_WORD_MIME_LEGACY = "application/msword"

PDF_PASSWORD_ADVISORY = "[This PDF is password-protected and cannot be processed]"
PDF_EMPTY_NOTICE = "[No text could be extracted from this PDF]"
TXT_EMPTY_NOTICE = "[No text found in this TXT file]"
WORD_PASSWORD_ADVISORY = (
    "[This Word document appears to be password-protected and cannot be processed]"
)
PRESENTATION_PASSWORD_ADVISORY = (
    "[This presentation appears to be password-protected and cannot be processed. "
    "Remove the password in PowerPoint and re-upload it.]"
)
WORD_CORRUPT_ADVISORY = (
    "[This Word document appears to be corrupted and cannot be processed]"
)
WORD_EMPTY_NOTICE = (
    "[No text could be extracted from this Word document. The file may be "
    "corrupted, password-protected, or contain only images/graphics.]"
)


def _error_text(error: Exception) -> str:
    return str(error) or type(error).__name__


class ExtractionEngine:
    """Turns uploaded documents into bounded plain text.

    Args:
        settings: Ceilings and OCR options; loaded from config when omitted.
        ocr: OCR adapter; Tesseract configured from *settings* when omitted.
        rasterizer: PDF page renderer; built at ``settings.ocr_scale`` when
            omitted.
    """

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        ocr: OcrAdapter | None = None,
        rasterizer: PageRasterizer | None = None,
    ) -> None:
        self.settings = settings or ExtractionSettings()
        self.ocr = ocr or TesseractOcrAdapter.from_settings(self.settings)
        self.rasterizer = rasterizer or PageRasterizer(scale=self.settings.ocr_scale)

    def extract(self, document: Document, force_ocr: bool = False) -> ExtractionResult:
        """Extract text from *document*.

        Args:
            document: Uploaded bytes with declared name and content type.
            force_ocr: For PDFs, skip the embedded text and OCR directly.

        Returns:
            ExtractionResult. Never raises except on ``MemoryError``.
        """
        detected = get_document_type(document)
        logger.info(
            "Extracting %s (%d bytes) as %s",
            document.name,
            len(document.content),
            detected.value,
        )

        try:
            result = self._dispatch(document, detected, force_ocr)
        except MemoryError:
            raise
        except Exception as e:
            result = self._failure_result(document, detected, e)

        logger.info(
            "Extraction of %s finished: method=%s, %d characters, truncated=%s",
            document.name,
            result.method.value,
            len(result.text),
            result.truncated,
        )
        return result

    def _dispatch(
        self, document: Document, detected: DetectedFormat, force_ocr: bool
    ) -> ExtractionResult:
        if detected is DetectedFormat.PDF:
            return self._extract_pdf(document, force_ocr)
        if detected is DetectedFormat.TXT:
            return self._extract_txt(document)
        if detected is DetectedFormat.DOCX:
            return self._extract_docx(document)
        if detected is DetectedFormat.DOC:
            return self._extract_doc(document)
        if detected is DetectedFormat.PPTX:
            return self._extract_pptx(document)
        if detected is DetectedFormat.PPT:
            return self._extract_ppt(document)
        if detected in (DetectedFormat.XLS, DetectedFormat.XLSX):
            return self._result(
                spreadsheet_notice(document), ExtractionMethod.METADATA_ONLY, detected
            )
        return self._unsupported(document)

    def _result(
        self,
        text: str,
        method: ExtractionMethod,
        detected: DetectedFormat,
        source_count: int | None = None,
        unit: str = "pages",
        count_in_notice: bool = False,
    ) -> ExtractionResult:
        return build_result(
            text,
            method,
            detected,
            self.settings.max_chars,
            source_count=source_count,
            unit=unit,
            count_in_notice=count_in_notice,
        )

    def _unsupported(self, document: Document) -> ExtractionResult:
        declared = normalized_mime(document) or document.extension or "Unknown"
        logger.warning("Unsupported file type for %s: %s", document.name, declared)
        return self._result(
            f"[Unsupported file type: {declared}. "
            f"Supported formats: {SUPPORTED_FORMATS_LABEL}]",
            ExtractionMethod.UNSUPPORTED,
            DetectedFormat.UNSUPPORTED,
        )

    def _failure_result(
        self, document: Document, detected: DetectedFormat, error: Exception
    ) -> ExtractionResult:
        """Convert a reader error into an advisory result."""
        message = _error_text(error)
        password = bool(_PASSWORD_PATTERN.search(message))
        failed = ExtractionMethod.FAILED

        if detected is DetectedFormat.PDF:
            logger.error("PDF text extraction failed for %s: %s", document.name, message)
            if password:
                return self._result(PDF_PASSWORD_ADVISORY, failed, detected)
            return self._result(
                f"[PDF text extraction failed: {message}]", failed, detected
            )

        if detected in (DetectedFormat.DOCX, DetectedFormat.DOC):
            logger.warning("Word text extraction failed for %s: %s", document.name, message)
            if password:
                return self._result(WORD_PASSWORD_ADVISORY, failed, detected)
            if detected is DetectedFormat.DOC or is_compound_binary(document.content):
                # Pre-XML compound-binary container
                return self._result(
                    legacy_word_advisory(document), ExtractionMethod.METADATA_ONLY, detected
                )
            if _CORRUPT_PATTERN.search(message):
                return self._result(WORD_CORRUPT_ADVISORY, failed, detected)
            return self._result(
                f"[Word document text extraction failed: {message}. "
                "The file is still available for download.]",
                failed,
                detected,
            )

        if detected is DetectedFormat.PPT:
            if password:
                logger.warning("Presentation %s is password-protected", document.name)
                return self._result(PRESENTATION_PASSWORD_ADVISORY, failed, detected)
            logger.info(
                "Could not read %s as OOXML (%s); emitting legacy advisory",
                document.name,
                message,
            )
            return self._result(
                legacy_powerpoint_advisory(document), ExtractionMethod.METADATA_ONLY, detected
            )

        if detected is DetectedFormat.PPTX:
            logger.error("PowerPoint text extraction failed for %s: %s", document.name, message)
            if password:
                return self._result(PRESENTATION_PASSWORD_ADVISORY, failed, detected)
            return self._result(
                f"""[PowerPoint Presentation]
File Name: {document.name}
File Size: {document.size_kb} KB

Text extraction failed: {message}

The presentation has been uploaded and is available for download.
For better text extraction, try exporting as PDF from PowerPoint.""",
                failed,
                detected,
            )

        logger.exception("Unexpected error extracting %s", document.name)
        return self._result(
            f"[{detected.value} text extraction failed: {message}]", failed, detected
        )

    # --- PDF ---

    def _extract_pdf(self, document: Document, force_ocr: bool) -> ExtractionResult:
        pdf = extract_pdf(
            document.content, self.settings, self.ocr, self.rasterizer, force_ocr
        )
        result = self._result(
            pdf.text,
            pdf.method,
            DetectedFormat.PDF,
            source_count=pdf.total_pages,
            count_in_notice=True,
        )
        if not result.text:
            return self._result(
                PDF_EMPTY_NOTICE,
                ExtractionMethod.FAILED,
                DetectedFormat.PDF,
                source_count=pdf.total_pages,
            )
        return result

    # --- TXT ---

    def _extract_txt(self, document: Document) -> ExtractionResult:
        result = self._result(
            read_text(document.content), ExtractionMethod.EMBEDDED, DetectedFormat.TXT
        )
        if not result.text:
            return self._result(
                TXT_EMPTY_NOTICE, ExtractionMethod.FAILED, DetectedFormat.TXT
            )
        return result

    # --- Word ---

    def _extract_docx(self, document: Document) -> ExtractionResult:
        detected = DetectedFormat.DOCX
        result = self._result(read_docx(document.content), ExtractionMethod.EMBEDDED, detected)
        if result.text:
            return result

        if normalized_mime(document) == _WORD_MIME_LEGACY:
            return self._result(
                legacy_word_advisory(document), ExtractionMethod.METADATA_ONLY, detected
            )
        return self._result(WORD_EMPTY_NOTICE, ExtractionMethod.FAILED, detected)

    def _extract_doc(self, document: Document) -> ExtractionResult:
        # Some .doc uploads are OOXML content with an old extension
        detected = DetectedFormat.DOC
        result = self._result(read_docx(document.content), ExtractionMethod.EMBEDDED, detected)
        if result.text:
            logger.info("Extracted OOXML text from legacy-named %s", document.name)
            return result
        return self._result(
            legacy_word_advisory(document), ExtractionMethod.METADATA_ONLY, detected
        )

    # --- PowerPoint ---

    def _extract_pptx(self, document: Document) -> ExtractionResult:
        detected = DetectedFormat.PPTX
        deck = read_pptx(document.content, document.name, self.settings.pptx_max_slides)

        if deck.slide_count == 0:
            return self._result(
                f"""[PowerPoint Presentation]
File Name: {document.name}
No slides found in presentation or unable to extract text.
The file has been uploaded and is available for download.""",
                ExtractionMethod.FAILED,
                detected,
                source_count=0,
            )

        return self._result(
            deck.text,
            ExtractionMethod.EMBEDDED,
            detected,
            source_count=deck.slide_count,
            unit="slides",
            count_in_notice=True,
        )

    def _extract_ppt(self, document: Document) -> ExtractionResult:
        detected = DetectedFormat.PPT
        deck = read_pptx(document.content, document.name, self.settings.pptx_max_slides)
        if deck.slides_with_text:
            logger.info("Extracted OOXML text from legacy-named %s", document.name)
            return self._result(
                deck.text,
                ExtractionMethod.EMBEDDED,
                detected,
                source_count=deck.slide_count,
                unit="slides",
                count_in_notice=True,
            )
        return self._result(
            legacy_powerpoint_advisory(document), ExtractionMethod.METADATA_ONLY, detected
        )


def extract_document(
    document: Document,
    force_ocr: bool = False,
    settings: ExtractionSettings | None = None,
) -> ExtractionResult:
    """Extract a single document with a default-configured engine."""
    return ExtractionEngine(settings).extract(document, force_ocr=force_ocr)
