"""Two-pass PDF extraction: embedded text first, OCR when the text is not enough.

1. **Text pass** -- read the embedded text layer of up to ``pdf_max_pages``
   pages and assess each page with the scan detector.
2. **OCR pass** -- if any page is untrusted, OCR was forced, or the assembled
   text is shorter than ``min_total_chars``, the text pass output is
   discarded and the first ``ocr_max_pages`` pages are rasterized and run
   through the OCR adapter.

Rasterization happens on the calling thread (PyMuPDF documents are not
shared between threads); recognition runs on a bounded worker pool with at
most ``ocr_workers`` pages in flight. Results are keyed by page number so
the assembled text is always in ascending page order. A page whose render or
recognition fails, or exceeds the per-page deadline, contributes a failure
marker instead of aborting the document.
"""

from __future__ import annotations

import logging
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass

import pymupdf

from doctext.config.settings import ExtractionSettings
from doctext.extractor.ocr import OcrAdapter
from doctext.extractor.pdf_reader import needs_ocr, open_pdf, read_text_layer
from doctext.extractor.rasterizer import PageRasterizer
from doctext.extractor.types import ExtractionMethod, OCRJob

logger = logging.getLogger(__name__)

OCR_BANNER = (
    "[Note: This appears to be a scanned PDF. "
    "Text was extracted with OCR and may contain recognition errors.]"
)
NO_OCR_TEXT_MARKER = "[No text detected on this page]"


@dataclass
class PdfExtraction:
    """Raw (un-normalized) text of a PDF and how it was obtained."""

    text: str
    method: ExtractionMethod
    total_pages: int
    ocr_pages: int = 0


def ocr_failed_marker(page_number: int) -> str:
    return f"[OCR failed for page {page_number}]"


def _ocr_block(job: OCRJob) -> str:
    if job.result_text is None:
        return f"--- Page {job.page_number} ---\n{ocr_failed_marker(job.page_number)}"
    if not job.result_text.strip():
        return f"--- Page {job.page_number} ---\n{NO_OCR_TEXT_MARKER}"
    return f"--- Page {job.page_number} (OCR) ---\n{job.result_text.strip()}"


class _RecognitionPool:
    """Bounded OCR worker pool that keeps pages isolated from a hung call.

    At most ``workers`` pages are in flight. Each page is collected in
    submission order with its own deadline. A recognition call that misses
    its deadline cannot be stopped and keeps holding its worker thread, so
    the executor is retired and later pages go to a fresh one.
    """

    def __init__(self, ocr: OcrAdapter, workers: int, timeout: float | None) -> None:
        self.ocr = ocr
        self.workers = workers
        self.timeout = timeout
        self.pending: deque[tuple[OCRJob, Future]] = deque()
        self._executor = self._new_executor()

    def _new_executor(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="ocr")

    def submit(self, job: OCRJob) -> None:
        future = self._executor.submit(self.ocr.recognize, job.raster_image, job.page_number)
        self.pending.append((job, future))
        if len(self.pending) >= self.workers:
            self.collect_next()

    def drain(self) -> None:
        while self.pending:
            self.collect_next()

    def collect_next(self) -> None:
        """Wait for the oldest in-flight page and record its text."""
        job, future = self.pending.popleft()
        try:
            job.result_text = future.result(timeout=self.timeout)
        except FutureTimeoutError:
            logger.error(
                "OCR timed out for page %d after %s seconds", job.page_number, self.timeout
            )
            future.cancel()
            self._retire_executor()
        except MemoryError:
            raise
        except Exception as e:
            logger.error("OCR failed for page %d: %s", job.page_number, e)
        finally:
            # Drop the bitmap; only the text is needed from here on
            job.raster_image = None

    def _retire_executor(self) -> None:
        # Pages already running on the old executor finish there
        stuck, self._executor = self._executor, self._new_executor()
        stuck.shutdown(wait=False)
        logger.warning("Replaced OCR worker pool held by a timed-out page")

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)


def run_ocr_pass(
    doc: pymupdf.Document,
    settings: ExtractionSettings,
    ocr: OcrAdapter,
    rasterizer: PageRasterizer,
) -> tuple[str, int]:
    """OCR the first ``ocr_max_pages`` pages of *doc*.

    Returns:
        Tuple of (assembled OCR text, number of pages OCR'd).
    """
    total_pages = doc.page_count
    ocr_pages = min(total_pages, settings.ocr_max_pages)
    timeout = settings.ocr_page_timeout_seconds or None
    logger.info(
        "Starting OCR for %d of %d pages (%d worker(s))",
        ocr_pages,
        total_pages,
        settings.ocr_workers,
    )

    jobs: list[OCRJob] = []
    pool = _RecognitionPool(ocr, settings.ocr_workers, timeout)
    try:
        for index in range(ocr_pages):
            page_number = index + 1
            job = OCRJob(page_number=page_number, raster_image=None)
            jobs.append(job)

            try:
                job.raster_image = rasterizer.render(doc.load_page(index))
            except MemoryError:
                raise
            except Exception as e:
                logger.error("Failed to render page %d for OCR: %s", page_number, e)
                continue

            pool.submit(job)

        pool.drain()
    finally:
        pool.close()

    blocks = [OCR_BANNER]
    blocks.extend(_ocr_block(job) for job in sorted(jobs, key=lambda j: j.page_number))

    if total_pages > ocr_pages:
        blocks.append(
            f"[Note: This scanned PDF has {total_pages} pages. Only the first "
            f"{ocr_pages} pages were processed with OCR; "
            f"{total_pages - ocr_pages} pages were skipped.]"
        )

    return "\n\n".join(blocks), ocr_pages


def extract_pdf(
    data: bytes,
    settings: ExtractionSettings,
    ocr: OcrAdapter,
    rasterizer: PageRasterizer,
    force_ocr: bool = False,
) -> PdfExtraction:
    """Extract text from PDF bytes with OCR fallback for scanned pages.

    Args:
        data: Raw PDF bytes.
        settings: Page ceilings, OCR thresholds and worker pool size.
        ocr: Adapter used for untrusted or forced pages.
        rasterizer: Page renderer feeding the OCR adapter.
        force_ocr: Skip the text pass and OCR unconditionally.

    Returns:
        PdfExtraction with raw text (empty when the PDF has no pages).

    Raises:
        ValueError: If the PDF is password-protected.
        pymupdf.FileDataError: If the bytes are not a readable PDF.
    """
    doc = open_pdf(data)
    try:
        total_pages = doc.page_count
        logger.info("PDF loaded, pages: %d", total_pages)

        if total_pages == 0:
            return PdfExtraction(
                text="", method=ExtractionMethod.FAILED, total_pages=0
            )

        if not force_ocr:
            text_pass = read_text_layer(doc, settings.pdf_max_pages)
            if not needs_ocr(text_pass, force_ocr, settings.min_total_chars):
                text = text_pass.text
                if total_pages > text_pass.processed_pages:
                    text += (
                        f"\n\n[Note: This PDF has {total_pages} pages, but only "
                        f"the first {text_pass.processed_pages} pages were "
                        "processed for performance reasons.]"
                    )
                return PdfExtraction(
                    text=text,
                    method=ExtractionMethod.EMBEDDED,
                    total_pages=total_pages,
                )
            logger.info(
                "PDF needs OCR (untrusted pages: %s, embedded text: %d chars)",
                text_pass.untrusted_pages or "none",
                len(text_pass.text),
            )
        else:
            logger.info("OCR forced by caller; skipping text pass")

        text, ocr_pages = run_ocr_pass(doc, settings, ocr, rasterizer)
        return PdfExtraction(
            text=text,
            method=ExtractionMethod.OCR_MIXED,
            total_pages=total_pages,
            ocr_pages=ocr_pages,
        )
    finally:
        doc.close()
