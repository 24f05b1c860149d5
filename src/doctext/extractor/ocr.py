"""OCR engine adapters.

The PDF pipeline only depends on the ``OcrAdapter`` protocol, so tests and
host applications can swap Tesseract for any object with a matching
``recognize`` method.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

import pytesseract
from PIL import Image

from doctext.config.settings import ExtractionSettings

logger = logging.getLogger(__name__)


class OcrAdapter(Protocol):
    def recognize(self, image: Image.Image, page_number: int) -> str:
        """Return the text recognized in *image*; raise on engine failure."""
        ...


class _TesseractCommandGate:
    """Serializes changes to pytesseract's module-level executable path.

    pytesseract reads ``pytesseract.pytesseract.tesseract_cmd`` when it spawns
    the Tesseract process and offers no per-call override. Calls that use the
    executable currently installed run concurrently; a call that needs a
    different one waits until no call is in flight, then switches it.
    """

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._active = 0

    @contextmanager
    def use(self, tesseract_cmd: str) -> Iterator[None]:
        with self._condition:
            self._condition.wait_for(
                lambda: self._active == 0
                or pytesseract.pytesseract.tesseract_cmd == tesseract_cmd
            )
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
            self._active += 1
        try:
            yield
        finally:
            with self._condition:
                self._active -= 1
                self._condition.notify_all()


_command_gate = _TesseractCommandGate()


class TesseractOcrAdapter:
    """Runs Tesseract through pytesseract.

    Args:
        language: Tesseract language code(s), e.g. ``"eng"`` or ``"eng+fra"``.
        tesseract_cmd: Tesseract executable used by this adapter's calls.
        timeout: Seconds before the Tesseract process is killed (0 = none).
    """

    def __init__(
        self,
        language: str = "eng",
        tesseract_cmd: str = "tesseract",
        timeout: float = 0,
    ) -> None:
        self.language = language
        self.tesseract_cmd = tesseract_cmd
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: ExtractionSettings) -> TesseractOcrAdapter:
        return cls(
            language=settings.ocr_language,
            tesseract_cmd=settings.tesseract_cmd,
            timeout=settings.ocr_page_timeout_seconds,
        )

    def recognize(self, image: Image.Image, page_number: int) -> str:
        logger.info("Starting OCR for page %d", page_number)
        with _command_gate.use(self.tesseract_cmd):
            text = pytesseract.image_to_string(
                image, lang=self.language, timeout=self.timeout
            )
        logger.info("OCR completed for page %d: %d characters", page_number, len(text))
        return text
