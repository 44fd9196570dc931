import os
import threading
from typing import Protocol

import pytesseract
from PIL import Image

from finance_tracker.logger import get_logger

logger = get_logger(__name__)

# pytesseract raises a bare RuntimeError with this message when a run times out.
TIMEOUT_MESSAGE = "Tesseract process timeout"


class OCREngine(Protocol):
    def extract_text(self, image_path: str) -> str:
        ...


class OCRError(Exception):
    pass


class TesseractEngine:
    """
    Text extraction through the Tesseract binary.

    The binary is located and version-checked once, on first use, and the
    result is shared by every later call.
    """

    def __init__(
        self,
        lang: str = "eng",
        timeout: float = 30.0,
        tesseract_cmd: str | None = None,
    ):
        self.lang = lang
        self.timeout = timeout
        self.tesseract_cmd = tesseract_cmd
        self._init_lock = threading.Lock()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        if self._initialized:
            return
        with self._init_lock:
            if self._initialized:
                return
            if self.tesseract_cmd:
                pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd
            try:
                version = pytesseract.get_tesseract_version()
            except pytesseract.TesseractNotFoundError as exc:
                logger.error("[OCR] Tesseract binary not found.")
                raise OCRError("Tesseract is not installed or not on PATH") from exc
            self._initialized = True
            logger.info("[OCR] Tesseract %s ready (lang=%s).", version, self.lang)

    def extract_text(self, image_path: str) -> str:
        if not os.path.exists(image_path):
            raise FileNotFoundError("Receipt image file not found")

        self.initialize()
        with Image.open(image_path) as image:
            try:
                return pytesseract.image_to_string(
                    image.convert("RGB"),
                    lang=self.lang,
                    timeout=self.timeout,
                )
            except pytesseract.TesseractError as exc:
                raise OCRError(f"Tesseract failed: {exc.message}") from exc
            except RuntimeError as exc:
                if str(exc) != TIMEOUT_MESSAGE:
                    raise
                raise OCRError(f"OCR timed out after {self.timeout:.0f}s") from exc
