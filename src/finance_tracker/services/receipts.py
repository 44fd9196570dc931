import asyncio
import os
from time import perf_counter

from finance_tracker.domain.receipts import error_extraction, parse_receipt_text
from finance_tracker.integration.ocr import OCREngine
from finance_tracker.logger import get_logger
from finance_tracker.models import ReceiptExtraction

logger = get_logger(__name__)


class ReceiptService:
    def __init__(self, engine: OCREngine) -> None:
        self.engine = engine

    def process_receipt(self, image_path: str) -> ReceiptExtraction:
        """OCR the image and parse the text. Failures come back as an error extraction."""
        started = perf_counter()
        try:
            if not os.path.exists(image_path):
                raise FileNotFoundError("Receipt image file not found")
            text = self.engine.extract_text(image_path)
        except Exception as exc:
            logger.error("[OCR] Could not extract text from %s: %s", image_path, exc)
            return error_extraction(str(exc))

        extraction = parse_receipt_text(text)
        logger.info(
            "[OCR] Parsed receipt %s in %.1f ms (merchant=%s, amount=%s, items=%d).",
            os.path.basename(image_path),
            (perf_counter() - started) * 1000,
            extraction.merchant_name,
            extraction.amount,
            len(extraction.items),
        )
        return extraction

    async def scan(self, image_path: str) -> ReceiptExtraction:
        return await asyncio.to_thread(self.process_receipt, image_path)
