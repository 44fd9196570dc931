import asyncio

from finance_tracker.domain.receipts import describe
from finance_tracker.logger import get_logger
from finance_tracker.manager import CategorizerService
from finance_tracker.models import CategorizationResult, ReceiptExtraction

logger = get_logger(__name__)


class CategorizationPipeline:
    """Async seam between request handlers and the blocking categorizer."""

    def __init__(self, service: CategorizerService) -> None:
        self.service = service

    async def predict(
        self,
        description: str | None,
        merchant_name: str | None = None,
        amount: float | str | None = None,
    ) -> CategorizationResult:
        return await asyncio.to_thread(
            self.service.categorize,
            description,
            merchant_name,
            amount,
        )

    async def learn(
        self,
        description: str | None,
        merchant_name: str | None,
        category_id: int,
    ) -> bool:
        return await asyncio.to_thread(
            self.service.learn_from_correction,
            description,
            merchant_name,
            category_id,
        )

    async def retrain(self) -> None:
        await asyncio.to_thread(self.service.train)

    async def predict_for_receipt(self, extraction: ReceiptExtraction) -> CategorizationResult:
        description = extraction.description or describe(None)
        logger.debug(
            "[RECEIPT] Categorizing receipt from merchant '%s'.",
            extraction.merchant_name or "unknown",
        )
        return await self.predict(description, extraction.merchant_name, extraction.amount)
