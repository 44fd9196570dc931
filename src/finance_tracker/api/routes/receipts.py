from typing import Annotated

from fastapi import APIRouter, Depends

from finance_tracker.api.dependencies import get_pipeline, get_receipts
from finance_tracker.api.schemas import ReceiptResponse, ReceiptScanRequest, ReceiptTextRequest
from finance_tracker.domain.receipts import parse_receipt_text
from finance_tracker.models import ReceiptExtraction
from finance_tracker.services.categorization import CategorizationPipeline
from finance_tracker.services.receipts import ReceiptService

router = APIRouter(prefix="/api/receipts")


async def _respond(extraction: ReceiptExtraction, pipeline: CategorizationPipeline) -> ReceiptResponse:
    # Categorize only what can become a transaction; the caller decides what to do otherwise.
    if not extraction.amount or not extraction.merchant_name:
        return ReceiptResponse(extraction=extraction)
    categorization = await pipeline.predict_for_receipt(extraction)
    return ReceiptResponse(extraction=extraction, categorization=categorization)


@router.post("/parse", response_model=ReceiptResponse)
async def parse_receipt(
    req: ReceiptTextRequest,
    pipeline: Annotated[CategorizationPipeline, Depends(get_pipeline)],
) -> ReceiptResponse:
    return await _respond(parse_receipt_text(req.text), pipeline)


@router.post("/scan", response_model=ReceiptResponse)
async def scan_receipt(
    req: ReceiptScanRequest,
    receipts: Annotated[ReceiptService, Depends(get_receipts)],
    pipeline: Annotated[CategorizationPipeline, Depends(get_pipeline)],
) -> ReceiptResponse:
    extraction = await receipts.scan(req.image_path)
    return await _respond(extraction, pipeline)
