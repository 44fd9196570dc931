from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from finance_tracker.api.dependencies import get_pipeline, get_service
from finance_tracker.api.schemas import CategorizeRequest, LearnRequest
from finance_tracker.logger import get_logger
from finance_tracker.manager import CategorizerService
from finance_tracker.models import CategorizationResult
from finance_tracker.services.categorization import CategorizationPipeline

logger = get_logger(__name__)

router = APIRouter(prefix="/api/ai")


@router.post("/categorize", response_model=CategorizationResult)
async def categorize_transaction(
    req: CategorizeRequest,
    pipeline: Annotated[CategorizationPipeline, Depends(get_pipeline)],
) -> CategorizationResult:
    return await pipeline.predict(req.description, req.merchant_name, req.amount)


@router.post("/learn")
async def learn_correction(
    req: LearnRequest,
    pipeline: Annotated[CategorizationPipeline, Depends(get_pipeline)],
) -> dict[str, str]:
    learned = await pipeline.learn(req.description, req.merchant_name, req.category_id)
    if not learned:
        raise HTTPException(status_code=404, detail="Category not found")

    logger.info("[LEARN] Correction recorded for category %s.", req.category_id)
    return {"status": "success", "message": "Learned from correction"}


@router.post("/train")
async def train_classifier(
    pipeline: Annotated[CategorizationPipeline, Depends(get_pipeline)],
) -> dict[str, str]:
    await pipeline.retrain()
    return {"status": "success", "message": "Classifier retrained"}


@router.post("/clear-cache")
async def clear_cache(
    service: Annotated[CategorizerService, Depends(get_service)],
) -> dict[str, str]:
    service.clear_cache()
    return {"status": "success", "message": "Categorization cache cleared"}
