from fastapi import HTTPException, Request

from finance_tracker.manager import CategorizerService
from finance_tracker.services.categorization import CategorizationPipeline
from finance_tracker.services.receipts import ReceiptService
from finance_tracker.storage.categories import CategoryRepository


def _state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return value


def get_service(request: Request) -> CategorizerService:
    return _state(request, "service")


def get_repository(request: Request) -> CategoryRepository:
    return _state(request, "repository")


def get_pipeline(request: Request) -> CategorizationPipeline:
    return _state(request, "pipeline")


def get_receipts(request: Request) -> ReceiptService:
    return _state(request, "receipts")
