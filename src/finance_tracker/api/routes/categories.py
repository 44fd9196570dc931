from typing import Annotated, Any

from fastapi import APIRouter, Depends

from finance_tracker.api.dependencies import get_repository
from finance_tracker.domain.categories import build_category_tree
from finance_tracker.storage.categories import CategoryRepository

router = APIRouter(prefix="/api/categories")


@router.get("")
async def list_categories(
    repository: Annotated[CategoryRepository, Depends(get_repository)],
) -> dict[str, list[dict[str, Any]]]:
    return {"categories": build_category_tree(repository.list_active())}
