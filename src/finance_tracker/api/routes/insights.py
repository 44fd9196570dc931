from typing import Any

from fastapi import APIRouter

from finance_tracker.api.schemas import PatternsRequest
from finance_tracker.services.insights import analyze_spending_patterns

router = APIRouter(prefix="/api/insights")


@router.post("/patterns")
async def spending_patterns(req: PatternsRequest) -> dict[str, Any]:
    return analyze_spending_patterns(req.transactions)
