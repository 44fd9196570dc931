import pytest

from finance_tracker.manager import CategorizerService
from finance_tracker.models import ReceiptExtraction
from finance_tracker.services.categorization import CategorizationPipeline


@pytest.fixture
def pipeline(service: CategorizerService) -> CategorizationPipeline:
    return CategorizationPipeline(service=service)


@pytest.mark.anyio
async def test_predict(pipeline: CategorizationPipeline) -> None:
    result = await pipeline.predict("Netflix subscription", None, 15.49)
    assert result.category_name == "Entertainment"


@pytest.mark.anyio
async def test_learn_then_predict(pipeline: CategorizationPipeline, service: CategorizerService) -> None:
    gym = service.repository.find_active_by_name("Health & Fitness")

    assert await pipeline.learn("Planet Crunch", None, gym.id)
    result = await pipeline.predict("Planet Crunch", None)
    assert result.category_name == "Health & Fitness"


@pytest.mark.anyio
async def test_predict_for_receipt_uses_generic_description(pipeline: CategorizationPipeline) -> None:
    extraction = ReceiptExtraction(merchant_name="Walmart", amount="12.00", confidence=0.8)

    result = await pipeline.predict_for_receipt(extraction)
    assert result.category_name == "Shopping"
