from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from finance_tracker.app import create_app
from finance_tracker.main import app
from finance_tracker.manager import CategorizerService
from finance_tracker.models import ReceiptExtraction
from finance_tracker.services.categorization import CategorizationPipeline

client = TestClient(app)

_STATE_NAMES = ("repository", "service", "pipeline", "receipts")


@pytest.fixture
def installed(service: CategorizerService) -> Generator[MagicMock, None, None]:
    """Put real categorization services and a fake OCR service on the app state."""
    originals = {name: getattr(app.state, name, None) for name in _STATE_NAMES}
    receipts = MagicMock()
    receipts.scan = AsyncMock()

    app.state.repository = service.repository
    app.state.service = service
    app.state.pipeline = CategorizationPipeline(service=service)
    app.state.receipts = receipts
    yield receipts

    for name, value in originals.items():
        if value is None:
            delattr(app.state, name)
        else:
            setattr(app.state, name, value)


def test_categorize_endpoint(installed: MagicMock) -> None:
    response = client.post("/api/ai/categorize", json={"description": "Amazon purchase", "amount": 19.99})

    assert response.status_code == 200
    data = response.json()
    assert data["category_name"] == "Shopping"
    assert data["source"] == "classifier"


def test_categorize_empty_request_falls_back(installed: MagicMock) -> None:
    response = client.post("/api/ai/categorize", json={})

    assert response.status_code == 200
    assert response.json()["category_name"] == "Other"
    assert response.json()["confidence"] == 0.1


def test_learn_endpoint(installed: MagicMock, service: CategorizerService) -> None:
    food = service.repository.find_active_by_name("Food & Dining")
    response = client.post(
        "/api/ai/learn",
        json={"description": "Joe's Coffee Roasters", "category_id": food.id},
    )

    assert response.status_code == 200
    followup = client.post("/api/ai/categorize", json={"description": "Joe's Coffee Roasters"})
    assert followup.json()["category_name"] == "Food & Dining"


def test_learn_unknown_category_is_404(installed: MagicMock) -> None:
    response = client.post("/api/ai/learn", json={"description": "Amazon", "category_id": 9999})
    assert response.status_code == 404


def test_train_and_clear_cache(installed: MagicMock, service: CategorizerService) -> None:
    service.categorize("pizza", None)

    assert client.post("/api/ai/clear-cache").status_code == 200
    assert service.cache_len == 0
    assert client.post("/api/ai/train").json()["status"] == "success"


def test_list_categories(installed: MagicMock) -> None:
    response = client.get("/api/categories")

    assert response.status_code == 200
    names = [node["name"] for node in response.json()["categories"]]
    assert "Other" in names
    assert len(names) == 10


def test_parse_receipt_categorizes_complete_receipts(installed: MagicMock) -> None:
    text = "AMAZON.COM\nUSB cable 9.99\nTotal: $9.99\n02/03/2024"
    response = client.post("/api/receipts/parse", json={"text": text})

    assert response.status_code == 200
    data = response.json()
    assert data["extraction"]["merchant_name"] == "Amazon.com"
    assert data["extraction"]["amount"] == "9.99"
    assert data["categorization"]["category_name"] == "Shopping"


def test_parse_receipt_without_amount_skips_categorization(installed: MagicMock) -> None:
    response = client.post("/api/receipts/parse", json={"text": ""})

    data = response.json()
    assert data["extraction"]["confidence"] == 0.3
    assert data["categorization"] is None


def test_scan_receipt(installed: MagicMock) -> None:
    installed.scan.return_value = ReceiptExtraction(
        raw_text="UBER\nTotal 23.10",
        merchant_name="Uber",
        amount="23.10",
        description="Purchase at Uber",
        confidence=0.8,
    )

    response = client.post("/api/receipts/scan", json={"image_path": "/tmp/receipt.png"})

    assert response.status_code == 200
    installed.scan.assert_awaited_once_with("/tmp/receipt.png")
    assert response.json()["categorization"]["category_name"] == "Transportation"


def test_spending_patterns_endpoint() -> None:
    payload = {
        "transactions": [
            {"amount": 12.5, "merchant_name": "Cafe", "transaction_date": "2024-03-04T08:15:00"},
            {"amount": 7.5, "merchant_name": "Cafe", "transaction_date": "2024-03-04T13:00:00",
             "category_name": "Food & Dining"},
        ]
    }
    response = client.post("/api/insights/patterns", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["day_of_week"] == {"Monday": 20.0}
    assert data["merchant_frequency"] == {"Cafe": 2}


def test_missing_services_return_500() -> None:
    bare = TestClient(create_app())
    response = bare.post("/api/ai/categorize", json={"description": "pizza"})
    assert response.status_code == 500
