from datetime import datetime

import pytest

from finance_tracker.models import TransactionRecord
from finance_tracker.services.insights import analyze_spending_patterns, time_slot


@pytest.mark.parametrize(
    ("hour", "slot"),
    [(6, "Morning"), (11, "Morning"), (12, "Afternoon"), (17, "Evening"), (22, "Night"), (3, "Night")],
)
def test_time_slot(hour: int, slot: str) -> None:
    assert time_slot(hour) == slot


def test_analyze_spending_patterns() -> None:
    transactions = [
        TransactionRecord(amount=10.0, merchant_name="Uber", transaction_date=datetime(2024, 3, 1, 8, 0),
                          category_name="Transportation"),
        TransactionRecord(amount=5.0, merchant_name="Uber", transaction_date=datetime(2024, 3, 1, 19, 0),
                          category_name="Transportation"),
        TransactionRecord(amount=40.0, transaction_date=datetime(2024, 3, 2, 23, 30)),
    ]

    patterns = analyze_spending_patterns(transactions)

    assert patterns["day_of_week"] == {"Friday": 15.0, "Saturday": 40.0}
    assert patterns["time_of_day"] == {"Morning": 10.0, "Evening": 5.0, "Night": 40.0}
    assert patterns["merchant_frequency"] == {"Uber": 2}
    assert [t["amount"] for t in patterns["category_trends"]["Transportation"]] == [10.0, 5.0]
    assert patterns["category_trends"]["Other"][0]["date"] == "2024-03-02T23:30:00"


def test_no_transactions() -> None:
    patterns = analyze_spending_patterns([])
    assert patterns == {
        "day_of_week": {},
        "time_of_day": {},
        "merchant_frequency": {},
        "category_trends": {},
    }
