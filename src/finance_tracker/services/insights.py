from collections import defaultdict
from typing import Any

from finance_tracker.domain.categories import FALLBACK_CATEGORY_NAME
from finance_tracker.models import TransactionRecord


def time_slot(hour: int) -> str:
    if 6 <= hour < 12:
        return "Morning"
    if 12 <= hour < 17:
        return "Afternoon"
    if 17 <= hour < 22:
        return "Evening"
    return "Night"


def analyze_spending_patterns(transactions: list[TransactionRecord]) -> dict[str, Any]:
    """
    Aggregate spend by weekday and time of day, count merchants, and collect
    per-category amount/date series.
    """
    day_of_week: dict[str, float] = defaultdict(float)
    time_of_day: dict[str, float] = defaultdict(float)
    merchant_frequency: dict[str, int] = defaultdict(int)
    category_trends: dict[str, list[dict[str, Any]]] = defaultdict(list)

    for transaction in transactions:
        when = transaction.transaction_date
        day_of_week[when.strftime("%A")] += transaction.amount
        time_of_day[time_slot(when.hour)] += transaction.amount

        if transaction.merchant_name:
            merchant_frequency[transaction.merchant_name] += 1

        category = transaction.category_name or FALLBACK_CATEGORY_NAME
        category_trends[category].append({
            "amount": transaction.amount,
            "date": when.isoformat(),
        })

    return {
        "day_of_week": dict(day_of_week),
        "time_of_day": dict(time_of_day),
        "merchant_frequency": dict(merchant_frequency),
        "category_trends": dict(category_trends),
    }
