from typing import Any

from finance_tracker.models import Category

FALLBACK_CATEGORY_NAME = "Other"
FALLBACK_CONFIDENCE = 0.1
FALLBACK_ICON = "more-horizontal"
FALLBACK_COLOR = "#6b7280"

DEFAULT_CATEGORIES: tuple[dict[str, Any], ...] = (
    {
        "name": "Food & Dining",
        "keywords": [
            "restaurant", "food", "dining", "cafe", "pizza", "burger", "grocery",
            "supermarket", "starbucks", "mcdonalds", "subway", "chipotle", "dominos",
        ],
        "icon": "utensils",
        "color": "#f59e0b",
    },
    {
        "name": "Transportation",
        "keywords": [
            "uber", "lyft", "taxi", "gas", "fuel", "parking", "metro", "bus",
            "train", "airline", "flight", "car", "auto",
        ],
        "icon": "car",
        "color": "#3b82f6",
    },
    {
        "name": "Shopping",
        "keywords": [
            "amazon", "target", "walmart", "store", "mall", "shopping", "clothes",
            "clothing", "shoes", "electronics", "best buy",
        ],
        "icon": "shopping-bag",
        "color": "#ec4899",
    },
    {
        "name": "Entertainment",
        "keywords": [
            "movie", "cinema", "netflix", "spotify", "game", "concert", "theater",
            "museum", "park", "entertainment",
        ],
        "icon": "film",
        "color": "#8b5cf6",
    },
    {
        "name": "Health & Fitness",
        "keywords": [
            "doctor", "hospital", "pharmacy", "gym", "fitness", "yoga", "medical",
            "health", "dentist", "clinic",
        ],
        "icon": "heart",
        "color": "#10b981",
    },
    {
        "name": "Bills & Utilities",
        "keywords": [
            "electric", "electricity", "water", "gas", "internet", "phone", "utility",
            "bill", "rent", "mortgage", "insurance",
        ],
        "icon": "receipt",
        "color": "#f97316",
    },
    {
        "name": "Personal Care",
        "keywords": [
            "salon", "haircut", "spa", "beauty", "cosmetics", "personal", "hygiene", "barber",
        ],
        "icon": "user",
        "color": "#06b6d4",
    },
    {
        "name": "Education",
        "keywords": [
            "school", "university", "course", "book", "education", "tuition", "learning", "training",
        ],
        "icon": "graduation-cap",
        "color": "#84cc16",
    },
    {
        "name": "Travel",
        "keywords": [
            "hotel", "airbnb", "booking", "travel", "vacation", "trip", "resort", "flight", "airline",
        ],
        "icon": "plane",
        "color": "#f43f5e",
    },
    {
        "name": FALLBACK_CATEGORY_NAME,
        "keywords": [],
        "icon": FALLBACK_ICON,
        "color": FALLBACK_COLOR,
    },
)


def build_category_tree(categories: list[Category]) -> list[dict[str, Any]]:
    """
    Nest categories under their parents by ``parent_id``.

    Categories whose parent is missing from ``categories``, and categories
    that sit on a parent cycle, are treated as roots.
    """
    parents = {category.id: category.parent_id for category in categories}
    nodes: dict[int, dict[str, Any]] = {
        category.id: {**category.model_dump(), "subcategories": []} for category in categories
    }
    roots: list[dict[str, Any]] = []
    for category in categories:
        node = nodes[category.id]
        parent_id = category.parent_id
        if parent_id in parents and not _in_parent_cycle(category.id, parents):
            nodes[parent_id]["subcategories"].append(node)
        else:
            roots.append(node)
    return roots


def _in_parent_cycle(category_id: int, parents: dict[int, int | None]) -> bool:
    seen = set()
    current = parents.get(category_id)
    while current is not None and current in parents and current not in seen:
        if current == category_id:
            return True
        seen.add(current)
        current = parents[current]
    return False
