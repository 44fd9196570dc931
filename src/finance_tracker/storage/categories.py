import json
import os
import threading
from typing import Any

from pydantic import ValidationError

from finance_tracker.logger import get_logger
from finance_tracker.models import Category

logger = get_logger(__name__)


class CategoryRepository:
    """
    Category directory backed by a JSON file, or kept in memory when
    ``data_path`` is ``None``.

    Categories are never deleted. Keyword lists only grow and stay
    deduplicated in insertion order.
    """

    def __init__(self, data_path: str | None = "categories.json"):
        self.data_path = data_path
        self._lock = threading.RLock()
        self._categories: dict[int, Category] = {}
        self._next_id = 1
        self.load()

    def load(self) -> None:
        if not self.data_path or not os.path.exists(self.data_path):
            return
        try:
            with open(self.data_path, "r", encoding="utf-8") as f:
                raw: list[dict[str, Any]] = json.load(f)
            if not isinstance(raw, list):
                raise TypeError(f"expected a list of categories, got {type(raw).__name__}")
            loaded = {}
            for item in raw:
                category = Category.model_validate(item)
                loaded[category.id] = category
        except (json.JSONDecodeError, ValidationError, TypeError) as exc:
            logger.warning("[CATEGORIES] Unreadable category file %s (%s); starting empty.", self.data_path, exc)
            return

        with self._lock:
            self._categories = loaded
            self._next_id = max(self._categories, default=0) + 1

    def save(self, categories: list[Category] | None = None) -> None:
        """Write ``categories`` (default: the current directory) to the data file."""
        if not self.data_path:
            return
        with self._lock:
            payload = [category.model_dump() for category in (categories or self._ordered())]
        with open(self.data_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)

    def _ordered(self) -> list[Category]:
        return sorted(self._categories.values(), key=lambda c: (c.sort_order, c.name))

    def list_all(self) -> list[Category]:
        with self._lock:
            return [c.model_copy(deep=True) for c in self._ordered()]

    def list_active(self) -> list[Category]:
        return [c for c in self.list_all() if c.is_active]

    def get(self, category_id: int) -> Category | None:
        with self._lock:
            category = self._categories.get(category_id)
            return category.model_copy(deep=True) if category else None

    def find_active_by_name(self, name: str) -> Category | None:
        with self._lock:
            for category in self._categories.values():
                if category.is_active and category.name == name:
                    return category.model_copy(deep=True)
        return None

    def get_or_create(self, name: str, **defaults: Any) -> tuple[Category, bool]:
        """Return the active category called ``name``, creating it from ``defaults`` if absent."""
        with self._lock:
            existing = self.find_active_by_name(name)
            if existing:
                return existing, False

            keywords = _dedupe(defaults.pop("keywords", None) or [])
            category = Category(id=self._next_id, name=name, keywords=keywords, **defaults)
            self.save([*self._ordered(), category])
            self._categories[category.id] = category
            self._next_id += 1
            return category.model_copy(deep=True), True

    def add_keywords(self, category_id: int, keywords: list[str]) -> Category | None:
        with self._lock:
            category = self._categories.get(category_id)
            if category is None:
                return None
            merged = _dedupe([*category.keywords, *keywords])
            if merged == category.keywords:
                return category.model_copy(deep=True)

            # Stored keywords change only after the write succeeds.
            updated = category.model_copy(update={"keywords": merged}, deep=True)
            self.save([updated if c.id == category_id else c for c in self._ordered()])
            self._categories[category_id] = updated
            return updated.model_copy(deep=True)

    def children(self, category_id: int) -> list[Category]:
        return [c for c in self.list_active() if c.parent_id == category_id]

    def parent(self, category_id: int) -> Category | None:
        category = self.get(category_id)
        if category is None or category.parent_id is None:
            return None
        return self.get(category.parent_id)


def _dedupe(keywords: list[str]) -> list[str]:
    merged: list[str] = []
    seen = set()
    for keyword in keywords:
        if keyword and keyword not in seen:
            merged.append(keyword)
            seen.add(keyword)
    return merged
