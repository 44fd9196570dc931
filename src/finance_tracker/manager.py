import threading
from collections import OrderedDict

from finance_tracker.classifiers.base import Classifier
from finance_tracker.classifiers.bayes import NaiveBayesClassifier
from finance_tracker.domain.categories import (
    DEFAULT_CATEGORIES,
    FALLBACK_CATEGORY_NAME,
    FALLBACK_COLOR,
    FALLBACK_CONFIDENCE,
    FALLBACK_ICON,
)
from finance_tracker.domain.text import normalize_text, tokenize
from finance_tracker.logger import get_logger
from finance_tracker.models import CategorizationResult
from finance_tracker.storage.categories import CategoryRepository

logger = get_logger(__name__)

MIN_LEARNED_TOKEN_LENGTH = 3
MAX_LEARNED_TOKENS = 3


class CategorizerService:
    """
    Owns the classifier and the result cache for one application instance.

    Results are cached under the first ``cache_prefix`` characters of the
    normalized text, so two texts that only differ after that prefix share a
    result. With ``clear_cache_on_retrain`` disabled the cache survives a
    retrain and may serve pre-correction answers until ``clear_cache`` runs.
    """

    def __init__(
        self,
        repository: CategoryRepository,
        classifier: Classifier | None = None,
        cache_size: int = 1000,
        cache_prefix: int = 50,
        clear_cache_on_retrain: bool = True,
    ):
        self.repository = repository
        self.classifier = classifier or NaiveBayesClassifier()
        self.cache_size = cache_size
        self.cache_prefix = cache_prefix
        self.clear_cache_on_retrain = clear_cache_on_retrain

        self._cache: OrderedDict[str, CategorizationResult] = OrderedDict()
        self._cache_lock = threading.Lock()
        self._train_lock = threading.Lock()
        # Bumped on every training run; results classified under an older
        # generation are not cached.
        self._generation = 0

    def initialize_default_categories(self) -> int:
        """Create any missing default category by name. Returns how many were created."""
        created = 0
        for index, data in enumerate(DEFAULT_CATEGORIES):
            _, was_created = self.repository.get_or_create(
                data["name"],
                keywords=list(data["keywords"]),
                icon=data["icon"],
                color=data["color"],
                is_default=True,
                sort_order=index,
            )
            if was_created:
                created += 1
        logger.info("[CATEGORIES] Default categories initialized (%d created).", created)
        return created

    def train(self) -> None:
        with self._train_lock:
            categories = self.repository.list_active()
            self.classifier.train({c.name: c.keywords for c in categories})
            with self._cache_lock:
                self._generation += 1
                if self.clear_cache_on_retrain:
                    self._cache.clear()

    def categorize(
        self,
        description: str | None,
        merchant_name: str | None = None,
        amount: float | str | None = None,
    ) -> CategorizationResult:
        # amount is accepted for callers but carries no weight yet.
        try:
            return self._categorize(description, merchant_name)
        except Exception as exc:
            logger.error("[CATEGORIZE] Categorization failed: %s", exc)
            return self.fallback_result()

    def _categorize(self, description: str | None, merchant_name: str | None) -> CategorizationResult:
        if not self.classifier.is_trained and self._generation == 0:
            self.train()

        text = normalize_text(f"{description or ''} {merchant_name or ''}".strip())
        if not text:
            return self.fallback_result()

        cache_key = text[:self.cache_prefix]
        cached = self._cache_get(cache_key)
        if cached is not None:
            logger.debug("[CATEGORIZE] Cache hit for '%s'.", cache_key)
            return cached

        with self._cache_lock:
            generation = self._generation
        result = self._classify(text)
        self._cache_put(cache_key, result, generation)
        return result

    def _classify(self, text: str) -> CategorizationResult:
        classifications = self.classifier.classify(text)
        if not classifications:
            logger.debug("[CATEGORIZE] No classification for '%s'.", text[:50])
            return self.fallback_result()

        label, score = classifications[0]
        category = self.repository.find_active_by_name(label)
        if category is None:
            logger.warning("[CATEGORIZE] Classifier label '%s' has no active category.", label)
            return self.fallback_result()

        logger.debug("[CATEGORIZE] '%s' -> '%s' (%.2f)", text[:50], label, score)
        return CategorizationResult(
            category_id=category.id,
            category_name=category.name,
            confidence=round(score, 2),
            icon=category.icon,
            color=category.color,
            source="classifier",
        )

    def fallback_result(self) -> CategorizationResult:
        category_id = None
        try:
            fallback = self.repository.find_active_by_name(FALLBACK_CATEGORY_NAME)
            if fallback is not None:
                category_id = fallback.id
        except Exception as exc:
            logger.error("[CATEGORIZE] Could not resolve fallback category: %s", exc)

        return CategorizationResult(
            category_id=category_id,
            category_name=FALLBACK_CATEGORY_NAME,
            confidence=FALLBACK_CONFIDENCE,
            icon=FALLBACK_ICON,
            color=FALLBACK_COLOR,
            source="fallback",
        )

    def update_category_keywords(self, category_id: int, keywords: list[str]) -> bool:
        try:
            updated = self.repository.add_keywords(category_id, keywords)
            if updated is None:
                return False
            self.train()
            return True
        except Exception as exc:
            logger.error("[LEARN] Could not update keywords for category %s: %s", category_id, exc)
            return False

    def learn_from_correction(
        self,
        description: str | None,
        merchant_name: str | None,
        category_id: int,
    ) -> bool:
        """
        Add up to three tokens of the corrected text to the chosen category's
        keywords and retrain. Past results are not recategorized.
        """
        try:
            category = self.repository.get(category_id)
        except Exception as exc:
            logger.error("[LEARN] Category lookup failed for %s: %s", category_id, exc)
            return False
        if category is None:
            logger.info("[LEARN] Unknown category id %s; correction ignored.", category_id)
            return False

        text = normalize_text(f"{description or ''} {merchant_name or ''}")
        tokens = [t for t in tokenize(text) if len(t) >= MIN_LEARNED_TOKEN_LENGTH]
        if not tokens:
            return True

        learned = tokens[:MAX_LEARNED_TOKENS]
        logger.info("[LEARN] Category '%s' learned keywords %s.", category.name, learned)
        return self.update_category_keywords(category_id, learned)

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    @property
    def cache_len(self) -> int:
        with self._cache_lock:
            return len(self._cache)

    def _cache_get(self, key: str) -> CategorizationResult | None:
        with self._cache_lock:
            result = self._cache.get(key)
            if result is not None:
                self._cache.move_to_end(key)
            return result

    def _cache_put(self, key: str, result: CategorizationResult, generation: int) -> None:
        with self._cache_lock:
            if generation != self._generation:
                return
            self._cache[key] = result
            self._cache.move_to_end(key)
            while len(self._cache) > self.cache_size:
                self._cache.popitem(last=False)
