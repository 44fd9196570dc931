from collections.abc import Iterable, Mapping

from sklearn.feature_extraction.text import CountVectorizer
from sklearn.naive_bayes import MultinomialNB
from sklearn.pipeline import Pipeline

from finance_tracker.domain.text import normalize_text
from finance_tracker.logger import get_logger

from .base import Classifier

logger = get_logger(__name__)

# Each keyword is padded into a few short phrases so real descriptions that
# merely contain the keyword still share tokens with the training set.
KEYWORD_TEMPLATES = ("{keyword}", "{keyword} store", "{keyword} payment")


def _build_pipeline(alpha: float) -> Pipeline:
    return Pipeline([
        ('counts', CountVectorizer(analyzer=str.split)),
        ('clf', MultinomialNB(alpha=alpha)),
    ])


def build_documents(keywords_by_label: Mapping[str, Iterable[str]]) -> tuple[list[str], list[str]]:
    documents: list[str] = []
    labels: list[str] = []
    for label, keywords in keywords_by_label.items():
        for keyword in keywords:
            if not keyword or not keyword.strip():
                continue
            for template in KEYWORD_TEMPLATES:
                document = normalize_text(template.format(keyword=keyword.strip()))
                if document:
                    documents.append(document)
                    labels.append(label)
    return documents, labels


class NaiveBayesClassifier(Classifier):
    """
    Multinomial naive Bayes over stemmed bag-of-words keyword documents.

    ``train`` builds a fresh pipeline and publishes it with one attribute
    assignment, so a concurrent ``classify`` sees either the old or the new
    model, never a half-fitted one.
    """

    def __init__(self, alpha: float = 1.0):
        self.alpha = alpha
        self._model: Pipeline | None = None

    @property
    def is_trained(self) -> bool:
        return self._model is not None

    @property
    def labels(self) -> list[str]:
        model = self._model
        if model is None:
            return []
        return [str(label) for label in model.classes_]

    def train(self, keywords_by_label: Mapping[str, Iterable[str]]) -> None:
        documents, labels = build_documents(keywords_by_label)
        if not documents:
            logger.warning("[TRAIN] No keyword documents available; classifier left untrained.")
            self._model = None
            return

        pipeline = _build_pipeline(self.alpha)
        pipeline.fit(documents, labels)
        self._model = pipeline
        logger.info(
            "[TRAIN] Naive Bayes trained on %d documents across %d categories.",
            len(documents),
            len(set(labels)),
        )

    def classify(self, text: str) -> list[tuple[str, float]]:
        model = self._model
        if model is None or not text or not text.strip():
            return []

        counts = model.named_steps['counts'].transform([text])
        if counts.nnz == 0:
            # Nothing in the vocabulary; the posterior would just be the prior.
            return []

        probabilities = model.named_steps['clf'].predict_proba(counts)[0]
        ranked = sorted(
            zip(model.classes_, probabilities),
            key=lambda pair: pair[1],
            reverse=True,
        )
        return [(str(label), float(score)) for label, score in ranked]

    def clear(self) -> None:
        self._model = None
