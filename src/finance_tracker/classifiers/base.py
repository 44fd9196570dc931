from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping


class Classifier(ABC):
    @abstractmethod
    def train(self, keywords_by_label: Mapping[str, Iterable[str]]) -> None:
        """Rebuild the model from scratch out of per-label keyword sets."""
        pass

    @abstractmethod
    def classify(self, text: str) -> list[tuple[str, float]]:
        """Rank labels for already-normalized text, best first."""
        pass

    @property
    @abstractmethod
    def is_trained(self) -> bool:
        pass
