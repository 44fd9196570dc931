import pytest

from finance_tracker.classifiers.bayes import NaiveBayesClassifier, build_documents
from finance_tracker.domain.text import normalize_text


@pytest.fixture
def classifier() -> NaiveBayesClassifier:
    clf = NaiveBayesClassifier()
    clf.train({
        "Food": ["pizza", "burger", "grocery"],
        "Transport": ["uber", "taxi", "parking"],
        "Empty": [],
    })
    return clf


def test_build_documents_pads_each_keyword() -> None:
    documents, labels = build_documents({"Food": ["pizza", ""], "Other": []})

    assert documents == [
        normalize_text("pizza"),
        normalize_text("pizza store"),
        normalize_text("pizza payment"),
    ]
    assert labels == ["Food", "Food", "Food"]


def test_classify_ranks_best_label_first(classifier: NaiveBayesClassifier) -> None:
    ranked = classifier.classify(normalize_text("Uber ride downtown"))

    assert ranked[0][0] == "Transport"
    scores = [score for _, score in ranked]
    assert scores == sorted(scores, reverse=True)
    assert sum(scores) == pytest.approx(1.0)


def test_labels_without_keywords_are_not_classes(classifier: NaiveBayesClassifier) -> None:
    assert classifier.labels == ["Food", "Transport"]


def test_unknown_or_empty_text_gives_no_classifications(classifier: NaiveBayesClassifier) -> None:
    assert classifier.classify(normalize_text("zzqx blorf")) == []
    assert classifier.classify("") == []


def test_untrained_classifier_returns_nothing() -> None:
    clf = NaiveBayesClassifier()
    assert not clf.is_trained
    assert clf.classify("pizza") == []


def test_training_without_documents_leaves_model_untrained() -> None:
    clf = NaiveBayesClassifier()
    clf.train({"Other": []})
    assert not clf.is_trained


def test_retrain_replaces_previous_model() -> None:
    clf = NaiveBayesClassifier()
    clf.train({"Fruit": ["apple"], "Veg": ["carrot"]})
    assert clf.classify(normalize_text("apple"))[0][0] == "Fruit"

    clf.train({"Drinks": ["coffee"], "Snacks": ["chips"]})
    # Old vocabulary is gone entirely.
    assert clf.classify(normalize_text("apple")) == []
    assert clf.classify(normalize_text("coffee"))[0][0] == "Drinks"


def test_single_label_model() -> None:
    clf = NaiveBayesClassifier()
    clf.train({"Only": ["coffee"]})
    assert clf.classify(normalize_text("coffee")) == [("Only", 1.0)]


def test_clear_drops_model(classifier: NaiveBayesClassifier) -> None:
    classifier.clear()
    assert not classifier.is_trained
    assert classifier.classify("pizza") == []
