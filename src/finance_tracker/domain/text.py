import re

from nltk.stem import PorterStemmer

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")

# Porter rules are not idempotent on every word ("agreed" -> "agre" -> "agr"),
# so a token is stemmed until it stops changing.
_MAX_STEM_ROUNDS = 10

_stemmer = PorterStemmer()


def stem(token: str) -> str:
    current = token
    for _ in range(_MAX_STEM_ROUNDS):
        reduced = _stemmer.stem(current)
        if reduced == current:
            break
        current = reduced
    return current


def normalize_text(text: str | None) -> str:
    """
    Lowercase, strip punctuation, and stem ``text`` into a space-joined token string.

    Always total: ``None`` or blank input gives ``""``, and the output is a
    fixed point (``normalize_text(normalize_text(x)) == normalize_text(x)``).
    """
    if not text:
        return ""

    cleaned = _NON_WORD.sub(" ", text.lower())
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    if not cleaned:
        return ""

    return " ".join(stem(token) for token in cleaned.split(" "))


def tokenize(text: str | None) -> list[str]:
    if not text:
        return []
    return text.split()
