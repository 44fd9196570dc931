"""Rule-based extraction of merchant, total, date and line items from OCR receipt text.

Every field is extracted by an ordered tuple of named rules. Rules are tried in
order and the first one producing an acceptable value wins, so each rule can
be tested on its own and the cascade order is visible in one place.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation

from finance_tracker.logger import get_logger
from finance_tracker.models import ReceiptExtraction, ReceiptItem

logger = get_logger(__name__)

MAX_TOTAL = Decimal("10000")
MAX_ITEM_PRICE = Decimal("1000")
MAX_ITEMS = 20
MERCHANT_SCAN_LINES = 5
MERCHANT_MAX_LENGTH = 50
MERCHANT_MAX_WORDS = 4

FOUND_CONFIDENCE = 0.8
PARTIAL_CONFIDENCE = 0.3
ERROR_CONFIDENCE = 0.0

BOILERPLATE_WORDS = (
    "receipt", "customer", "copy", "thank", "you", "welcome", "store",
    "location", "address", "phone", "tel", "fax", "email", "www",
)
BUSINESS_WORDS = ("store", "mart", "shop", "restaurant", "cafe", "inc", "llc", "corp", "co")

_NUMBER = r"(\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?)"
_LABEL_TAIL = r"[\s:]*\$?\s*" + _NUMBER


@dataclass(frozen=True)
class PatternRule:
    name: str
    pattern: re.Pattern[str]

    def search(self, text: str) -> str | None:
        match = self.pattern.search(text)
        return match.group(1) if match else None


@dataclass(frozen=True)
class DateRule:
    name: str
    pattern: re.Pattern[str]
    build: Callable[[re.Match[str]], date]


@dataclass(frozen=True)
class LineRule:
    name: str
    accepts: Callable[[str], bool]


AMOUNT_RULES: tuple[PatternRule, ...] = (
    PatternRule("grand_total", re.compile(r"\bgrand\s+total\b" + _LABEL_TAIL, re.IGNORECASE)),
    # \b keeps "subtotal" out; the lookbehind handles "sub total".
    PatternRule("total", re.compile(r"(?<!sub )(?<!sub-)\btotal\b" + _LABEL_TAIL, re.IGNORECASE)),
    PatternRule("amount", re.compile(r"\b(?:amount|sum)\b(?:\s+due)?" + _LABEL_TAIL, re.IGNORECASE)),
    PatternRule("balance_due", re.compile(r"\b(?:balance|due|pay)\b" + _LABEL_TAIL, re.IGNORECASE)),
)

CURRENCY_AMOUNT = re.compile(r"(?<![\d.])\$?(\d{1,4}\.\d{2})(?!\d)")


def _to_decimal(raw: str) -> Decimal | None:
    try:
        return Decimal(raw.replace(",", ""))
    except InvalidOperation:
        return None


def _format_money(value: Decimal) -> str:
    return str(value.quantize(Decimal("0.01")))


def extract_total_amount(text: str) -> str | None:
    """
    Return the receipt total as a two-decimal string.

    Falls back to the largest currency-looking value when no labeled total is
    present. That fallback can pick an item price on receipts without a total
    line; it is kept as a best guess rather than returning nothing.
    """
    if not text:
        return None

    for rule in AMOUNT_RULES:
        raw = rule.search(text)
        if raw is None:
            continue
        value = _to_decimal(raw)
        if value is not None and Decimal("0") < value < MAX_TOTAL:
            logger.debug("[RECEIPT] Amount matched by rule '%s': %s", rule.name, value)
            return _format_money(value)

    candidates = [_to_decimal(raw) for raw in CURRENCY_AMOUNT.findall(text)]
    plausible = [v for v in candidates if v is not None and Decimal("0") < v < MAX_TOTAL]
    if plausible:
        return _format_money(max(plausible))
    return None


_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}


# Two-digit years below this pivot are 20YY, the rest 19YY.
TWO_DIGIT_YEAR_PIVOT = 50


def _year(raw: str) -> int:
    if len(raw) == 2:
        year = int(raw)
        return 2000 + year if year < TWO_DIGIT_YEAR_PIVOT else 1900 + year
    if len(raw) == 4:
        return int(raw)
    raise ValueError(f"unsupported year '{raw}'")


def _month_day_year(match: re.Match[str]) -> date:
    return date(_year(match.group(3)), int(match.group(1)), int(match.group(2)))


def _year_month_day(match: re.Match[str]) -> date:
    return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))


def _month_name(match: re.Match[str]) -> date:
    month = _MONTHS[match.group(1)[:3].lower()]
    return date(_year(match.group(3)), month, int(match.group(2)))


DATE_RULES: tuple[DateRule, ...] = (
    DateRule("slash", re.compile(r"(?<!\d)(\d{1,2})/(\d{1,2})/(\d{2,4})(?!\d)"), _month_day_year),
    DateRule("dash", re.compile(r"(?<!\d)(\d{1,2})-(\d{1,2})-(\d{2,4})(?!\d)"), _month_day_year),
    DateRule("iso", re.compile(r"(?<!\d)(\d{4})-(\d{1,2})-(\d{1,2})(?!\d)"), _year_month_day),
    DateRule(
        "month_name",
        re.compile(
            r"\b(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?\s+(\d{1,2}),?\s+(\d{2,4})\b",
            re.IGNORECASE,
        ),
        _month_name,
    ),
)


def extract_date(text: str) -> str | None:
    if not text:
        return None

    for rule in DATE_RULES:
        for match in rule.pattern.finditer(text):
            try:
                parsed = rule.build(match)
            except (ValueError, KeyError):
                continue
            logger.debug("[RECEIPT] Date matched by rule '%s': %s", rule.name, parsed)
            return parsed.isoformat()
    return None


_NO_LETTERS = re.compile(r"^[\W\d_]+$")


def _boilerplate_ratio(line: str) -> float:
    words = line.lower().split()
    if not words:
        return 1.0
    hits = sum(1 for word in words if any(skip in word for skip in BOILERPLATE_WORDS))
    return hits / len(words)


def _looks_like_business(line: str) -> bool:
    lowered = line.lower()
    has_business_word = any(word in lowered for word in BUSINESS_WORDS)
    short_enough = len(lowered.split()) <= MERCHANT_MAX_WORDS
    return (has_business_word or short_enough) and len(line) <= MERCHANT_MAX_LENGTH


MERCHANT_RULES: tuple[LineRule, ...] = (
    LineRule("has_letters", lambda line: not _NO_LETTERS.match(line)),
    LineRule("min_length", lambda line: len(line) >= 3),
    LineRule("not_boilerplate", lambda line: _boilerplate_ratio(line) <= 0.5),
    LineRule("business_shape", _looks_like_business),
)


def is_merchant_name(line: str) -> bool:
    return all(rule.accepts(line) for rule in MERCHANT_RULES)


def clean_merchant_name(name: str) -> str:
    collapsed = re.sub(r"\s+", " ", re.sub(r"[#*]+", "", name)).strip().lower()
    return " ".join(word[:1].upper() + word[1:] for word in collapsed.split(" ") if word)


def extract_merchant_name(lines: list[str]) -> str | None:
    for line in lines[:MERCHANT_SCAN_LINES]:
        if is_merchant_name(line):
            cleaned = clean_merchant_name(line)
            if cleaned:
                return cleaned
    return None


ITEM_PATTERN = re.compile(r"^([A-Za-z][^$\d]*?)\s*\$?(\d+(?:\.\d+)?)(?:\s|$)")
TOTAL_LABEL = re.compile(r"\b(?:sub\s*-?\s*total|total|tax|amount|balance|due|change)\b", re.IGNORECASE)


def is_total_label(name: str) -> bool:
    return bool(TOTAL_LABEL.search(name))


def extract_items(lines: list[str]) -> list[ReceiptItem]:
    items: list[ReceiptItem] = []
    for line in lines:
        match = ITEM_PATTERN.match(line)
        if not match:
            continue
        name = match.group(1).strip()
        if len(name) <= 2 or is_total_label(name):
            continue
        price = _to_decimal(match.group(2))
        if price is None or not (Decimal("0") < price < MAX_ITEM_PRICE):
            continue
        items.append(ReceiptItem(name=name, price=_format_money(price)))
        if len(items) >= MAX_ITEMS:
            break
    return items


def split_lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def describe(merchant_name: str | None) -> str:
    if merchant_name:
        return f"Purchase at {merchant_name}"
    return "Receipt purchase"


def error_extraction(message: str, raw_text: str = "") -> ReceiptExtraction:
    return ReceiptExtraction(raw_text=raw_text, confidence=ERROR_CONFIDENCE, error=message)


def parse_receipt_text(text: str | None) -> ReceiptExtraction:
    """Parse OCR output into structured fields. Never raises."""
    raw_text = text or ""
    try:
        lines = split_lines(raw_text)
        merchant_name = extract_merchant_name(lines)
        amount = extract_total_amount(raw_text)
        return ReceiptExtraction(
            raw_text=raw_text,
            merchant_name=merchant_name,
            amount=amount,
            date=extract_date(raw_text),
            description=describe(merchant_name) if lines else None,
            items=extract_items(lines),
            confidence=FOUND_CONFIDENCE if merchant_name and amount else PARTIAL_CONFIDENCE,
        )
    except Exception as exc:
        logger.error("[RECEIPT] Failed to parse receipt text: %s", exc)
        return error_extraction(str(exc), raw_text)
