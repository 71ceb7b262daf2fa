from __future__ import annotations

import re

from propmatch.core.amenities import MAX_PROMPT_AMENITIES, extract_prompt_amenities
from propmatch.core.models import PreferredArea, UserIntent
from propmatch.intent.areas import AREA_COORDINATES, CITY_LEVEL_KEYS


KEYWORD_VOCAB: tuple[str, ...] = (
    "family",
    "quiet",
    "luxury",
    "investment",
    "beachfront",
    "sea view",
    "golf",
    "nature",
    "urban",
    "modern",
)

IMPLIED_AMENITIES: dict[str, tuple[str, ...]] = {
    "family friendly": ("kids_area", "school_nearby", "park_nearby"),
    "family-friendly": ("kids_area", "school_nearby", "park_nearby"),
}

MIN_BUDGET_AED = 10_000
AROUND_TOLERANCE = 0.10

_AMOUNT = r"(\d[\d,]*(?:\.\d+)?)\s*(million|mn|m|thousand|k)?\b"
_AED = r"\b(?:aed|dhs?|dirhams?)"
_RANGE_SEP = r"\s*(?:-|–|to)\s*"

_BUDGET_RANGE_PATTERNS = (
    re.compile(rf"\bbetween\s+(?:{_AED}\s*)?{_AMOUNT}\s+and\s+(?:{_AED}\s*)?{_AMOUNT}"),
    re.compile(rf"(?:{_AED}\s*)?{_AMOUNT}{_RANGE_SEP}(?:{_AED}\s*)?{_AMOUNT}"),
)
_BUDGET_AROUND = re.compile(rf"\b(?:around|approximately|approx\.?|about|roughly)\s+(?:{_AED}\s*)?{_AMOUNT}")
_BUDGET_MAX = re.compile(
    rf"\b(?:under|below|max(?:imum)?|up\s+to|less\s+than|within|budget\s+of)\s+(?:{_AED}\s*)?{_AMOUNT}"
)
_BUDGET_MIN = re.compile(
    rf"\b(?:at\s+least|from|min(?:imum)?|over|above|more\s+than)\s+(?:{_AED}\s*)?{_AMOUNT}"
)
_BUDGET_SINGLE = (
    re.compile(rf"{_AED}\s*{_AMOUNT}"),
    re.compile(rf"{_AMOUNT}\s*{_AED}\b"),
)

_SQM = r"\s*(?:sqm|sq\.?\s*m(?:eters?|etres?)?|m2|m²|square\s+met(?:er|re)s?)\b"
_SIZE_RANGE = re.compile(rf"(\d+(?:\.\d+)?){_RANGE_SEP}(\d+(?:\.\d+)?){_SQM}")
_SIZE_SINGLE = re.compile(
    rf"(?:\b(at\s+least|min(?:imum)?|over|above|more\s+than|under|below|max(?:imum)?|up\s+to|less\s+than)\s+)?"
    rf"(\d+(?:\.\d+)?){_SQM}"
)
_SIZE_MAX_WORDS = ("under", "below", "max", "up", "less")

_MONTH_NAMES = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}
_ISO_MONTH = re.compile(r"\b(20\d{2})-(0[1-9]|1[0-2])\b")
_QUARTER = re.compile(r"\bq([1-4])\s*(20\d{2})\b")
_SEASON = re.compile(r"\b(early|mid|late|end\s+of)[\s-]+(20\d{2})\b")
_NAMED_MONTH = re.compile(
    r"\b(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?\s+(20\d{2})\b"
)
_SEASON_MONTH = {"early": 1, "mid": 6, "late": 10, "end of": 12}

_INVESTMENT = re.compile(r"\b(roi|rental\s+yields?|yields?|investment|invest|rental\s+income)\b")


def parse_intent_fallback(text: str) -> UserIntent:
    """
    Keyword/regex extraction used when no language model is available.

    Unrecognised text yields a neutral intent; this function never raises on
    user input.
    """
    raw_text = str(text or "").strip()
    lowered = " ".join(raw_text.lower().split())
    if not lowered:
        return UserIntent.neutral(raw_text)

    budget_min, budget_max = extract_budget(lowered)
    size_min, size_max = extract_size(lowered)
    return UserIntent(
        raw_text=raw_text,
        budget_min=budget_min,
        budget_max=budget_max,
        size_min=size_min,
        size_max=size_max,
        preferred_areas=extract_areas(lowered),
        preferred_handover_month=extract_handover_month(lowered),
        keywords=extract_keywords(lowered),
        amenities_requested=extract_amenities(lowered),
        investment_focused=bool(_INVESTMENT.search(lowered)),
    )


def extract_budget(text: str) -> tuple[float | None, float | None]:
    for pattern in _BUDGET_RANGE_PATTERNS:
        for match in pattern.finditer(text):
            low_suffix = match.group(2) or match.group(4)
            # "2-3M": the upper figure's suffix applies to both.
            low = _parse_amount(match.group(1), low_suffix)
            high = _parse_amount(match.group(3), match.group(4))
            if _is_budget(low) and _is_budget(high):
                return min(low, high), max(low, high)

    match = _BUDGET_AROUND.search(text)
    if match:
        value = _parse_amount(match.group(1), match.group(2))
        if _is_budget(value):
            return value * (1 - AROUND_TOLERANCE), value * (1 + AROUND_TOLERANCE)

    budget_min: float | None = None
    budget_max: float | None = None
    for match in _BUDGET_MAX.finditer(text):
        value = _parse_amount(match.group(1), match.group(2))
        if _is_budget(value):
            budget_max = value
            break
    for match in _BUDGET_MIN.finditer(text):
        value = _parse_amount(match.group(1), match.group(2))
        if _is_budget(value):
            budget_min = value
            break
    if budget_min is not None or budget_max is not None:
        return budget_min, budget_max

    # A lone figure is a ceiling, not a floor.
    for pattern in _BUDGET_SINGLE:
        match = pattern.search(text)
        if match:
            value = _parse_amount(match.group(1), match.group(2))
            if _is_budget(value):
                return None, value
    return None, None


def extract_size(text: str) -> tuple[float | None, float | None]:
    match = _SIZE_RANGE.search(text)
    if match:
        low, high = float(match.group(1)), float(match.group(2))
        return min(low, high), max(low, high)

    match = _SIZE_SINGLE.search(text)
    if not match:
        return None, None
    value = float(match.group(2))
    qualifier = match.group(1) or ""
    if qualifier.startswith(_SIZE_MAX_WORDS):
        return None, value
    return value, None


def extract_handover_month(text: str) -> str | None:
    match = _ISO_MONTH.search(text)
    if match:
        return f"{match.group(1)}-{match.group(2)}"

    match = _QUARTER.search(text)
    if match:
        month = (int(match.group(1)) - 1) * 3 + 1
        return f"{match.group(2)}-{month:02d}"

    match = _SEASON.search(text)
    if match:
        season = " ".join(match.group(1).split())
        return f"{match.group(2)}-{_SEASON_MONTH[season]:02d}"

    match = _NAMED_MONTH.search(text)
    if match:
        return f"{match.group(2)}-{_MONTH_NAMES[match.group(1)]:02d}"
    return None


def extract_areas(text: str) -> list[PreferredArea]:
    """
    Longest-match area lookup, in order of first mention.

    A city-level hit is dropped when a neighbourhood is also named.
    """
    taken: list[tuple[int, int]] = []
    hits: list[tuple[int, str]] = []
    for key in sorted(AREA_COORDINATES, key=len, reverse=True):
        for match in re.finditer(rf"\b{re.escape(key)}\b", text):
            start, end = match.span()
            if any(start < t_end and end > t_start for t_start, t_end in taken):
                continue
            taken.append((start, end))
            hits.append((start, key))

    hits.sort()
    has_neighbourhood = any(key not in CITY_LEVEL_KEYS for _, key in hits)
    areas: list[PreferredArea] = []
    seen: set[str] = set()
    for _, key in hits:
        if has_neighbourhood and key in CITY_LEVEL_KEYS:
            continue
        area = AREA_COORDINATES[key]
        if area.name in seen:
            continue
        seen.add(area.name)
        areas.append(area)
    return areas


def extract_keywords(text: str) -> list[str]:
    """Vocabulary keywords in order of first mention."""
    positions: list[tuple[int, str]] = []
    for keyword in KEYWORD_VOCAB:
        match = re.search(rf"\b{re.escape(keyword)}", text)
        if match:
            positions.append((match.start(), keyword))
    return [keyword for _, keyword in sorted(positions)]


def extract_amenities(text: str) -> list[str]:
    amenities = extract_prompt_amenities(text)
    for phrase, implied in IMPLIED_AMENITIES.items():
        if phrase in text:
            amenities.extend(a for a in implied if a not in amenities)
    return amenities[:MAX_PROMPT_AMENITIES]


def _parse_amount(number: str | None, suffix: str | None) -> float | None:
    if not number:
        return None
    try:
        value = float(number.replace(",", ""))
    except ValueError:
        return None
    if suffix in {"m", "mn", "million"}:
        value *= 1_000_000
    elif suffix in {"k", "thousand"}:
        value *= 1_000
    return value


def _is_budget(value: float | None) -> bool:
    return value is not None and value >= MIN_BUDGET_AED
