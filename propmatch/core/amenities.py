from __future__ import annotations

from collections.abc import Iterable, Sequence

from propmatch.core.geo import round_half_up


AMENITY_VOCAB: tuple[str, ...] = (
    "pool",
    "gym",
    "beach_access",
    "parking",
    "kids_area",
    "concierge",
    "sauna",
    "tennis",
    "pet_friendly",
    "co_working",
    "metro",
    "tram",
    "school_nearby",
    "park_nearby",
    "marina_access",
    "golf_course",
    "cinema",
)

MAX_PROMPT_AMENITIES = 8
NEUTRAL_AMENITIES = 70


def extract_prompt_amenities(text: str) -> list[str]:
    """Vocabulary amenities mentioned in free text, as written or with spaces."""
    lowered = (text or "").lower()
    found = [
        amenity
        for amenity in AMENITY_VOCAB
        if amenity in lowered or amenity.replace("_", " ") in lowered
    ]
    return found[:MAX_PROMPT_AMENITIES]


def amenity_match_score(requested: Sequence[str], project_amenities: Iterable[str]) -> int:
    if not requested:
        return NEUTRAL_AMENITIES
    available = set(project_amenities)
    matches = sum(1 for amenity in requested if amenity in available)
    return round_half_up(matches / len(requested) * 100)
