from __future__ import annotations

from propmatch.core.models import PreferredArea


_DUBAI_MARINA = PreferredArea(lat=25.08, lon=55.139, name="Dubai Marina")
_JBR = PreferredArea(lat=25.076, lon=55.134, name="JBR")
_DUBAI_HILLS = PreferredArea(lat=25.042, lon=55.171, name="Dubai Hills Estate")
_JLT = PreferredArea(lat=25.072, lon=55.145, name="JLT")

# Keys are lower-case names as users (or the extraction model) write them.
AREA_COORDINATES: dict[str, PreferredArea] = {
    # City-level
    "dubai": PreferredArea(lat=25.2048, lon=55.2708, name="Dubai (city-wide)"),
    "abu dhabi": PreferredArea(lat=24.4539, lon=54.3773, name="Abu Dhabi (city-wide)"),
    "sharjah": PreferredArea(lat=25.3463, lon=55.4209, name="Sharjah (city-wide)"),
    # Neighbourhoods
    "dubai marina": _DUBAI_MARINA,
    "marina": _DUBAI_MARINA,
    "palm jumeirah": PreferredArea(lat=25.112, lon=55.138, name="Palm Jumeirah"),
    "downtown dubai": PreferredArea(lat=25.197, lon=55.274, name="Downtown Dubai"),
    "downtown": PreferredArea(lat=25.197, lon=55.274, name="Downtown Dubai"),
    "business bay": PreferredArea(lat=25.187, lon=55.265, name="Business Bay"),
    "jbr": _JBR,
    "jumeirah beach residence": _JBR,
    "dubai hills": _DUBAI_HILLS,
    "dubai hills estate": _DUBAI_HILLS,
    "city walk": PreferredArea(lat=25.205, lon=55.265, name="City Walk"),
    "difc": PreferredArea(lat=25.214, lon=55.281, name="DIFC"),
    "jumeirah lake towers": _JLT,
    "jlt": _JLT,
}

CITY_LEVEL_KEYS = frozenset({"dubai", "abu dhabi", "sharjah"})


def resolve_area(name: str | None) -> PreferredArea | None:
    if not isinstance(name, str):
        return None
    key = " ".join(name.lower().split())
    return AREA_COORDINATES.get(key)
