from __future__ import annotations

import re
from math import asin, cos, floor, radians, sin, sqrt
from typing import Any


EARTH_RADIUS_KM = 6371.0

MONTH_LABEL = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def round_half_up(value: float) -> int:
    # Halves round toward +inf, so 0.5 -> 1 and -2.5 -> -2.
    return int(floor(value + 0.5))


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def pct(value: float) -> int:
    return round_half_up(clamp01(value) * 100)


def linear_score(current: float, low: float, high: float) -> int:
    """
    Map current within [low, high] onto 0-100.
    """
    if low == high:
        return 100
    return round_half_up(clamp01((current - low) / (high - low)) * 100)


def month_diff(a: str, b: str) -> int:
    """
    Absolute month distance between two YYYY-MM labels.
    """
    a_year, a_month = _parse_month(a)
    b_year, b_month = _parse_month(b)
    return abs((a_year - b_year) * 12 + (a_month - b_month))


def month_label_or_none(value: Any) -> str | None:
    """YYYY-MM labels pass through stripped; anything else becomes None."""
    if not isinstance(value, str):
        return None
    label = value.strip()
    return label if MONTH_LABEL.match(label) else None


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)
    h = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * asin(sqrt(h))


def _parse_month(value: str) -> tuple[int, int]:
    year, month = value.strip().split("-", 1)
    return int(year), int(month)
