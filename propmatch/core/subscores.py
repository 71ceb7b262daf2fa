from __future__ import annotations

from collections.abc import Sequence

from propmatch.core.geo import haversine_km, month_diff, round_half_up
from propmatch.core.models import PreferredArea


NEUTRAL_PRIOR = 70
NEUTRAL_LOCATION = 80

UNDER_BUDGET_FLOOR = 0.5  # score reaches 0 at half the minimum
OVER_BUDGET_CAP = 1.10  # score reaches 0 at 10% over the maximum

FULL_SCORE_KM = 1.0
ZERO_SCORE_KM = 25.0

POINTS_PER_MONTH = 4.17


def price_score(budget_min: float | None, budget_max: float | None, price: float | None) -> int:
    if not price:
        return 0
    if budget_min is None and budget_max is None:
        return NEUTRAL_PRIOR

    low = budget_min if budget_min is not None else 0.0
    high = budget_max if budget_max is not None else low * 2

    if low <= price <= high:
        return 100

    if price < low:
        floor = low * UNDER_BUDGET_FLOOR
        return max(0, round_half_up(100 * ((price - floor) / (low - floor))))

    cap = high * OVER_BUDGET_CAP
    if cap == high:
        return 0
    return max(0, round_half_up(100 * (1 - (price - high) / (cap - high))))


def size_score(size_min: float | None, size_max: float | None, size: float | None) -> int:
    if not size:
        return 0
    if size_min is None and size_max is None:
        return NEUTRAL_PRIOR

    low = size_min if size_min is not None else 0.0
    high = size_max if size_max is not None else low * 2

    if low <= size <= high:
        return 100

    band = max(1.0, high - low)
    deviation = low - size if size < low else size - high
    penalty = min(1.0, deviation / band)
    return round_half_up(100 * (1 - penalty))


def location_score(preferred_areas: Sequence[PreferredArea], lat: float, lon: float) -> int:
    if not preferred_areas:
        return NEUTRAL_LOCATION

    closest = min(haversine_km(area.lat, area.lon, lat, lon) for area in preferred_areas)
    if closest <= FULL_SCORE_KM:
        return 100
    if closest >= ZERO_SCORE_KM:
        return 0
    return round_half_up(100 * (1 - (closest - FULL_SCORE_KM) / (ZERO_SCORE_KM - FULL_SCORE_KM)))


def timeline_score(preferred_month: str | None, handover_month: str | None) -> int:
    if not handover_month:
        return 0
    if not preferred_month:
        return NEUTRAL_PRIOR

    months = month_diff(preferred_month, handover_month)
    # 24 months apart lands on 0.
    return max(0, round_half_up(100 - POINTS_PER_MONTH * months))
