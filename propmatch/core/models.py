from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from propmatch.core.geo import month_label_or_none


DOC_CHECKLIST = ("floor_plans", "payment_schedule", "service_charges", "approvals", "master_plan")


@dataclass(slots=True, frozen=True)
class PreferredArea:
    lat: float
    lon: float
    name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PreferredArea:
        return cls(lat=float(data["lat"]), lon=float(data["lon"]), name=str(data.get("name") or ""))

    def to_dict(self) -> dict[str, Any]:
        return {"lat": self.lat, "lon": self.lon, "name": self.name}


@dataclass(slots=True)
class UserIntent:
    raw_text: str
    budget_min: float | None = None
    budget_max: float | None = None
    size_min: float | None = None
    size_max: float | None = None
    preferred_areas: list[PreferredArea] = field(default_factory=list)
    preferred_handover_month: str | None = None  # YYYY-MM
    keywords: list[str] = field(default_factory=list)
    amenities_requested: list[str] = field(default_factory=list)
    investment_focused: bool = False

    @classmethod
    def neutral(cls, text: str) -> UserIntent:
        return cls(raw_text=text)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserIntent:
        areas = _pick(data, "preferredAreas", "preferred_areas") or []
        handover = _pick(data, "preferredHandoverMonth", "preferred_handover_month")
        return cls(
            raw_text=str(_pick(data, "rawText", "raw_text") or ""),
            budget_min=_optional_float(_pick(data, "budgetMin", "budget_min")),
            budget_max=_optional_float(_pick(data, "budgetMax", "budget_max")),
            size_min=_optional_float(_pick(data, "sizeMin", "size_min")),
            size_max=_optional_float(_pick(data, "sizeMax", "size_max")),
            preferred_areas=[PreferredArea.from_dict(area) for area in areas if isinstance(area, dict)],
            preferred_handover_month=month_label_or_none(handover),
            keywords=[str(k) for k in _pick(data, "keywords") or []],
            amenities_requested=[str(a) for a in _pick(data, "amenitiesRequested", "amenities_requested") or []],
            investment_focused=bool(_pick(data, "investmentFocused", "investment_focused")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "rawText": self.raw_text,
            "budgetMin": self.budget_min,
            "budgetMax": self.budget_max,
            "sizeMin": self.size_min,
            "sizeMax": self.size_max,
            "preferredAreas": [area.to_dict() for area in self.preferred_areas],
            "preferredHandoverMonth": self.preferred_handover_month,
            "keywords": list(self.keywords),
            "amenitiesRequested": list(self.amenities_requested),
            "investmentFocused": self.investment_focused,
        }


@dataclass(slots=True, frozen=True)
class ProjectDocs:
    floor_plans: bool = False
    payment_schedule: bool = False
    service_charges: bool = False
    approvals: bool = False
    master_plan: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ProjectDocs:
        data = data or {}
        return cls(**{key: bool(data.get(key)) for key in DOC_CHECKLIST})

    def to_dict(self) -> dict[str, bool]:
        return {key: getattr(self, key) for key in DOC_CHECKLIST}


@dataclass(slots=True, frozen=True)
class NearbyPlace:
    name: str
    type: str
    distance_km: float
    rating: float | None = None
    address: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NearbyPlace:
        return cls(
            name=str(data.get("name") or "Unknown"),
            type=str(data.get("type") or ""),
            distance_km=float(data.get("distance_km") or 0.0),
            rating=_optional_float(data.get("rating")),
            address=data.get("address"),
        )

    def to_dict(self) -> dict[str, Any]:
        row: dict[str, Any] = {"name": self.name, "type": self.type, "distance_km": self.distance_km}
        if self.rating is not None:
            row["rating"] = self.rating
        if self.address:
            row["address"] = self.address
        return row


@dataclass(slots=True, frozen=True)
class GeocodeResult:
    lat: float
    lon: float
    precision: str  # exact | approximate | area


@dataclass(slots=True, frozen=True)
class Project:
    id: str
    name: str
    developer: str
    lat: float
    lon: float
    price_aed: float | None
    size_sqm: float | None
    handover_month: str | None  # YYYY-MM
    amenities: tuple[str, ...] = ()
    key_highlights: str = ""
    short_desc: str = ""
    thumbnail_url: str | None = None
    docs: ProjectDocs = field(default_factory=ProjectDocs)
    # Precomputed context, not read by scoring.
    nearby: dict[str, list[NearbyPlace]] | None = None
    geocode_precision: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Project:
        raw_nearby = data.get("nearby")
        nearby = None
        if isinstance(raw_nearby, dict):
            nearby = {
                str(category): [NearbyPlace.from_dict(p) for p in places if isinstance(p, dict)]
                for category, places in raw_nearby.items()
                if isinstance(places, list)
            }
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            developer=str(data.get("developer") or ""),
            lat=float(data["lat"]),
            lon=float(data["lon"]),
            price_aed=_optional_float(data.get("price_aed")),
            size_sqm=_optional_float(data.get("size_sqm")),
            handover_month=month_label_or_none(data.get("handover_month")),
            amenities=tuple(str(a) for a in data.get("amenities") or []),
            key_highlights=str(data.get("key_highlights") or ""),
            short_desc=str(data.get("short_desc") or ""),
            thumbnail_url=data.get("thumbnail_url"),
            docs=ProjectDocs.from_dict(data.get("docs")),
            nearby=nearby,
            geocode_precision=data.get("geocode_precision"),
        )

    def to_dict(self) -> dict[str, Any]:
        row: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "developer": self.developer,
            "lat": self.lat,
            "lon": self.lon,
            "price_aed": self.price_aed,
            "size_sqm": self.size_sqm,
            "handover_month": self.handover_month,
            "amenities": list(self.amenities),
            "key_highlights": self.key_highlights,
            "short_desc": self.short_desc,
            "thumbnail_url": self.thumbnail_url,
            "docs": self.docs.to_dict(),
        }
        if self.nearby is not None:
            row["nearby"] = {
                category: [place.to_dict() for place in places] for category, places in self.nearby.items()
            }
        if self.geocode_precision:
            row["geocode_precision"] = self.geocode_precision
        return row


@dataclass(slots=True, frozen=True)
class Subscores:
    price: int
    size: int
    location: int
    timeline: int
    semantic: int
    amenities: int
    transparency: int
    qfit: int  # mean of price, size, location, timeline
    qres: int  # 0.7 semantic + 0.3 amenities

    def to_dict(self) -> dict[str, int]:
        return {
            "price": self.price,
            "size": self.size,
            "location": self.location,
            "timeline": self.timeline,
            "semantic": self.semantic,
            "amenities": self.amenities,
            "transparency": self.transparency,
            "qfit": self.qfit,
            "qres": self.qres,
        }


@dataclass(slots=True, frozen=True)
class ProjectScore:
    score: int
    subs: Subscores


@dataclass(slots=True)
class ScoredProject:
    id: str
    name: str
    developer: str
    thumbnail: str | None
    price_aed: float | None
    handover_month: str | None
    score: int
    rationale: str
    subs: Subscores

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "developer": self.developer,
            "thumbnail": self.thumbnail,
            "price_aed": self.price_aed,
            "handover_month": self.handover_month,
            "score": self.score,
            "rationale": self.rationale,
            "subs": self.subs.to_dict(),
        }


def _pick(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
