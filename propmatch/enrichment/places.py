from __future__ import annotations

import dataclasses
import logging
import os
import time
from typing import Any

import httpx
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from propmatch.core.config import env_float, env_int
from propmatch.core.geo import haversine_km, round_half_up
from propmatch.core.models import GeocodeResult, NearbyPlace, Project


LOGGER = logging.getLogger(__name__)

PLACES_NEARBY_URL = "https://places.googleapis.com/v1/places:searchNearby"
PLACES_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
PLACES_FIELD_MASK = (
    "places.displayName,places.location,places.types,places.rating,places.shortFormattedAddress"
)
REQUEST_MAX_RESULTS = 10

# (nearby key, Places API type)
PLACE_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("parks", "park"),
    ("schools", "school"),
    ("transit_stations", "transit_station"),
    ("hospitals", "hospital"),
    ("shopping_malls", "shopping_mall"),
    ("restaurants", "restaurant"),
    ("gyms", "gym"),
    ("golf_courses", "golf_course"),
    ("beaches", "beach"),
)

COST_PER_REQUEST_USD = 0.032

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
# Google geometry.location_type -> stored geocode_precision
LOCATION_TYPE_PRECISION = {
    "ROOFTOP": "exact",
    "RANGE_INTERPOLATED": "approximate",
    "GEOMETRIC_CENTER": "approximate",
}
DEFAULT_PRECISION = "area"


def resolve_auth_headers() -> dict[str, str]:
    service_account_path = os.environ.get("GOOGLE_PLACES_SERVICE_ACCOUNT_JSON_PATH")
    api_key = os.environ.get("GOOGLE_MAPS_API_KEY")
    if service_account_path:
        credentials = service_account.Credentials.from_service_account_file(
            service_account_path,
            scopes=[PLACES_SCOPE],
        )
        credentials.refresh(Request())
        return {"Authorization": f"Bearer {credentials.token}"}
    if api_key:
        return {"X-Goog-Api-Key": api_key}
    raise ValueError("GOOGLE_MAPS_API_KEY or GOOGLE_PLACES_SERVICE_ACCOUNT_JSON_PATH is required.")


class PlacesClient:
    def __init__(
        self,
        auth_headers: dict[str, str] | None = None,
        radius_meters: float | None = None,
        max_results: int | None = None,
        timeout_seconds: float = 15.0,
        category_delay_seconds: float = 0.1,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.auth_headers = auth_headers if auth_headers is not None else resolve_auth_headers()
        self.radius_meters = radius_meters if radius_meters is not None else env_float("PLACES_RADIUS_METERS", 5000.0)
        self.max_results = max_results if max_results is not None else env_int("PLACES_MAX_RESULTS", 5)
        self.category_delay_seconds = category_delay_seconds
        self._client = httpx.Client(timeout=timeout_seconds, transport=transport)

    def __enter__(self) -> PlacesClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def search_nearby(self, lat: float, lon: float, place_type: str) -> list[NearbyPlace]:
        body = {
            "includedTypes": [place_type],
            "maxResultCount": REQUEST_MAX_RESULTS,
            "locationRestriction": {
                "circle": {
                    "center": {"latitude": lat, "longitude": lon},
                    "radius": float(self.radius_meters),
                }
            },
        }
        headers = {
            **self.auth_headers,
            "Content-Type": "application/json",
            "X-Goog-FieldMask": PLACES_FIELD_MASK,
        }
        response = self._client.post(PLACES_NEARBY_URL, json=body, headers=headers)
        response.raise_for_status()
        payload = response.json()

        places: list[NearbyPlace] = []
        for raw in payload.get("places") or []:
            place = _place_from_payload(raw, place_type, lat, lon)
            if place is not None:
                places.append(place)
        places.sort(key=lambda p: p.distance_km)
        return places[: self.max_results]

    def fetch_nearby_places(self, lat: float, lon: float) -> dict[str, list[NearbyPlace]]:
        LOGGER.info("Fetching nearby places for location (%s, %s)", lat, lon)
        nearby: dict[str, list[NearbyPlace]] = {}
        for index, (key, place_type) in enumerate(PLACE_CATEGORIES):
            try:
                nearby[key] = self.search_nearby(lat, lon, place_type)
                LOGGER.info("Found %s %s", len(nearby[key]), key)
            except (httpx.HTTPError, ValueError) as exc:
                LOGGER.warning("Failed to fetch %s: %s", key, exc)
                nearby[key] = []
            if self.category_delay_seconds and index < len(PLACE_CATEGORIES) - 1:
                time.sleep(self.category_delay_seconds)
        return nearby

    def geocode_address(self, address: str) -> GeocodeResult:
        """
        Resolve a street address with the Geocoding API.

        The Geocoding API only takes key auth, so GOOGLE_MAPS_API_KEY is
        required even when Places calls use a service account.
        """
        api_key = self.auth_headers.get("X-Goog-Api-Key") or os.environ.get("GOOGLE_MAPS_API_KEY")
        if not api_key:
            raise ValueError("GOOGLE_MAPS_API_KEY is required for geocoding.")

        LOGGER.info("Geocoding address: %s", address)
        response = self._client.get(GEOCODE_URL, params={"address": address, "key": api_key})
        response.raise_for_status()
        payload = response.json()
        results = payload.get("results") or []
        if payload.get("status") != "OK" or not results:
            raise ValueError(f"Geocoding failed: {payload.get('status')}")

        geometry = results[0].get("geometry") or {}
        location = geometry.get("location") or {}
        result = GeocodeResult(
            lat=float(location["lat"]),
            lon=float(location["lng"]),
            precision=precision_for_location_type(geometry.get("location_type")),
        )
        LOGGER.info("Geocoded to (%s, %s) precision=%s", result.lat, result.lon, result.precision)
        return result


def precision_for_location_type(location_type: str | None) -> str:
    return LOCATION_TYPE_PRECISION.get(location_type or "", DEFAULT_PRECISION)


def enrich_project(project: Project, places: PlacesClient, address: str | None = None) -> Project:
    """
    Attach nearby places to a project.

    With an address, the project is geocoded first and takes the geocoded
    coordinates and precision. Without one, catalog coordinates are trusted
    as exact.
    """
    lat, lon, precision = project.lat, project.lon, "exact"
    if address:
        geocoded = places.geocode_address(address)
        lat, lon, precision = geocoded.lat, geocoded.lon, geocoded.precision

    LOGGER.info("Enriching %s (%s) at (%s, %s)", project.id, project.name, lat, lon)
    nearby = places.fetch_nearby_places(lat, lon)
    total = sum(len(items) for items in nearby.values())
    LOGGER.info("Done %s. Found %s nearby places", project.id, total)
    return dataclasses.replace(project, lat=lat, lon=lon, nearby=nearby, geocode_precision=precision)


def estimate_enrichment_cost(api_call_count: int) -> float:
    return round_half_up(api_call_count * COST_PER_REQUEST_USD * 100) / 100


def _place_from_payload(raw: dict[str, Any], place_type: str, lat: float, lon: float) -> NearbyPlace | None:
    location = raw.get("location") if isinstance(raw.get("location"), dict) else {}
    place_lat = location.get("latitude")
    place_lon = location.get("longitude")
    if place_lat is None or place_lon is None:
        return None
    display_name = raw.get("displayName") if isinstance(raw.get("displayName"), dict) else {}
    rating = raw.get("rating")
    return NearbyPlace(
        name=str(display_name.get("text") or "Unknown"),
        type=place_type,
        distance_km=round_half_up(haversine_km(lat, lon, float(place_lat), float(place_lon)) * 100) / 100,
        rating=float(rating) if rating is not None else None,
        address=raw.get("shortFormattedAddress"),
    )
