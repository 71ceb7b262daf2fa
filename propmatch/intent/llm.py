from __future__ import annotations

import json
import logging
import os
from typing import Any

from openai import OpenAI

from propmatch.core.config import env_float
from propmatch.core.geo import month_label_or_none
from propmatch.core.models import PreferredArea, UserIntent
from propmatch.intent.areas import resolve_area


LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
EXTRACTION_FUNCTION = "extract_property_intent"

SYSTEM_PROMPT = (
    "You are a Dubai real estate search assistant. Extract structured property search criteria "
    "from natural language queries.\n\n"
    "CRITICAL - Budget Interpretation Rules:\n"
    "- A SINGLE budget figure (without 'at least' or 'from') means MAXIMUM budget:\n"
    "  - '2.5M AED' -> budgetMax=2500000, budgetMin=null\n"
    "  - 'under 2.5M' -> budgetMax=2500000, budgetMin=null\n"
    "  - '2.5 million AED' -> budgetMax=2500000, budgetMin=null\n"
    "- 'Around' or 'approximately' means a +/-10% range:\n"
    "  - 'around 2.5M' -> budgetMin=2250000, budgetMax=2750000\n"
    "- Range phrases:\n"
    "  - 'between 2M and 3M' -> budgetMin=2000000, budgetMax=3000000\n"
    "  - '2M to 3M' -> budgetMin=2000000, budgetMax=3000000\n"
    "- Minimum-only phrases:\n"
    "  - 'at least 2M' -> budgetMin=2000000, budgetMax=null\n"
    "  - 'from 2M' -> budgetMin=2000000, budgetMax=null\n\n"
    "Location Inference:\n"
    "- CITY-LEVEL queries: 'in Dubai' -> Dubai, 'in Abu Dhabi' -> Abu Dhabi\n"
    "- NEIGHBORHOOD-LEVEL queries: 'near beach' -> JBR or Dubai Marina, "
    "'downtown' -> Downtown Dubai, 'in Dubai Marina' -> Dubai Marina\n"
    "- IMPLICIT needs: 'family friendly' -> kids_area, school_nearby, park_nearby amenities"
)

EXTRACTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "budgetMin": {
            "type": ["number", "null"],
            "description": (
                "Minimum budget in AED. Only set if explicitly stated with 'at least', 'from', or in a "
                "range like 'between 2M and 3M'. Leave null for single figures like '2.5M'."
            ),
        },
        "budgetMax": {
            "type": ["number", "null"],
            "description": (
                "Maximum budget in AED. DEFAULT for single figures. '2.5M AED' -> 2500000, "
                "'under 2.5M' -> 2500000. Parse 'M' as millions, 'K' as thousands."
            ),
        },
        "sizeMin": {
            "type": ["number", "null"],
            "description": "Minimum size in sqm. Parse '120 sqm', 'around 150m2', 'spacious' (infer 150+).",
        },
        "sizeMax": {
            "type": ["number", "null"],
            "description": "Maximum size in sqm. Infer from context or explicit mentions.",
        },
        "preferredAreas": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {
                        "type": "string",
                        "description": (
                            "Location name. CITY-LEVEL: Dubai, Abu Dhabi, Sharjah. NEIGHBORHOODS: Dubai Marina, "
                            "Palm Jumeirah, Downtown Dubai, JBR, Business Bay, Dubai Hills, City Walk, DIFC, JLT"
                        ),
                    },
                    "inference": {
                        "type": "string",
                        "description": "How this was inferred, e.g. 'explicit mention' or 'near beach -> JBR'.",
                    },
                },
            },
            "description": "Map natural language to city-level or neighbourhood-level locations.",
        },
        "preferredHandoverMonth": {
            "type": ["string", "null"],
            "description": (
                "Handover date in YYYY-MM format. 'early 2027' -> '2027-01', 'Q2 2026' -> '2026-04', "
                "'mid 2027' -> '2027-06', 'soon' -> next 6 months."
            ),
        },
        "amenitiesRequested": {
            "type": "array",
            "items": {"type": "string"},
            "description": (
                "Explicit and implicit needs. Vocab: pool, gym, beach_access, parking, kids_area, school_nearby, "
                "park_nearby, concierge, sauna, tennis, pet_friendly, co_working, metro, golf_course, marina_access."
            ),
        },
        "keywords": {
            "type": "array",
            "items": {"type": "string"},
            "description": (
                "Lifestyle indicators: family, quiet, luxury, investment, beachfront, sea view, golf, nature, "
                "urban, modern, etc."
            ),
        },
        "investmentFocused": {
            "type": "boolean",
            "description": "True if the query mentions ROI, rental yield, investment or rental income.",
        },
    },
    "required": [
        "budgetMin",
        "budgetMax",
        "sizeMin",
        "sizeMax",
        "preferredAreas",
        "preferredHandoverMonth",
        "amenitiesRequested",
        "keywords",
        "investmentFocused",
    ],
}


class OpenAIIntentExtractor:
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client: Any = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self.model = model or os.environ.get("OPENAI_MODEL_NAME") or DEFAULT_MODEL
        if client is not None:
            self.client = client
            return
        resolved_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not resolved_key:
            raise ValueError("OPENAI_API_KEY is required.")
        timeout = timeout_seconds if timeout_seconds is not None else env_float("OPENAI_TIMEOUT_SECONDS", 10.0)
        self.client = OpenAI(api_key=resolved_key, timeout=timeout, max_retries=2)

    def extract(self, text: str) -> UserIntent | None:
        """
        Structured extraction through a forced function call.

        Returns None when the model answers without calling the function.
        """
        completion = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": text},
            ],
            tools=[
                {
                    "type": "function",
                    "function": {
                        "name": EXTRACTION_FUNCTION,
                        "description": "Extract structured information from a natural language property search query",
                        "parameters": EXTRACTION_SCHEMA,
                    },
                }
            ],
            tool_choice={"type": "function", "function": {"name": EXTRACTION_FUNCTION}},
            temperature=0.1,
        )
        arguments = _function_arguments(completion)
        if not arguments:
            return None
        return intent_from_extraction(text, json.loads(arguments))


def intent_from_extraction(text: str, extracted: dict[str, Any]) -> UserIntent:
    raw_areas = extracted.get("preferredAreas") or []
    if isinstance(raw_areas, (str, dict)):
        raw_areas = [raw_areas]
    areas: list[PreferredArea] = []
    for item in raw_areas:
        name = item.get("name") if isinstance(item, dict) else item
        area = resolve_area(name)
        if area is None:
            LOGGER.debug("Dropping unknown area name=%r", name)
            continue
        if area not in areas:
            areas.append(area)

    return UserIntent(
        raw_text=text,
        budget_min=_positive_or_none(extracted.get("budgetMin")),
        budget_max=_positive_or_none(extracted.get("budgetMax")),
        size_min=_positive_or_none(extracted.get("sizeMin")),
        size_max=_positive_or_none(extracted.get("sizeMax")),
        preferred_areas=areas,
        preferred_handover_month=month_label_or_none(extracted.get("preferredHandoverMonth")),
        keywords=_string_list(extracted.get("keywords")),
        amenities_requested=_string_list(extracted.get("amenitiesRequested")),
        investment_focused=bool(extracted.get("investmentFocused")),
    )


def _function_arguments(completion: Any) -> str | None:
    choices = getattr(completion, "choices", None) or []
    if not choices:
        return None
    message = choices[0].message
    tool_calls = getattr(message, "tool_calls", None) or []
    if tool_calls:
        return tool_calls[0].function.arguments
    function_call = getattr(message, "function_call", None)
    if function_call is not None:
        return function_call.arguments
    return None


def _string_list(value: Any) -> list[str]:
    # A bare string is one item, not a sequence of characters.
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _positive_or_none(value: Any) -> float | None:
    # Model zeroes mean "not stated", same as null.
    try:
        number = float(value) if value is not None else None
    except (TypeError, ValueError):
        return None
    return number if number else None