from __future__ import annotations

import logging
import os
from typing import Any, Protocol

from propmatch.core.models import UserIntent
from propmatch.intent.fallback import parse_intent_fallback
from propmatch.intent.llm import OpenAIIntentExtractor


LOGGER = logging.getLogger(__name__)


class IntentExtractor(Protocol):
    def extract(self, text: str) -> UserIntent | None:
        """Structured intent for text, or None when nothing was extracted."""


def parse_prompt(prompt: Any, extractor: IntentExtractor | None = None) -> UserIntent:
    """
    Turn a free-text query into a UserIntent.

    Extraction failures never propagate: the keyword parser takes over.
    An empty prompt is a caller error and raises ValueError.
    """
    text = str(prompt or "").strip()
    if not text:
        raise ValueError("Prompt is required")

    if extractor is None:
        if not os.environ.get("OPENAI_API_KEY"):
            LOGGER.warning("OPENAI_API_KEY not found, using fallback parser")
            return parse_intent_fallback(text)
        extractor = OpenAIIntentExtractor()

    try:
        intent = extractor.extract(text)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Intent extraction failed, using fallback parser: %s", exc)
        return parse_intent_fallback(text)

    if intent is None:
        LOGGER.warning("No function call returned, using fallback parser")
        return parse_intent_fallback(text)
    return intent
