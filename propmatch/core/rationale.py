from __future__ import annotations

from collections.abc import Sequence

from propmatch.core.models import Subscores


FALLBACK_INTENT_TEXT = "your prompt"


def ranked_factors(subs: Subscores) -> list[tuple[str, int]]:
    pairs = [
        ("budget", subs.price),
        ("size", subs.size),
        ("location", subs.location),
        ("timeline", subs.timeline),
        ("intent match", subs.semantic),
        ("amenities", subs.amenities),
    ]
    # sorted() is stable: equal scores keep the order above.
    return sorted(pairs, key=lambda pair: pair[1], reverse=True)


def rationale(subs: Subscores, intent_keywords: Sequence[str]) -> str:
    ranked = ranked_factors(subs)
    top = " & ".join(label for label, _ in ranked[:2])
    worst = ranked[-1][0]
    intent = " + ".join(intent_keywords[:2]) or FALLBACK_INTENT_TEXT
    return f"Strong fit on {top}; aligns with {intent}. Trade-off: {worst}."
