from __future__ import annotations

import re
from math import sqrt


_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")


def tokenize(text: str) -> set[str]:
    return {token for token in _TOKEN_SPLIT.split((text or "").lower()) if token}


def cosine_sim_from_text(a: str, b: str) -> float:
    """
    Token-set overlap in [0, 1], symmetric in its arguments.

    Stand-in for embedding similarity: |A & B| / sqrt(|A| * |B|) over the
    lower-cased alphanumeric word sets of both texts.
    """
    tokens_a = tokenize(a)
    tokens_b = tokenize(b)
    shared = len(tokens_a & tokens_b)
    denominator = sqrt(len(tokens_a) * len(tokens_b)) or 1.0
    return min(1.0, shared / denominator)
