from __future__ import annotations

from typing import Any

from propmatch.core.geo import round_half_up
from propmatch.core.models import DOC_CHECKLIST, ProjectDocs


def docs_completeness_score(docs: ProjectDocs | dict[str, Any] | None) -> int:
    if docs is None:
        return 0
    if isinstance(docs, dict):
        available = sum(1 for key in DOC_CHECKLIST if docs.get(key))
    else:
        available = sum(1 for key in DOC_CHECKLIST if getattr(docs, key, False))
    return round_half_up(available / len(DOC_CHECKLIST) * 100)
