from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from propmatch.core.catalog import get_projects
from propmatch.core.models import Project, ScoredProject, UserIntent
from propmatch.core.rationale import rationale
from propmatch.core.scoring import score_project
from propmatch.intent.extractor import parse_prompt


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class SearchResponse:
    intent: UserIntent
    results: list[ScoredProject]

    def to_dict(self) -> dict[str, Any]:
        return {
            "intent": self.intent.to_dict(),
            "results": [row.to_dict() for row in self.results],
        }


def rank_projects(projects: Iterable[Project], intent: UserIntent) -> list[ScoredProject]:
    rows: list[ScoredProject] = []
    for project in projects:
        scored = score_project(project, intent)
        rows.append(
            ScoredProject(
                id=project.id,
                name=project.name,
                developer=project.developer,
                thumbnail=project.thumbnail_url,
                price_aed=project.price_aed,
                handover_month=project.handover_month,
                score=scored.score,
                rationale=rationale(scored.subs, intent.keywords),
                subs=scored.subs,
            )
        )
    # Stable sort: equal scores keep catalog order.
    rows.sort(key=lambda row: row.score, reverse=True)
    return rows


def search(
    prompt: str,
    projects: Iterable[Project] | None = None,
    extractor: Any = None,
) -> SearchResponse:
    intent = parse_prompt(prompt, extractor=extractor)
    catalog = list(projects) if projects is not None else get_projects()
    results = rank_projects(catalog, intent)
    LOGGER.info(
        "Search ranked projects=%s top=%s top_score=%s",
        len(results),
        results[0].id if results else None,
        results[0].score if results else None,
    )
    return SearchResponse(intent=intent, results=results)
