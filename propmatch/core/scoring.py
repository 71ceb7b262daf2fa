from __future__ import annotations

from propmatch.core.amenities import amenity_match_score
from propmatch.core.geo import round_half_up
from propmatch.core.models import Project, ProjectScore, Subscores, UserIntent
from propmatch.core.semantic import cosine_sim_from_text
from propmatch.core.subscores import location_score, price_score, size_score, timeline_score
from propmatch.core.transparency import docs_completeness_score


SEMANTIC_WEIGHT = 0.7
AMENITIES_WEIGHT = 0.3

QFIT_WEIGHT = 0.55
QRES_WEIGHT = 0.35
TRANSPARENCY_WEIGHT = 0.10


def score_project(project: Project, intent: UserIntent) -> ProjectScore:
    """
    Composite 0-100 score of one project against one intent.

    Each subscore is an int before it feeds the next formula; qfit and qres
    are rounded again before the final blend.
    """
    price = price_score(intent.budget_min, intent.budget_max, project.price_aed)
    size = size_score(intent.size_min, intent.size_max, project.size_sqm)
    location = location_score(intent.preferred_areas, project.lat, project.lon)
    timeline = timeline_score(intent.preferred_handover_month, project.handover_month)
    qfit = round_half_up((price + size + location + timeline) / 4)

    semantic = round_half_up(
        cosine_sim_from_text(intent.raw_text, f"{project.short_desc} {project.key_highlights}") * 100
    )
    amenities = amenity_match_score(intent.amenities_requested, project.amenities)
    qres = round_half_up(SEMANTIC_WEIGHT * semantic + AMENITIES_WEIGHT * amenities)

    transparency = docs_completeness_score(project.docs)

    score = combine_scores(qfit, qres, transparency)
    return ProjectScore(
        score=score,
        subs=Subscores(
            price=price,
            size=size,
            location=location,
            timeline=timeline,
            semantic=semantic,
            amenities=amenities,
            transparency=transparency,
            qfit=qfit,
            qres=qres,
        ),
    )


def combine_scores(qfit: int, qres: int, transparency: int) -> int:
    return round_half_up(QFIT_WEIGHT * qfit + QRES_WEIGHT * qres + TRANSPARENCY_WEIGHT * transparency)
