from __future__ import annotations

import argparse
import logging
import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from propmatch.core.catalog import catalog_path, load_projects, save_projects
from propmatch.core.config import env_float
from propmatch.core.models import Project
from propmatch.core.supabase_repo import SupabaseRepo
from propmatch.enrichment.places import (
    PLACE_CATEGORIES,
    PlacesClient,
    enrich_project,
    estimate_enrichment_cost,
)


logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(message)s",
)
LOGGER = logging.getLogger(__name__)

ProgressSink = Callable[[list[Project], Project], None]


@dataclass(slots=True)
class EnrichmentSummary:
    total: int = 0
    enriched: int = 0
    skipped: int = 0
    errors: int = 0
    api_calls: int = 0

    @property
    def estimated_cost_usd(self) -> float:
        return estimate_enrichment_cost(self.api_calls)


def run_enrichment(
    projects: list[Project],
    places: PlacesClient,
    on_enriched: ProgressSink,
    force: bool = False,
    delay_seconds: float | None = None,
    max_attempts: int = 3,
) -> tuple[list[Project], EnrichmentSummary]:
    delay = delay_seconds if delay_seconds is not None else env_float("ENRICH_DELAY_SECONDS", 1.0)
    results = list(projects)
    summary = EnrichmentSummary(total=len(projects))

    for index, project in enumerate(projects):
        if project.nearby and not force:
            LOGGER.info("Skipping %s (%s): already enriched", project.id, project.name)
            summary.skipped += 1
            continue

        LOGGER.info("[%s/%s] Enriching %s (%s)", index + 1, len(projects), project.id, project.name)
        try:
            enriched = _enrich_with_retry(places, project, max_attempts=max_attempts)
        except Exception as exc:  # noqa: BLE001
            # Keep the project un-enriched and move on.
            LOGGER.exception("Enrichment failed for %s: %s", project.id, exc)
            summary.errors += 1
            continue

        results[index] = enriched
        summary.enriched += 1
        summary.api_calls += len(PLACE_CATEGORIES)
        on_enriched(results, enriched)
        LOGGER.info("Progress saved (%s enriched so far)", summary.enriched)

        if delay > 0 and index < len(projects) - 1:
            time.sleep(delay)

    LOGGER.info(
        "Enrichment completed. total=%s enriched=%s skipped=%s errors=%s api_calls=%s estimated_cost_usd=%.2f",
        summary.total,
        summary.enriched,
        summary.skipped,
        summary.errors,
        summary.api_calls,
        summary.estimated_cost_usd,
    )
    return results, summary


def _enrich_with_retry(places: PlacesClient, project: Project, max_attempts: int = 3) -> Project:
    last_error: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            return enrich_project(project, places)
        except Exception as exc:  # noqa: BLE001
            last_error = exc
            if attempt >= max_attempts:
                break
            wait_seconds = attempt * 2
            LOGGER.warning(
                "Enrichment retry project=%s attempt=%s/%s wait=%ss error=%s",
                project.id,
                attempt,
                max_attempts,
                wait_seconds,
                exc,
            )
            time.sleep(wait_seconds)
    if last_error:
        raise last_error
    raise RuntimeError(f"Enrichment for {project.id} made no attempts.")


def main(argv: list[str] | None = None) -> EnrichmentSummary:
    parser = argparse.ArgumentParser(description="Attach nearby-places context to catalog projects.")
    parser.add_argument("--force", action="store_true", help="Re-enrich projects that already have nearby data.")
    parser.add_argument("--catalog", type=Path, default=None, help="Catalog JSON file (default: CATALOG_PATH).")
    parser.add_argument("--supabase", action="store_true", help="Read and update the Supabase projects table.")
    args = parser.parse_args(argv)

    if args.supabase:
        repo = SupabaseRepo()
        projects = repo.get_projects()

        def on_enriched(_: list[Project], project: Project) -> None:
            repo.update_project_nearby(project)

    else:
        path = args.catalog or catalog_path()
        projects = load_projects(path)

        def on_enriched(all_projects: list[Project], _: Project) -> None:
            save_projects(all_projects, path)

    with PlacesClient() as places:
        _, summary = run_enrichment(projects, places, on_enriched, force=args.force)
    return summary


if __name__ == "__main__":
    main()
