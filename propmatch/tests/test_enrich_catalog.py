from propmatch.core.catalog import load_projects, save_projects
from propmatch.core.models import NearbyPlace, Project
from propmatch.enrichment.places import PLACE_CATEGORIES
from propmatch.jobs import enrich_catalog
from propmatch.jobs.enrich_catalog import run_enrichment


def _project(project_id, nearby=None):
    return Project(
        id=project_id,
        name=f"Project {project_id}",
        developer="Dev",
        lat=25.08,
        lon=55.139,
        price_aed=1_500_000,
        size_sqm=90,
        handover_month="2027-03",
        nearby=nearby,
    )


class _FakePlaces:
    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.calls = []

    def fetch_nearby_places(self, lat, lon):
        self.calls.append((lat, lon))
        if len(self.calls) in self.fail_for:
            raise ConnectionError("network down")
        return {
            key: [NearbyPlace(name=f"{key} one", type=place_type, distance_km=0.5)]
            for key, place_type in PLACE_CATEGORIES
        }


def test_run_enrichment_skips_already_enriched(monkeypatch):
    monkeypatch.setattr(enrich_catalog.time, "sleep", lambda _: None)
    done = {"parks": [NearbyPlace(name="Park", type="park", distance_km=1.0)]}
    projects = [_project("p1", nearby=done), _project("p2")]
    saved = []

    results, summary = run_enrichment(
        projects, _FakePlaces(), lambda all_projects, project: saved.append(project.id), delay_seconds=0
    )

    assert summary.total == 2
    assert summary.skipped == 1
    assert summary.enriched == 1
    assert summary.errors == 0
    assert summary.api_calls == len(PLACE_CATEGORIES)
    assert saved == ["p2"]
    assert results[0] is projects[0]
    assert results[1].geocode_precision == "exact"


def test_run_enrichment_force_reenriches_everything(monkeypatch):
    monkeypatch.setattr(enrich_catalog.time, "sleep", lambda _: None)
    done = {"parks": [NearbyPlace(name="Park", type="park", distance_km=1.0)]}
    projects = [_project("p1", nearby=done), _project("p2")]

    results, summary = run_enrichment(projects, _FakePlaces(), lambda *_: None, force=True, delay_seconds=0)

    assert summary.enriched == 2
    assert summary.skipped == 0
    assert summary.estimated_cost_usd == 0.58
    assert set(results[0].nearby) == {key for key, _ in PLACE_CATEGORIES}


def test_run_enrichment_retries_then_counts_errors(monkeypatch):
    waits = []
    monkeypatch.setattr(enrich_catalog.time, "sleep", waits.append)
    places = _FakePlaces(fail_for={1, 2, 3})
    projects = [_project("p1"), _project("p2")]

    results, summary = run_enrichment(projects, places, lambda *_: None, delay_seconds=0, max_attempts=3)

    assert summary.errors == 1
    assert summary.enriched == 1
    assert results[0].nearby is None
    assert results[1].nearby
    assert waits == [2, 4]
    assert len(places.calls) == 4


def test_main_writes_enriched_catalog(monkeypatch, tmp_path):
    path = tmp_path / "projects.json"
    save_projects([_project("p1"), _project("p2")], path)
    monkeypatch.setattr(enrich_catalog, "PlacesClient", lambda: _ContextPlaces())
    monkeypatch.setenv("ENRICH_DELAY_SECONDS", "0")

    summary = enrich_catalog.main(["--catalog", str(path)])

    assert summary.enriched == 2
    assert all(project.nearby for project in load_projects(path))


class _ContextPlaces(_FakePlaces):
    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return None
