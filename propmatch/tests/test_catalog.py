import dataclasses
import json

import pytest

from propmatch.core.catalog import (
    DEFAULT_CATALOG_PATH,
    clear_catalog_cache,
    get_project_by_id,
    get_projects,
    load_projects,
    save_projects,
)
from propmatch.core.config import env_float, env_int
from propmatch.core.models import NearbyPlace, Project, UserIntent
from propmatch.core.supabase_repo import SupabaseRepo


@pytest.fixture(autouse=True)
def _fresh_cache(monkeypatch):
    monkeypatch.delenv("CATALOG_PATH", raising=False)
    monkeypatch.delenv("CATALOG_SOURCE", raising=False)
    clear_catalog_cache()
    yield
    clear_catalog_cache()


def test_bundled_catalog_loads():
    projects = load_projects(DEFAULT_CATALOG_PATH)
    ids = [project.id for project in projects]

    assert len(projects) == 15
    assert ids[0] == "p1"
    assert len(set(ids)) == 15
    p1 = projects[0]
    assert p1.nearby
    assert p1.geocode_precision == "exact"
    assert all(isinstance(place, NearbyPlace) for places in p1.nearby.values() for place in places)


def test_get_projects_reads_catalog_path(monkeypatch, tmp_path):
    bundled = load_projects(DEFAULT_CATALOG_PATH)
    path = tmp_path / "projects.json"
    save_projects(bundled[:2], path)
    monkeypatch.setenv("CATALOG_PATH", str(path))

    projects = get_projects()

    assert [project.id for project in projects] == ["p1", "p2"]
    assert get_project_by_id("p2").name == bundled[1].name
    assert get_project_by_id("missing") is None


def test_save_then_load_keeps_enrichment(tmp_path):
    project = load_projects(DEFAULT_CATALOG_PATH)[1]
    enriched = dataclasses.replace(
        project,
        nearby={"parks": [NearbyPlace(name="Creek Park", type="park", distance_km=1.25, rating=4.5)]},
        geocode_precision="exact",
    )
    path = tmp_path / "catalog.json"

    save_projects([enriched], path)
    loaded = load_projects(path)

    assert loaded == [enriched]
    assert [p.name for p in tmp_path.iterdir()] == ["catalog.json"]


def test_load_projects_rejects_non_array(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"id": "p1"}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_projects(path)


def test_unknown_catalog_source_is_rejected(monkeypatch):
    monkeypatch.setenv("CATALOG_SOURCE", "sqlite")
    with pytest.raises(ValueError):
        get_projects()


def test_project_from_dict_fills_defaults():
    project = Project.from_dict({"id": 7, "lat": "25.1", "lon": 55.2, "price_aed": ""})

    assert project.id == "7"
    assert project.price_aed is None
    assert project.amenities == ()
    assert project.docs.to_dict() == dict.fromkeys(
        ("floor_plans", "payment_schedule", "service_charges", "approvals", "master_plan"), False
    )
    assert project.nearby is None
    assert "nearby" not in project.to_dict()


def test_user_intent_from_dict_accepts_camel_case():
    intent = UserIntent.from_dict(
        {
            "rawText": "near the marina",
            "budgetMax": 2500000,
            "sizeMin": "",
            "preferredAreas": [{"lat": 25.08, "lon": 55.139, "name": "Dubai Marina"}],
            "preferredHandoverMonth": "2027-06",
            "amenitiesRequested": ["pool"],
            "investmentFocused": True,
        }
    )
    assert intent.budget_max == 2_500_000
    assert intent.size_min is None
    assert intent.preferred_areas[0].name == "Dubai Marina"
    assert intent.amenities_requested == ["pool"]
    assert intent.investment_focused is True
    assert UserIntent.from_dict(intent.to_dict()) == intent


class _Query:
    def __init__(self, table):
        self.table = table
        self.calls = []

    def __getattr__(self, name):
        def method(*args):
            self.calls.append((name, args))
            return self

        return method

    def execute(self):
        return type("Response", (), {"data": self.table.rows})()


class _Table:
    def __init__(self, rows):
        self.rows = rows
        self.queries = []

    def __call__(self, name):
        assert name == "projects"
        query = _Query(self)
        self.queries.append(query)
        return query


class _FakeSupabase:
    def __init__(self, rows):
        self.table = _Table(rows)


def test_supabase_repo_reads_and_updates_projects():
    rows = [project.to_dict() for project in load_projects(DEFAULT_CATALOG_PATH)[:2]]
    client = _FakeSupabase(rows)
    repo = SupabaseRepo(client=client)

    projects = repo.get_projects()
    assert [project.id for project in projects] == ["p1", "p2"]
    assert client.table.queries[0].calls == [("select", ("*",)), ("order", ("id",))]

    assert repo.get_project_by_id("p1").id == "p1"

    repo.update_project_nearby(projects[0])
    update_calls = client.table.queries[-1].calls
    assert update_calls[0][0] == "update"
    assert set(update_calls[0][1][0]) == {"nearby", "geocode_precision"}
    assert update_calls[1] == ("eq", ("id", "p1"))


def test_supabase_repo_requires_credentials(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)
    with pytest.raises(ValueError):
        SupabaseRepo()


def test_malformed_handover_month_is_dropped_on_load():
    project = Project.from_dict({"id": "p1", "lat": 25.1, "lon": 55.2, "handover_month": "Q4 2026"})
    intent = UserIntent.from_dict({"rawText": "x", "preferred_handover_month": "soon"})

    assert project.handover_month is None
    assert intent.preferred_handover_month is None


def test_env_helpers_fall_back_on_bad_values(monkeypatch):
    monkeypatch.setenv("PROPMATCH_TEST_INT", " 12 ")
    monkeypatch.setenv("PROPMATCH_TEST_FLOAT", "not-a-number")
    monkeypatch.delenv("PROPMATCH_TEST_MISSING", raising=False)

    assert env_int("PROPMATCH_TEST_INT", 5) == 12
    assert env_float("PROPMATCH_TEST_FLOAT", 1.5) == 1.5
    assert env_int("PROPMATCH_TEST_MISSING", 7) == 7
