from propmatch.core.geo import round_half_up
from propmatch.core.models import PreferredArea, Project, ProjectDocs, UserIntent
from propmatch.core.scoring import combine_scores, score_project


FULL_DOCS = ProjectDocs(
    floor_plans=True,
    payment_schedule=True,
    service_charges=True,
    approvals=True,
    master_plan=True,
)


def _project(**overrides) -> Project:
    values = {
        "id": "m1",
        "name": "Marina Point",
        "developer": "Test Developer",
        "lat": 25.08,
        "lon": 55.139,
        "price_aed": 2_000_000,
        "size_sqm": 120,
        "handover_month": "2027-06",
        "amenities": ("pool", "gym", "parking"),
        "key_highlights": "under 2.5M",
        "short_desc": "2BR near marina",
        "docs": FULL_DOCS,
    }
    values.update(overrides)
    return Project(**values)


def _marina_intent() -> UserIntent:
    return UserIntent(
        raw_text="2BR near marina under 2.5M",
        budget_max=2_500_000,
        preferred_areas=[PreferredArea(lat=25.08, lon=55.139, name="Dubai Marina")],
        amenities_requested=["pool", "gym"],
    )


def test_score_project_marina_example():
    result = score_project(_project(), _marina_intent())

    assert result.subs.price == 100
    assert result.subs.amenities == 100
    assert result.subs.location == 100
    assert result.subs.size == 70
    assert result.subs.timeline == 70
    assert result.subs.semantic == 100
    assert result.subs.transparency == 100
    assert result.subs.qfit == 85
    assert result.subs.qres == 100
    assert result.score == 92
    assert result.score >= 85


def test_aggregation_uses_intermediate_rounding():
    qfit = round_half_up((80 + 70 + 90 + 60) / 4)
    qres = round_half_up(0.7 * 50 + 0.3 * 40)
    assert qfit == 75
    assert qres == 47
    assert combine_scores(qfit, qres, 100) == 68


def test_score_project_subscores_are_integers_in_range():
    intents = [
        UserIntent(raw_text=""),
        _marina_intent(),
        UserIntent(
            raw_text="huge villa in abu dhabi",
            budget_min=9_000_000,
            size_min=800,
            preferred_areas=[PreferredArea(lat=24.4539, lon=54.3773, name="Abu Dhabi (city-wide)")],
            preferred_handover_month="2031-01",
            amenities_requested=["golf_course", "tennis"],
        ),
    ]
    projects = [
        _project(),
        _project(price_aed=None, handover_month=None, docs=ProjectDocs(), short_desc="", key_highlights=""),
    ]
    for intent in intents:
        for project in projects:
            result = score_project(project, intent)
            values = list(result.subs.to_dict().values()) + [result.score]
            for value in values:
                assert isinstance(value, int)
                assert 0 <= value <= 100


def test_incomplete_listing_is_ranked_not_rejected():
    result = score_project(_project(price_aed=None, handover_month=None), _marina_intent())
    assert result.subs.price == 0
    assert result.subs.timeline == 0
    assert result.score > 0


def test_neutral_intent_uses_priors():
    result = score_project(_project(), UserIntent(raw_text="anything"))
    assert result.subs.price == 70
    assert result.subs.size == 70
    assert result.subs.location == 80
    assert result.subs.timeline == 70
    assert result.subs.amenities == 70
    assert result.subs.qfit == 73
