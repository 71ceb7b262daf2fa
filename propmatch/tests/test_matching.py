from propmatch.core.amenities import amenity_match_score, extract_prompt_amenities
from propmatch.core.models import ProjectDocs
from propmatch.core.semantic import cosine_sim_from_text, tokenize
from propmatch.core.transparency import docs_completeness_score


def test_tokenize_splits_on_non_alphanumerics():
    assert tokenize("Sea-view 2BR, under AED 2.5M!") == {"sea", "view", "2br", "under", "aed", "2", "5m"}
    assert tokenize("") == set()


def test_cosine_sim_identical_disjoint_and_empty():
    assert cosine_sim_from_text("quiet family villa", "Villa, family & quiet") == 1.0
    assert cosine_sim_from_text("quiet family villa", "downtown studio") == 0.0
    assert cosine_sim_from_text("", "downtown studio") == 0.0
    assert cosine_sim_from_text("", "") == 0.0


def test_cosine_sim_is_symmetric_and_partial():
    a = "luxury 2br"
    b = "luxury villa with pool"
    assert cosine_sim_from_text(a, b) == cosine_sim_from_text(b, a)
    assert cosine_sim_from_text("luxury 2br", "luxury villa") == 0.5


def test_amenity_match_score_neutral_and_fraction():
    assert amenity_match_score([], ["pool"]) == 70
    assert amenity_match_score(["pool", "gym"], ["pool"]) == 50
    assert amenity_match_score(["pool", "gym"], ["pool", "gym", "parking", "sauna"]) == 100
    assert amenity_match_score(["pool", "gym", "sauna"], []) == 0
    assert amenity_match_score(["pool", "gym", "sauna"], ["gym"]) == 33


def test_extract_prompt_amenities_matches_spaced_names():
    found = extract_prompt_amenities("Need a pool, kids area and beach access near the metro")
    assert found == ["pool", "beach_access", "kids_area", "metro"]


def test_extract_prompt_amenities_caps_results():
    text = " ".join(
        ["pool", "gym", "beach access", "parking", "kids area", "concierge", "sauna", "tennis", "cinema"]
    )
    assert len(extract_prompt_amenities(text)) == 8


def test_docs_completeness_score():
    assert docs_completeness_score(ProjectDocs()) == 0
    assert docs_completeness_score(
        ProjectDocs(floor_plans=True, payment_schedule=True, service_charges=False, approvals=True, master_plan=False)
    ) == 60
    assert docs_completeness_score({"floor_plans": True, "approvals": True, "extra": True}) == 40
    assert docs_completeness_score(None) == 0
