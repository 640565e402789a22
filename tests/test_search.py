import pytest

from papershelf.classification.search import autocomplete, search_tags

UNIVERSE = ["Machine Learning", "NLP", "CV", "html parsing"]


def test_substring_is_case_insensitive():
    assert search_tags(UNIVERSE, "nl") == ["NLP"]
    assert search_tags(UNIVERSE, "LEARN") == ["Machine Learning"]


def test_ml_does_not_match_machine_learning():
    # whole-string substring, not per-word initials
    assert search_tags(UNIVERSE, "ml") == ["html parsing"]
    assert "Machine Learning" not in search_tags(UNIVERSE, "ml")


def test_results_keep_universe_order():
    assert search_tags(["b-x", "a-x", "c"], "x") == ["b-x", "a-x"]


def test_matcher_empty_query_matches_everything():
    assert search_tags(UNIVERSE, "") == UNIVERSE


def test_no_match():
    assert search_tags(UNIVERSE, "zzz") == []


def test_autocomplete_empty_query_policies():
    assert autocomplete(UNIVERSE, "", "none") == []
    assert autocomplete(UNIVERSE, "   ", "none") == []
    assert autocomplete(UNIVERSE, "", "all") == UNIVERSE


def test_autocomplete_strips_query():
    assert autocomplete(UNIVERSE, "  cv ") == ["CV"]


def test_autocomplete_rejects_unknown_policy():
    with pytest.raises(ValueError):
        autocomplete(UNIVERSE, "x", "sometimes")
