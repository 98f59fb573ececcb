import pytest

from engagement.services.weights import EventWeights, EventKind, default_weights


def test_known_event_weights():
    assert default_weights.weight(EventKind.LOGIN.value) == 10
    assert default_weights.weight("mcq_correct") == 25
    assert default_weights.weight("community_post") == 30


def test_unknown_event_scores_zero():
    assert default_weights.weight("teleport") == 0
    assert default_weights.weight("") == 0


def test_event_type_is_case_insensitive():
    assert default_weights.weight("LOGIN") == 10


def test_score_sums_counts():
    counts = {"login": 2, "mcq_correct": 1, "something_else": 7}
    assert default_weights.score(counts) == 45


def test_custom_table():
    weights = EventWeights({"Login": 1, "feed_like": 3})
    assert weights.score({"login": 4, "feed_like": 2}) == 10
    assert weights.as_dict() == {"login": 1, "feed_like": 3}


def test_negative_weight_rejected():
    with pytest.raises(ValueError):
        EventWeights({"login": -1})
