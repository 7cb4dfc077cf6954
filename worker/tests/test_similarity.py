import pytest

from audionotes.services.similarity import containment, is_duplicate, jaccard, token_set


def test_token_set_uses_content_words():
    assert token_set("The budget and the new timeline") == frozenset({"budget", "new", "timeline"})


def test_jaccard_values():
    assert jaccard({"a", "b"}, {"a", "b"}) == 1.0
    assert jaccard({"a", "b"}, {"b", "c"}) == pytest.approx(1 / 3)
    assert jaccard({"a"}, {"b"}) == 0.0
    assert jaccard(set(), set()) == 0.0


def test_jaccard_is_symmetric_and_bounded():
    samples = [set(), {"x"}, {"x", "y"}, {"y", "z", "w"}, {"x", "y", "z", "w"}]
    for a in samples:
        for b in samples:
            score = jaccard(a, b)
            assert 0.0 <= score <= 1.0
            assert score == jaccard(b, a)


def test_is_duplicate_threshold_is_strict():
    a, b = {"one", "two", "three"}, {"one", "two", "four"}
    assert jaccard(a, b) == 0.5
    assert is_duplicate(a, b, 0.4)
    assert not is_duplicate(a, b, 0.5)


def test_containment():
    assert containment({"a", "b"}, {"a", "b", "c", "d"}) == 1.0
    assert containment({"a", "b", "c", "d"}, {"a", "b"}) == 0.5
    assert containment(set(), {"a"}) == 0.0
