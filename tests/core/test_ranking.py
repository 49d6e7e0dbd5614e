"""Tests for artwork candidate ranking.

Language tier dominates score; ties keep provider order.
"""


def test_select_best_tier_dominates_score() -> None:
    """Test that an English match beats higher-scored other tiers."""
    from artwork_aggregator.core.ranking import ArtworkCandidate, select_best

    candidates = [
        ArtworkCandidate(url="fr", language="fr", score=5),
        ArtworkCandidate(url="en", language="en", score=1),
        ArtworkCandidate(url="none", language=None, score=9),
    ]

    best = select_best(candidates, "en")
    assert best is not None
    assert best.url == "en"

    best = select_best(list(reversed(candidates)), "en")
    assert best is not None
    assert best.url == "en"


def test_select_best_preferred_language_beats_english() -> None:
    """Test the full tier order: preferred > en > none > other."""
    from artwork_aggregator.core.ranking import ArtworkCandidate, select_best

    other = ArtworkCandidate(url="it", language="it", score=10)
    textless = ArtworkCandidate(url="none", language=None, score=8)
    english = ArtworkCandidate(url="en", language="en", score=6)
    german = ArtworkCandidate(url="de", language="de", score=1)

    assert select_best([other, textless, english, german], "de") == german
    assert select_best([other, textless, english], "de") == english
    assert select_best([other, textless], "de") == textless
    assert select_best([other], "de") == other


def test_select_best_empty_string_language_is_textless() -> None:
    """Test that an empty language counts as 'no language'."""
    from artwork_aggregator.core.ranking import ArtworkCandidate, select_best

    other = ArtworkCandidate(url="ja", language="ja", score=10)
    empty = ArtworkCandidate(url="empty", language="", score=0)

    assert select_best([other, empty], "de") == empty


def test_select_best_orders_by_score_within_tier() -> None:
    """Test that score decides inside a tier."""
    from artwork_aggregator.core.ranking import ArtworkCandidate, select_best

    candidates = [
        ArtworkCandidate(url="low", language="en", score=2.5),
        ArtworkCandidate(url="high", language="en", score=7.25),
        ArtworkCandidate(url="mid", language="en", score=5),
    ]

    best = select_best(candidates, "en")
    assert best is not None
    assert best.url == "high"


def test_select_best_is_stable_for_ties() -> None:
    """Test that equal (tier, score) keeps provider-returned order."""
    from artwork_aggregator.core.ranking import ArtworkCandidate, select_best

    first = ArtworkCandidate(url="first", language="en", score=3)
    second = ArtworkCandidate(url="second", language="en", score=3)

    assert select_best([first, second], "en") is first
    assert select_best([second, first], "en") is second


def test_select_best_empty_returns_none() -> None:
    """Test that an empty list yields None."""
    from artwork_aggregator.core.ranking import select_best

    assert select_best([], "en") is None


def test_parse_score_handles_strings_and_garbage() -> None:
    """Test score coercion used for likes and vote_average."""
    from artwork_aggregator.core.ranking import parse_score

    assert parse_score("12") == 12.0
    assert parse_score(5.5) == 5.5
    assert parse_score(None) == 0.0
    assert parse_score("lots") == 0.0
    assert parse_score("nan") == 0.0
    assert parse_score({"likes": 3}) == 0.0
