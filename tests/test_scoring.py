import random

import pytest

from models.trend import Competition
from scoring import AEO_SCORE_BAND, READABILITY_BAND, SEO_SCORE_BAND, PlaceholderScorer


def test_relevance_stays_in_band():
    scorer = PlaceholderScorer(rng=random.Random(1))

    values = [scorer.relevance() for _ in range(200)]

    assert min(values) >= 80
    assert max(values) <= 99


def test_custom_band_and_competition_choices():
    scorer = PlaceholderScorer(relevance_band=(50, 50), rng=random.Random(2))

    assert scorer.relevance() == 50
    assert {scorer.competition() for _ in range(50)} <= {Competition.MEDIUM, Competition.HIGH}


def test_metrics_bands_and_real_word_count():
    scorer = PlaceholderScorer(rng=random.Random(3))

    metrics = scorer.metrics("one two three four five")

    assert SEO_SCORE_BAND[0] <= metrics.seo_score <= SEO_SCORE_BAND[1]
    assert AEO_SCORE_BAND[0] <= metrics.aeo_score <= AEO_SCORE_BAND[1]
    assert READABILITY_BAND[0] <= metrics.readability <= READABILITY_BAND[1]
    assert metrics.word_count == 5


def test_seeded_scorers_are_deterministic():
    a = PlaceholderScorer(rng=random.Random(9))
    b = PlaceholderScorer(rng=random.Random(9))

    assert [a.relevance() for _ in range(5)] == [b.relevance() for _ in range(5)]
    assert a.metrics("text") == b.metrics("text")


@pytest.mark.parametrize("band", [(90, 80), (-1, 50), (10, 101)])
def test_invalid_band_rejected(band):
    with pytest.raises(ValueError):
        PlaceholderScorer(relevance_band=band)
