"""Placeholder scoring for trends and articles.

Nothing in the pipeline measures relevance, competition, or article
quality yet. PlaceholderScorer hands out pseudo-random values in fixed
bands so the dashboard has numbers to show, and keeps all of that
randomness in one replaceable object. Word count is the only real signal.

Swap in a real scorer by passing any object with the same three methods
to Pipeline(scorer=...).
"""

import logging
import random

from models.content import ContentMetrics
from models.trend import Competition
from parsing import count_words

logger = logging.getLogger(__name__)

# Inclusive bands for the placeholder quality metrics
SEO_SCORE_BAND = (70, 99)
AEO_SCORE_BAND = (65, 99)
READABILITY_BAND = (60, 95)


class PlaceholderScorer:
    """Stand-in scorer producing pseudo-random scores in fixed bands.

    Attributes:
        relevance_band: Inclusive (low, high) range for trend relevance
        competition_choices: Values competition is drawn from

    Example:
        >>> scorer = PlaceholderScorer(rng=random.Random(7))
        >>> 80 <= scorer.relevance() <= 99
        True
    """

    def __init__(
        self,
        relevance_band: tuple[int, int] = (80, 99),
        rng: random.Random | None = None,
    ):
        low, high = relevance_band
        if not 0 <= low <= high <= 100:
            raise ValueError(f"Invalid relevance band {relevance_band} - must satisfy 0 <= low <= high <= 100")
        self.relevance_band = (low, high)
        self.competition_choices = (Competition.MEDIUM, Competition.HIGH)
        self._rng = rng or random.Random()

    def relevance(self) -> int:
        return self._rng.randint(*self.relevance_band)

    def competition(self) -> Competition:
        return self._rng.choice(self.competition_choices)

    def metrics(self, article: str) -> ContentMetrics:
        """Score an article body.

        Args:
            article: Full markdown body

        Returns:
            ContentMetrics with placeholder scores and the real word count
        """
        metrics = ContentMetrics(
            seo_score=self._rng.randint(*SEO_SCORE_BAND),
            aeo_score=self._rng.randint(*AEO_SCORE_BAND),
            readability=self._rng.randint(*READABILITY_BAND),
            word_count=count_words(article),
        )
        logger.debug(
            "Placeholder metrics | seo=%d aeo=%d readability=%d words=%d",
            metrics.seo_score, metrics.aeo_score, metrics.readability, metrics.word_count,
        )
        return metrics
