"""Content categories offered by the dashboard.

The dashboard lets the editor pick one of a fixed set of categories. The
selected category frames the discovery prompt, the article prompt, and is
stamped on every generated article.

Category values are the display names used in prompts and records, so a
Category can be interpolated directly into text.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Category(str, Enum):
    """Content categories available for trend discovery.

    Members:
        TECHNOLOGY: Consumer tech, software, hardware, platforms
        ARTIFICIAL_INTELLIGENCE: AI/ML research, products, and policy
        LIFESTYLE: Culture, travel, food, personal interest
        BUSINESS: Companies, markets, startups, economy
        HEALTH: Medicine, wellness, public health
    """

    TECHNOLOGY = "Technology"
    ARTIFICIAL_INTELLIGENCE = "Artificial Intelligence"
    LIFESTYLE = "Lifestyle"
    BUSINESS = "Business"
    HEALTH = "Health"

    def __str__(self) -> str:
        return self.value


# Map common shorthand from the command line or UI to categories.
_CATEGORY_ALIASES: dict[str, Category] = {
    "tech": Category.TECHNOLOGY,
    "technology": Category.TECHNOLOGY,
    "ai": Category.ARTIFICIAL_INTELLIGENCE,
    "ml": Category.ARTIFICIAL_INTELLIGENCE,
    "ai_ml": Category.ARTIFICIAL_INTELLIGENCE,
    "machine_learning": Category.ARTIFICIAL_INTELLIGENCE,
    "artificial_intelligence": Category.ARTIFICIAL_INTELLIGENCE,
    "lifestyle": Category.LIFESTYLE,
    "culture": Category.LIFESTYLE,
    "travel": Category.LIFESTYLE,
    "business": Category.BUSINESS,
    "biz": Category.BUSINESS,
    "finance": Category.BUSINESS,
    "economy": Category.BUSINESS,
    "markets": Category.BUSINESS,
    "health": Category.HEALTH,
    "wellness": Category.HEALTH,
    "medical": Category.HEALTH,
    "medicine": Category.HEALTH,
}

ALL_CATEGORIES: tuple[Category, ...] = tuple(Category)


def normalize_category(value: str | Category) -> Category:
    """Normalize a raw category value into a supported Category.

    Accepts enum members, display names ("Artificial Intelligence"),
    member names in any case ("health") and the shorthand aliases above.

    Args:
        value: Raw category from configuration, CLI, or UI

    Returns:
        Matching Category

    Raises:
        ValueError: If the value does not name a known category
    """
    if isinstance(value, Category):
        return value
    raw = str(value).strip()
    for category in Category:
        if raw.lower() == category.value.lower():
            return category
    normalized = raw.lower().replace(" ", "_").replace("-", "_").replace("/", "_")
    mapped = _CATEGORY_ALIASES.get(normalized)
    if mapped is not None:
        return mapped
    logger.warning("Unknown category | value=%s", value)
    choices = ", ".join(c.value for c in Category)
    raise ValueError(f"Unknown category '{value}' - must be one of: {choices}")
