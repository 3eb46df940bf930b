"""Pydantic models for the TrendGenius content pipeline.

This package contains all data models used throughout the pipeline:

Category:
    The five dashboard categories, with normalize_category() for user input.

Trend, GroundingSource, Competition:
    Output of trend discovery (topics plus web citations).

SeoAnalysis:
    Schema-constrained output of the SEO/AEO agent (keywords, questions).

ArticleDraft, ContentMetrics, FaqItem, GeneratedContent, ContentStatus:
    Parsed article fields and the committed, immutable history record.

PipelineStatus:
    Session-wide phase of the orchestrator.

Example:
    >>> from models import Category, Trend
    >>> trend = Trend(topic="Quantum Leap", description="New chip", relevance=88)
"""

from models.category import ALL_CATEGORIES, Category, normalize_category
from models.content import (
    ArticleDraft,
    ContentMetrics,
    ContentStatus,
    FaqItem,
    GeneratedContent,
)
from models.seo import SeoAnalysis
from models.status import PipelineStatus
from models.trend import Competition, GroundingSource, Trend

__all__ = [
    "ALL_CATEGORIES",
    "Category",
    "normalize_category",
    "ArticleDraft",
    "ContentMetrics",
    "ContentStatus",
    "FaqItem",
    "GeneratedContent",
    "SeoAnalysis",
    "PipelineStatus",
    "Competition",
    "GroundingSource",
    "Trend",
]
