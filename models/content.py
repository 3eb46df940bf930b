"""Generated article models.

This module defines the records produced by a pipeline run:

Model Hierarchy:
    ArticleDraft: Title/summary/body parsed out of raw model text
    ContentMetrics: Quality signals attached to an article
    FaqItem: One question/answer pair from the article's FAQ section
    GeneratedContent: The committed unit of work kept in session history

GeneratedContent is frozen. The only post-creation change is a status
transition to published, which is expressed as a copy with a new status.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from models.trend import GroundingSource


class ContentStatus(str, Enum):
    """Lifecycle of a generated article.

    DRAFT: Produced by the single-stage generator
    READY: Produced by the full SEO/write/fact-check pipeline
    PUBLISHED: Explicitly published by the editor
    """

    DRAFT = "draft"
    READY = "ready"
    PUBLISHED = "published"


class ArticleDraft(BaseModel):
    """Article fields recovered from free-form model output."""

    title: str = Field(description="Article headline")
    summary: str = Field(description="Short summary paragraph")
    content: str = Field(description="Full markdown body as returned by the model")


class ContentMetrics(BaseModel):
    """Quantitative quality signals for a generated article.

    Attributes:
        seo_score: Search optimization score (0-100, higher is better)
        aeo_score: Answer-engine optimization score (0-100)
        readability: Readability score (0-100)
        word_count: Whitespace-delimited tokens in the article body
    """

    model_config = ConfigDict(frozen=True)

    seo_score: int = Field(ge=0, le=100)
    aeo_score: int = Field(ge=0, le=100)
    readability: int = Field(ge=0, le=100)
    word_count: int = Field(ge=0)


class FaqItem(BaseModel):
    """Question/answer pair extracted from an article."""

    model_config = ConfigDict(frozen=True)

    question: str
    answer: str = ""


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GeneratedContent(BaseModel):
    """An article produced by a pipeline run.

    Records are prepended to the session history and never deleted. The
    body, topic, category, sources and timestamp are fixed at creation;
    use with_status() to move a record to another lifecycle state.

    Attributes:
        id: Opaque unique identifier (uuid4 hex)
        topic: Trend topic the article was written about
        title: Parsed article title
        summary: Parsed summary paragraph
        full_article: Full markdown body
        faq: FAQ entries parsed from the body (may be empty)
        sources: Snapshot of up to N citations
        timestamp: Creation time (UTC)
        category: Category selected when the run started
        status: Lifecycle status
        metrics: Quality metrics
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    topic: str
    title: str
    summary: str
    full_article: str
    faq: tuple[FaqItem, ...] = ()
    sources: tuple[GroundingSource, ...] = ()
    timestamp: datetime = Field(default_factory=_utcnow)
    category: str
    status: ContentStatus = ContentStatus.DRAFT
    metrics: ContentMetrics

    def with_status(self, status: ContentStatus) -> "GeneratedContent":
        """Return a copy of this record with a new status and nothing else changed."""
        return self.model_copy(update={"status": status})

    def __str__(self) -> str:
        return f"GeneratedContent({self.id[:8]}, '{self.title[:50]}', {self.status.value})"
