"""Trend and citation models produced by the discovery agent.

A discovery run returns a handful of Trends for the selected category plus
the GroundingSources the model cited while searching the web. Both lists
are replaced wholesale by the next discovery run.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Competition(str, Enum):
    """How crowded a topic is among publishers."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class GroundingSource(BaseModel):
    """Web citation returned with a grounded model response.

    Attributes:
        title: Page or site title (defaults to "Source" when missing)
        uri: Link to the cited resource
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(default="Source", description="Citation title")
    uri: str = Field(description="Citation URL")

    def __str__(self) -> str:
        return f"GroundingSource('{self.title[:40]}', {self.uri})"


class Trend(BaseModel):
    """A candidate topic surfaced by trend discovery.

    Attributes:
        topic: Short topic name, used as the article subject
        description: One-line explanation of why the topic is trending
        relevance: Relevance score (0-100), currently from the placeholder scorer
        competition: Publisher competition, currently from the placeholder scorer
        search_volume: Free-text search volume hint when the model provides one

    Example:
        >>> trend = Trend(topic="AI Regulation", description="New laws proposed", relevance=91)
    """

    model_config = ConfigDict(frozen=True)

    topic: str = Field(description="Short topic name")
    description: str = Field(description="Why the topic is trending")
    relevance: int = Field(ge=0, le=100, description="Relevance score (0-100)")
    competition: Competition | None = Field(default=None, description="Publisher competition")
    search_volume: str | None = Field(default=None, description="Search volume hint")

    def __str__(self) -> str:
        return f"Trend('{self.topic[:40]}', relevance={self.relevance})"
