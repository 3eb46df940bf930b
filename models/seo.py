"""Structured output of the SEO/AEO agent."""

from pydantic import BaseModel, Field


class SeoAnalysis(BaseModel):
    """Keyword and question lists used to steer the writer agent."""

    keywords: list[str] = Field(
        default_factory=list,
        description="Search keywords and key phrases to target (5-10 items)",
    )
    questions: list[str] = Field(
        default_factory=list,
        description="Questions readers ask that the article should answer directly (3-6 items)",
    )

    @classmethod
    def empty(cls) -> "SeoAnalysis":
        """Fallback used when the structured response cannot be validated."""
        return cls(keywords=[], questions=[])

    @property
    def is_empty(self) -> bool:
        return not self.keywords and not self.questions
