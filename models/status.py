"""Pipeline status shared by the whole session.

Exactly one run is in flight at a time, so the status is a single
session-wide value rather than a per-article field.

Run topologies:
    Discovery:      READY -> DISCOVERING -> READY
    Full pipeline:  READY -> ANALYZING_SEO -> DRAFTING -> FACT_CHECKING -> READY
    Legacy draft:   READY -> DRAFTING -> READY

REVIEW_REQUIRED and PUBLISHED are available to UI consumers; runs do not
enter them.
"""

from enum import Enum


class PipelineStatus(str, Enum):
    """Current phase of the session's pipeline."""

    READY = "ready"
    DISCOVERING = "discovering"
    ANALYZING_SEO = "analyzing_seo"
    DRAFTING = "drafting"
    FACT_CHECKING = "fact_checking"
    REVIEW_REQUIRED = "review_required"
    PUBLISHED = "published"

    @property
    def is_busy(self) -> bool:
        """True unless the pipeline is idle and can accept a new run."""
        return self is not PipelineStatus.READY
