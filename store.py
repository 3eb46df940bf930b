"""In-memory session state for the dashboard.

SessionStore is the single owner of everything a session knows: the
current trends and sources, the article history, the selected category,
the autopilot flag, and the pipeline status/progress message. Nothing is
persisted; a new process starts empty.

All mutation goes through the named commands below. The orchestrator uses
begin_run() as its mutual-exclusion guard: it checks and claims the
pipeline in one synchronous step, so two coroutines on the same event loop
can never both start a run.

UI consumers read snapshot() after every operation, or subscribe() to be
told about each status change.
"""

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import asdict, dataclass

from models.category import Category, normalize_category
from models.content import ContentStatus, GeneratedContent
from models.status import PipelineStatus
from models.trend import GroundingSource, Trend

logger = logging.getLogger(__name__)

StatusListener = Callable[[PipelineStatus, str], None]


@dataclass(frozen=True)
class SessionStats:
    """Derived statistics, recomputed from session state on demand.

    Attributes:
        trends_detected: Trends from the latest discovery
        articles_generated: Articles in history
        published_count: Articles with status published
        avg_seo_score: Mean SEO score rounded half-up (0 with no history)
        total_word_count: Sum of word counts across history
    """

    trends_detected: int = 0
    articles_generated: int = 0
    published_count: int = 0
    avg_seo_score: int = 0
    total_word_count: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def average_seo_score(history: Sequence[GeneratedContent]) -> int:
    """Mean SEO score across history, rounded half-up; 0 for an empty history."""
    if not history:
        return 0
    mean = sum(item.metrics.seo_score for item in history) / len(history)
    return math.floor(mean + 0.5)


def compute_stats(trends: Sequence[Trend], history: Sequence[GeneratedContent]) -> SessionStats:
    """Compute session statistics from trends and history."""
    return SessionStats(
        trends_detected=len(trends),
        articles_generated=len(history),
        published_count=sum(1 for item in history if item.status is ContentStatus.PUBLISHED),
        avg_seo_score=average_seo_score(history),
        total_word_count=sum(item.metrics.word_count for item in history),
    )


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session for rendering."""

    category: Category
    status: PipelineStatus
    message: str
    autopilot: bool
    trends: tuple[Trend, ...]
    sources: tuple[GroundingSource, ...]
    history: tuple[GeneratedContent, ...]
    stats: SessionStats
    last_error: str | None = None


class SessionStore:
    """Holds one session's state and exposes the commands that change it.

    Example:
        >>> store = SessionStore()
        >>> store.begin_run(PipelineStatus.DISCOVERING, "Scanning...")
        True
        >>> store.begin_run(PipelineStatus.DISCOVERING, "Scanning...")  # busy
        False
    """

    def __init__(self, category: Category | str = Category.TECHNOLOGY):
        self._category = normalize_category(category)
        self._status = PipelineStatus.READY
        self._message = ""
        self._autopilot = False
        self._trends: list[Trend] = []
        self._sources: list[GroundingSource] = []
        self._history: list[GeneratedContent] = []  # Most recent first
        self._last_error: str | None = None
        self._listeners: list[StatusListener] = []

    # === Read access ===

    @property
    def category(self) -> Category:
        return self._category

    @property
    def status(self) -> PipelineStatus:
        return self._status

    @property
    def message(self) -> str:
        return self._message

    @property
    def autopilot(self) -> bool:
        return self._autopilot

    @property
    def is_busy(self) -> bool:
        return self._status.is_busy

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def trends(self) -> tuple[Trend, ...]:
        return tuple(self._trends)

    @property
    def sources(self) -> tuple[GroundingSource, ...]:
        return tuple(self._sources)

    @property
    def history(self) -> tuple[GeneratedContent, ...]:
        return tuple(self._history)

    def get_content(self, content_id: str) -> GeneratedContent | None:
        for item in self._history:
            if item.id == content_id:
                return item
        return None

    def stats(self) -> SessionStats:
        return compute_stats(self._trends, self._history)

    def snapshot(self) -> SessionSnapshot:
        """Capture the full session state for a UI render."""
        return SessionSnapshot(
            category=self._category,
            status=self._status,
            message=self._message,
            autopilot=self._autopilot,
            trends=self.trends,
            sources=self.sources,
            history=self.history,
            stats=self.stats(),
            last_error=self._last_error,
        )

    # === Status listeners ===

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register a callback for status changes.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_status(self, status: PipelineStatus, message: str) -> None:
        self._status = status
        self._message = message
        logger.debug("Status changed | status=%s message=%s", status.value, message)
        for listener in list(self._listeners):
            try:
                listener(status, message)
            except Exception as e:
                logger.error("Status listener failed | error=%s", e, exc_info=True)

    # === Run lifecycle commands ===

    def begin_run(self, status: PipelineStatus, message: str) -> bool:
        """Claim the pipeline for a new run.

        Args:
            status: First phase of the run (must not be READY)
            message: Progress message for the UI

        Returns:
            False (and no state change) if another run is in progress
        """
        if status is PipelineStatus.READY:
            raise ValueError("A run cannot begin in the READY phase")
        if self.is_busy:
            logger.info(
                "Run rejected, pipeline busy | requested=%s current=%s",
                status.value, self._status.value,
            )
            return False
        self._last_error = None
        self._set_status(status, message)
        return True

    def advance(self, status: PipelineStatus, message: str) -> None:
        """Move the in-flight run to its next phase."""
        if not self.is_busy:
            raise RuntimeError(f"No run in progress to advance to {status.value}")
        self._set_status(status, message)

    def finish_run(self, message: str) -> None:
        """Complete the in-flight run and return to READY."""
        self._set_status(PipelineStatus.READY, message)

    def fail_run(self, message: str, error: str | None = None) -> None:
        """Abandon the in-flight run, record the failure, return to READY."""
        self._last_error = error or message
        self._set_status(PipelineStatus.READY, message)

    # === Data commands ===

    def replace_discovery(self, trends: Sequence[Trend], sources: Sequence[GroundingSource]) -> None:
        """Replace (not merge) the current trends and sources."""
        self._trends = list(trends)
        self._sources = list(sources)

    def add_content(self, content: GeneratedContent) -> None:
        """Prepend a new article to history."""
        if self.get_content(content.id) is not None:
            raise ValueError(f"Content id already in history: {content.id}")
        self._history.insert(0, content)

    def publish(self, content_id: str) -> GeneratedContent:
        """Mark one history entry as published.

        Only that entry's status changes; all other entries and fields are
        left as they were.

        Args:
            content_id: Id of the article to publish

        Returns:
            The published record

        Raises:
            KeyError: If no article has this id
        """
        for i, item in enumerate(self._history):
            if item.id != content_id:
                continue
            if item.status is ContentStatus.PUBLISHED:
                return item
            published = item.with_status(ContentStatus.PUBLISHED)
            self._history[i] = published
            logger.info("Content published | id=%s title=%s", content_id, item.title[:60])
            return published
        raise KeyError(content_id)

    def set_category(self, category: Category | str) -> Category:
        self._category = normalize_category(category)
        return self._category

    def set_autopilot(self, enabled: bool) -> None:
        self._autopilot = bool(enabled)
