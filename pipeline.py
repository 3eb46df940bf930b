"""Pipeline orchestration for trend discovery and content generation.

This module sequences the agents for one run at a time and commits the
results to the session store:

Discovery:
    READY -> DISCOVERING -> READY
    1. DISCOVER: Grounded call listing today's trends for the category
    2. PARSE: Trends from the text, citations from the grounding metadata
    3. COMMIT: Replace the store's trends and sources

Full content pipeline (selecting a trend):
    READY -> ANALYZING_SEO -> DRAFTING -> FACT_CHECKING -> READY
    1. ANALYZE_SEO: Structured keywords/questions for the topic
    2. DRAFT: Grounded article written against the SEO research
    3. FACT_CHECK: Parse title/summary/FAQ, score, snapshot citations
    4. COMMIT: Prepend a READY GeneratedContent to history

Legacy draft (single-stage):
    READY -> DRAFTING -> READY, committing a DRAFT GeneratedContent

Failure Handling:
    Any error in a phase abandons the run: status returns to READY, the
    failure message is recorded, and nothing partial is committed.

Mutual Exclusion:
    SessionStore.begin_run() checks and claims the pipeline before the
    first await. A run requested while another is in flight is a no-op
    that issues no model call.

Autopilot:
    A repeating asyncio task that starts a discovery every interval when
    the pipeline is idle. Discoveries run as their own tasks, so turning
    autopilot off stops new runs without aborting one in flight.
"""

import asyncio
import logging
import time
import uuid
from collections.abc import Coroutine
from typing import Any

from agents import DiscoveryAgent, GeneratorAgent, GroundedText, SeoAgent, WriterAgent
from config import Config
from models.category import Category, normalize_category
from models.content import ContentStatus, GeneratedContent
from models.status import PipelineStatus
from models.trend import Trend
from observability.logging import clear_context, set_phase, set_run_context
from observability.tracing import setup_tracing, trace_operation
from parsing import extract_faq, extract_grounding_sources, extract_trends, parse_article
from scoring import PlaceholderScorer
from store import SessionStore

logger = logging.getLogger(__name__)

# === Progress messages shown on the dashboard ===
MSG_SCANNING = "Scanning popular web sources for trends..."
MSG_SCAN_COMPLETE = "Scan complete! Analysis finished."
MSG_SCAN_FAILED = "Error scanning trends. Check API limits."
MSG_ANALYZING_SEO = "Analyzing SEO/AEO keywords for: {topic}..."
MSG_DRAFTING = "Drafting article for: {topic}..."
MSG_FACT_CHECKING = "Fact-checking and scoring: {topic}..."
MSG_GENERATING = "Generating autonomous content for: {topic}..."
MSG_GENERATED = "Content generated successfully."
MSG_GENERATE_FAILED = "Failed to generate content."
MSG_CANCELLED = "Run cancelled."


def _new_run_id() -> str:
    return uuid.uuid4().hex[:8]


class Pipeline:
    """Orchestrates discovery and content runs for one dashboard session.

    Components:
        - SessionStore: In-memory trends, sources, history and status
        - DiscoveryAgent / SeoAgent / WriterAgent / GeneratorAgent: model calls
        - PlaceholderScorer: Stand-in relevance, competition and quality scores

    All agents and the scorer can be injected, which is how tests run the
    pipeline without a model.

    Example:
        >>> pipeline = Pipeline(Config.load())
        >>> trends = await pipeline.start_discovery(Category.TECHNOLOGY)
        >>> content = await pipeline.run_full_pipeline(trends[0])
        >>> pipeline.publish(content.id)
    """

    def __init__(
        self,
        config: Config,
        store: SessionStore | None = None,
        *,
        discovery: DiscoveryAgent | None = None,
        seo: SeoAgent | None = None,
        writer: WriterAgent | None = None,
        generator: GeneratorAgent | None = None,
        scorer: PlaceholderScorer | None = None,
    ):
        """Initialize pipeline with all components.

        Args:
            config: Application configuration
            store: Session store (new empty store if omitted)
            discovery, seo, writer, generator: Agent overrides
            scorer: Scorer override
        """
        self.config = config
        self.store = store or SessionStore(config.default_category)
        self.discovery = discovery or DiscoveryAgent(config)
        self.seo = seo or SeoAgent(config)
        self.writer = writer or WriterAgent(config)
        self.generator = generator or GeneratorAgent(config)
        self.scorer = scorer or PlaceholderScorer(
            relevance_band=(config.relevance_floor, config.relevance_ceiling),
        )

        self._autopilot_task: asyncio.Task | None = None
        self._runs: set[asyncio.Task] = set()

        # Optional: Distributed tracing
        if config.enable_logfire:
            setup_tracing(enabled=True, service_name="trendgenius", token=config.logfire_token)

    # === Discovery ===

    async def start_discovery(self, category: Category | str | None = None) -> list[Trend] | None:
        """Run one discovery and replace the session's trends and sources.

        Args:
            category: Category to scan; also becomes the selected category.
                      Defaults to the store's current category.

        Returns:
            The new trends (possibly empty), or None if the run was rejected
            because the pipeline is busy or it failed (see store.last_error)

        Raises:
            ValueError: If category is not a known category
        """
        selected = normalize_category(category) if category is not None else self.store.category
        if not self.store.begin_run(PipelineStatus.DISCOVERING, MSG_SCANNING):
            return None

        self.store.set_category(selected)
        set_run_context(_new_run_id(), PipelineStatus.DISCOVERING.value)
        start = time.monotonic()
        logger.info("Discovery started | category=%s", selected)

        try:
            with trace_operation("discovery", {"category": selected.value}) as attrs:
                response = await self.discovery.discover(selected)
                trends = extract_trends(
                    response.text, selected.value, self.scorer, limit=self.config.max_trends,
                )
                sources = extract_grounding_sources(response.chunks)
                attrs["trends"] = len(trends)
                attrs["sources"] = len(sources)
        except asyncio.CancelledError:
            logger.info("Discovery cancelled | category=%s", selected)
            self.store.fail_run(MSG_CANCELLED)
            clear_context()
            raise
        except Exception as e:
            logger.error(
                "Discovery failed | category=%s type=%s error=%s",
                selected, type(e).__name__, e, exc_info=True,
            )
            self.store.fail_run(MSG_SCAN_FAILED, error=str(e))
            clear_context()
            return None

        self.store.replace_discovery(trends, sources)
        self.store.finish_run(MSG_SCAN_COMPLETE)
        logger.info(
            "Discovery complete | category=%s trends=%d sources=%d duration=%.1fs",
            selected, len(trends), len(sources), time.monotonic() - start,
        )
        clear_context()
        return trends

    # === Content generation ===

    async def run_full_pipeline(self, trend: Trend) -> GeneratedContent | None:
        """Run SEO analysis, drafting and fact-checking for a trend.

        SEO keywords/questions feed the writer prompt. The fact-checking
        phase parses and scores the article; it makes no model call.

        Args:
            trend: Selected trend

        Returns:
            The committed READY article, or None if rejected or failed
        """
        topic = trend.topic
        category = self.store.category
        if not self.store.begin_run(PipelineStatus.ANALYZING_SEO, MSG_ANALYZING_SEO.format(topic=topic)):
            return None

        set_run_context(_new_run_id(), PipelineStatus.ANALYZING_SEO.value)
        start = time.monotonic()
        logger.info("Content pipeline started | topic=%s category=%s", topic[:60], category)

        try:
            with trace_operation("content_pipeline", {"topic": topic, "category": category.value}) as attrs:
                seo = await self.seo.analyze(topic)
                attrs["keywords"] = len(seo.keywords)

                self._advance(PipelineStatus.DRAFTING, MSG_DRAFTING.format(topic=topic))
                response = await self.writer.write(topic, category, seo)

                self._advance(PipelineStatus.FACT_CHECKING, MSG_FACT_CHECKING.format(topic=topic))
                content = self._build_content(
                    topic,
                    category,
                    response,
                    status=ContentStatus.READY,
                    summary_max_chars=self.config.summary_max_chars,
                )
                attrs["word_count"] = content.metrics.word_count
                self.store.add_content(content)
        except asyncio.CancelledError:
            logger.info("Content pipeline cancelled | topic=%s", topic[:60])
            self.store.fail_run(MSG_CANCELLED)
            clear_context()
            raise
        except Exception as e:
            logger.error(
                "Content pipeline failed | topic=%s phase=%s type=%s error=%s",
                topic[:60], self.store.status.value, type(e).__name__, e, exc_info=True,
            )
            self.store.fail_run(MSG_GENERATE_FAILED, error=str(e))
            clear_context()
            return None

        self.store.finish_run(MSG_GENERATED)
        logger.info(
            "Content pipeline complete | id=%s title=%s words=%d seo=%d sources=%d duration=%.1fs",
            content.id[:8], content.title[:60], content.metrics.word_count,
            content.metrics.seo_score, len(content.sources), time.monotonic() - start,
        )
        clear_context()
        return content

    async def generate_draft(self, trend: Trend) -> GeneratedContent | None:
        """Generate a DRAFT article in a single model call (simple topology).

        Args:
            trend: Selected trend

        Returns:
            The committed DRAFT article, or None if rejected or failed
        """
        topic = trend.topic
        category = self.store.category
        if not self.store.begin_run(PipelineStatus.DRAFTING, MSG_GENERATING.format(topic=topic)):
            return None

        set_run_context(_new_run_id(), PipelineStatus.DRAFTING.value)
        logger.info("Draft generation started | topic=%s category=%s", topic[:60], category)

        try:
            with trace_operation("draft_generation", {"topic": topic, "category": category.value}):
                response = await self.generator.generate(topic, category)
                content = self._build_content(topic, category, response, status=ContentStatus.DRAFT)
                self.store.add_content(content)
        except asyncio.CancelledError:
            logger.info("Draft generation cancelled | topic=%s", topic[:60])
            self.store.fail_run(MSG_CANCELLED)
            clear_context()
            raise
        except Exception as e:
            logger.error(
                "Draft generation failed | topic=%s type=%s error=%s",
                topic[:60], type(e).__name__, e, exc_info=True,
            )
            self.store.fail_run(MSG_GENERATE_FAILED, error=str(e))
            clear_context()
            return None

        self.store.finish_run(MSG_GENERATED)
        logger.info("Draft generated | id=%s title=%s", content.id[:8], content.title[:60])
        clear_context()
        return content

    def _advance(self, status: PipelineStatus, message: str) -> None:
        self.store.advance(status, message)
        set_phase(status.value)

    def _build_content(
        self,
        topic: str,
        category: Category,
        response: GroundedText,
        status: ContentStatus,
        summary_max_chars: int | None = None,
    ) -> GeneratedContent:
        """Assemble a history record from an agent response.

        Citations come from the response's own grounding, falling back to
        the sources of the discovery the trend came from.
        """
        draft = parse_article(response.text, topic, summary_max_chars=summary_max_chars)
        sources = extract_grounding_sources(response.chunks) or list(self.store.sources)
        return GeneratedContent(
            topic=topic,
            title=draft.title,
            summary=draft.summary,
            full_article=draft.content,
            faq=extract_faq(draft.content),
            sources=sources[:self.config.max_article_sources],
            category=category.value,
            status=status,
            metrics=self.scorer.metrics(draft.content),
        )

    # === Editor actions ===

    def publish(self, content_id: str) -> GeneratedContent:
        """Publish one article from history.

        Raises:
            KeyError: If no article has this id
        """
        return self.store.publish(content_id)

    def set_category(self, category: Category | str) -> Category:
        """Select the category used by the next run.

        Raises:
            ValueError: If category is not a known category
        """
        selected = self.store.set_category(category)
        logger.info("Category selected | category=%s", selected)
        return selected

    # === Autopilot ===

    @property
    def autopilot_running(self) -> bool:
        return self._autopilot_task is not None and not self._autopilot_task.done()

    def set_autopilot(self, enabled: bool) -> None:
        """Turn autopilot on or off. Idempotent.

        Enabling must happen inside a running event loop. Disabling stops
        future discoveries; a discovery already in flight completes.

        Raises:
            RuntimeError: If enabling outside a running event loop (the
                store's autopilot flag is left unchanged)
        """
        if enabled:
            # The flag only goes on once the timer task exists
            self._start_autopilot()
            self.store.set_autopilot(True)
        else:
            self.store.set_autopilot(False)
            self._stop_autopilot()

    def _start_autopilot(self) -> None:
        if self.autopilot_running:
            return
        loop = asyncio.get_running_loop()
        self._autopilot_task = loop.create_task(self._autopilot_loop(), name="autopilot")
        logger.info("Autopilot enabled | interval=%ss", self.config.autopilot_interval_seconds)

    def _stop_autopilot(self) -> asyncio.Task | None:
        task, self._autopilot_task = self._autopilot_task, None
        if task is not None and not task.done():
            task.cancel()
            logger.info("Autopilot disabled")
        return task

    async def _autopilot_loop(self) -> None:
        """Start a discovery every interval while autopilot is on and the pipeline is idle."""
        started = 0
        try:
            while self.store.autopilot:
                await asyncio.sleep(self.config.autopilot_interval_seconds)
                if not self.store.autopilot:
                    break
                if self.store.is_busy:
                    logger.debug("Autopilot tick skipped, pipeline busy | status=%s", self.store.status.value)
                    continue
                started += 1
                logger.info("Autopilot starting discovery | category=%s count=%d", self.store.category, started)
                self._spawn(self.start_discovery())
        except asyncio.CancelledError:
            logger.info("Autopilot stopped | discoveries=%d", started)
            raise

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run a coroutine as a tracked task that outlives the autopilot loop."""
        task = asyncio.get_running_loop().create_task(coro)
        self._runs.add(task)
        task.add_done_callback(self._runs.discard)
        return task

    async def wait_for_runs(self) -> None:
        """Wait for every autopilot-spawned run that is still in flight."""
        if self._runs:
            await asyncio.gather(*list(self._runs), return_exceptions=True)

    async def close(self) -> None:
        """Stop autopilot and let in-flight runs finish."""
        self.store.set_autopilot(False)
        task = self._stop_autopilot()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        await self.wait_for_runs()

    async def __aenter__(self) -> "Pipeline":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
