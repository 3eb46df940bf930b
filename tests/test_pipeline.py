import asyncio

import pytest
from pydantic import ValidationError

from agents import AgentError
from models.category import Category
from models.content import ContentStatus
from models.status import PipelineStatus
from models.trend import GroundingSource, Trend
from pipeline import (
    MSG_GENERATE_FAILED,
    MSG_GENERATED,
    MSG_SCAN_COMPLETE,
    MSG_SCAN_FAILED,
    Pipeline,
)
from store import SessionStore

from fakes import FakeDiscovery, FakeGenerator, FakeSeo, FakeWriter, make_content, web_chunks

DISCOVERY_TEXT = "AI Regulation: New laws proposed\nQuantum Leap: breakthrough chip unveiled\n"
QUANTUM_LEAP = Trend(topic="Quantum Leap", description="breakthrough chip unveiled", relevance=90)


def make_pipeline(config, scorer, **agents):
    discovery = agents.pop("discovery", FakeDiscovery(DISCOVERY_TEXT, chunks=web_chunks(2)))
    return Pipeline(
        config,
        discovery=discovery,
        seo=agents.pop("seo", FakeSeo()),
        writer=agents.pop("writer", FakeWriter(chunks=web_chunks(5))),
        generator=agents.pop("generator", FakeGenerator()),
        scorer=scorer,
    )


def record_statuses(pipeline):
    seen = []
    pipeline.store.subscribe(lambda status, message: seen.append(status))
    return seen


async def wait_until(predicate, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.005)


def test_discovery_commits_trends_and_sources(config, scorer):
    pipeline = make_pipeline(config, scorer)
    statuses = record_statuses(pipeline)

    trends = asyncio.run(pipeline.start_discovery())

    assert [(t.topic, t.description) for t in trends] == [
        ("AI Regulation", "New laws proposed"),
        ("Quantum Leap", "breakthrough chip unveiled"),
    ]
    assert all(80 <= t.relevance <= 99 for t in trends)
    assert [s.uri for s in pipeline.store.sources] == ["https://news.example/0", "https://news.example/1"]
    assert pipeline.store.status is PipelineStatus.READY
    assert pipeline.store.message == MSG_SCAN_COMPLETE
    assert statuses == [PipelineStatus.DISCOVERING, PipelineStatus.READY]
    assert pipeline.store.stats().trends_detected == 2


def test_discovery_category_becomes_selection(config, scorer):
    discovery = FakeDiscovery(DISCOVERY_TEXT)
    pipeline = make_pipeline(config, scorer, discovery=discovery)

    asyncio.run(pipeline.start_discovery("ai"))

    assert discovery.calls == [Category.ARTIFICIAL_INTELLIGENCE]
    assert pipeline.store.category is Category.ARTIFICIAL_INTELLIGENCE


def test_empty_discovery_is_a_successful_run(config, scorer):
    pipeline = make_pipeline(config, scorer, discovery=FakeDiscovery("   "))

    trends = asyncio.run(pipeline.start_discovery())

    assert trends == []
    assert pipeline.store.message == MSG_SCAN_COMPLETE
    assert pipeline.store.last_error is None


def test_discovery_failure_keeps_previous_trends(config, scorer):
    discovery = FakeDiscovery(error=AgentError("discovery", "429 quota exceeded"))
    pipeline = make_pipeline(config, scorer, discovery=discovery)
    previous = [Trend(topic="Old", description="kept", relevance=88)]
    pipeline.store.replace_discovery(previous, [GroundingSource(uri="https://old.example")])

    result = asyncio.run(pipeline.start_discovery())

    assert result is None
    assert pipeline.store.status is PipelineStatus.READY
    assert pipeline.store.message == MSG_SCAN_FAILED
    assert "quota exceeded" in pipeline.store.last_error
    assert [t.topic for t in pipeline.store.trends] == ["Old"]
    assert len(pipeline.store.sources) == 1


def test_full_pipeline_prepends_ready_article(config, scorer):
    seo, writer = FakeSeo(), FakeWriter(chunks=web_chunks(5))
    pipeline = make_pipeline(config, scorer, seo=seo, writer=writer)
    pipeline.store.add_content(make_content(topic="Older topic"))
    statuses = record_statuses(pipeline)

    content = asyncio.run(pipeline.run_full_pipeline(QUANTUM_LEAP))

    history = pipeline.store.history
    assert len(history) == 2
    assert history[0] is content
    assert content.topic == "Quantum Leap"
    assert content.status is ContentStatus.READY
    assert content.category == "Technology"
    assert content.title == "Quantum Leap: The Chip That Changes Everything"
    assert [s.uri for s in content.sources] == [f"https://news.example/{i}" for i in range(3)]
    assert [item.question for item in content.faq] == ["What is the Quantum Leap chip?", "When will it ship?"]
    assert content.metrics.word_count > 0
    assert statuses == [
        PipelineStatus.ANALYZING_SEO,
        PipelineStatus.DRAFTING,
        PipelineStatus.FACT_CHECKING,
        PipelineStatus.READY,
    ]
    assert pipeline.store.message == MSG_GENERATED
    assert seo.calls == ["Quantum Leap"]
    assert writer.calls[0][2] is seo.analysis


def test_full_pipeline_falls_back_to_discovery_sources(config, scorer):
    pipeline = make_pipeline(config, scorer, writer=FakeWriter(chunks=[]))

    async def scenario():
        await pipeline.start_discovery()
        return await pipeline.run_full_pipeline(pipeline.store.trends[1])

    content = asyncio.run(scenario())

    assert content.sources == pipeline.store.sources
    assert len(content.sources) == 2


def test_shared_trends_and_sources_are_immutable(config, scorer):
    """An article shares source records with the session, so neither can be edited in place."""
    pipeline = make_pipeline(config, scorer, writer=FakeWriter(chunks=[]))

    async def scenario():
        await pipeline.start_discovery()
        return await pipeline.run_full_pipeline(pipeline.store.trends[0])

    content = asyncio.run(scenario())

    with pytest.raises(ValidationError):
        content.sources[0].uri = "https://other.example"
    with pytest.raises(ValidationError):
        pipeline.store.trends[0].topic = "Renamed"
    assert pipeline.store.sources[0].uri == "https://news.example/0"
    assert pipeline.store.trends[0].topic == "AI Regulation"


def test_full_pipeline_failure_commits_nothing(config, scorer):
    writer = FakeWriter(error=AgentError("writer", "503 unavailable"))
    pipeline = make_pipeline(config, scorer, writer=writer)

    content = asyncio.run(pipeline.run_full_pipeline(QUANTUM_LEAP))

    assert content is None
    assert pipeline.store.history == ()
    assert pipeline.store.status is PipelineStatus.READY
    assert pipeline.store.message == MSG_GENERATE_FAILED
    assert "503" in pipeline.store.last_error


@pytest.mark.parametrize("run", ["run_full_pipeline", "generate_draft"])
def test_failed_history_commit_fails_the_run(config, scorer, monkeypatch, run):
    pipeline = make_pipeline(config, scorer)

    def reject(content):
        raise ValueError(f"duplicate content id: {content.id}")

    monkeypatch.setattr(pipeline.store, "add_content", reject)

    content = asyncio.run(getattr(pipeline, run)(QUANTUM_LEAP))

    assert content is None
    assert pipeline.store.history == ()
    assert pipeline.store.status is PipelineStatus.READY
    assert pipeline.store.message == MSG_GENERATE_FAILED
    assert "duplicate content id" in pipeline.store.last_error


def test_generate_draft_uses_single_stage(config, scorer):
    seo, generator = FakeSeo(), FakeGenerator(text="Title: Heat Pumps Rising\n\nThey are everywhere.")
    pipeline = make_pipeline(config, scorer, seo=seo, generator=generator)
    statuses = record_statuses(pipeline)
    trend = Trend(topic="Heat Pumps", description="Sales surge", relevance=85)

    content = asyncio.run(pipeline.generate_draft(trend))

    assert content.status is ContentStatus.DRAFT
    assert content.title == "Heat Pumps Rising"
    assert content.summary == "They are everywhere."
    assert statuses == [PipelineStatus.DRAFTING, PipelineStatus.READY]
    assert seo.calls == []
    assert generator.calls == [("Heat Pumps", Category.TECHNOLOGY)]


def test_generate_draft_defaults_for_unstructured_text(config, scorer):
    pipeline = make_pipeline(config, scorer, generator=FakeGenerator(text=""))

    content = asyncio.run(pipeline.generate_draft(QUANTUM_LEAP))

    assert content.title == "Deep Dive: Quantum Leap"
    assert content.summary == "Automated summary of the latest trends."
    assert content.metrics.word_count == 0


def test_busy_pipeline_rejects_new_runs_without_calls(config, scorer):
    discovery = FakeDiscovery(DISCOVERY_TEXT)
    seo, generator = FakeSeo(), FakeGenerator()
    pipeline = make_pipeline(config, scorer, discovery=discovery, seo=seo, generator=generator)

    async def scenario():
        discovery.gate = asyncio.Event()
        first = asyncio.create_task(pipeline.start_discovery())
        await wait_until(lambda: discovery.calls)
        before = pipeline.store.snapshot()

        rejected = [
            await pipeline.start_discovery(),
            await pipeline.run_full_pipeline(QUANTUM_LEAP),
            await pipeline.generate_draft(QUANTUM_LEAP),
        ]

        assert pipeline.store.snapshot() == before
        discovery.gate.set()
        return rejected, await first

    rejected, trends = asyncio.run(scenario())

    assert rejected == [None, None, None]
    assert len(discovery.calls) == 1
    assert seo.calls == [] and generator.calls == []
    assert len(trends) == 2


def test_cancelled_run_returns_to_ready(config, scorer):
    discovery = FakeDiscovery(DISCOVERY_TEXT)
    pipeline = make_pipeline(config, scorer, discovery=discovery)

    async def scenario():
        discovery.gate = asyncio.Event()
        task = asyncio.create_task(pipeline.start_discovery())
        await wait_until(lambda: discovery.calls)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert pipeline.store.status is PipelineStatus.READY
    assert pipeline.store.trends == ()


def test_publish_through_pipeline(config, scorer):
    pipeline = make_pipeline(config, scorer)

    content = asyncio.run(pipeline.run_full_pipeline(QUANTUM_LEAP))
    published = pipeline.publish(content.id)

    assert published.status is ContentStatus.PUBLISHED
    assert pipeline.store.history[0] == published
    assert pipeline.store.stats().published_count == 1
    with pytest.raises(KeyError):
        pipeline.publish("unknown")


def test_category_change_applies_to_next_run(config, scorer):
    writer = FakeWriter()
    pipeline = make_pipeline(config, scorer, writer=writer)

    pipeline.set_category("Business")
    content = asyncio.run(pipeline.run_full_pipeline(QUANTUM_LEAP))

    assert writer.calls[0][1] is Category.BUSINESS
    assert content.category == "Business"


def test_autopilot_runs_discovery_until_disabled(config, scorer):
    discovery = FakeDiscovery(DISCOVERY_TEXT)
    pipeline = make_pipeline(config, scorer, discovery=discovery)

    async def scenario():
        pipeline.set_autopilot(True)
        task = pipeline._autopilot_task
        pipeline.set_autopilot(True)
        assert pipeline._autopilot_task is task

        await wait_until(lambda: len(discovery.calls) >= 2)
        pipeline.set_autopilot(False)
        pipeline.set_autopilot(False)
        await pipeline.wait_for_runs()
        calls = len(discovery.calls)
        await asyncio.sleep(config.autopilot_interval_seconds * 5)
        return calls

    calls = asyncio.run(scenario())

    assert len(discovery.calls) == calls
    assert not pipeline.autopilot_running
    assert pipeline.store.autopilot is False
    assert len(pipeline.store.trends) == 2


def test_stopping_autopilot_lets_inflight_discovery_finish(config, scorer):
    discovery = FakeDiscovery(DISCOVERY_TEXT)
    pipeline = make_pipeline(config, scorer, discovery=discovery)

    async def scenario():
        discovery.gate = asyncio.Event()
        pipeline.set_autopilot(True)
        await wait_until(lambda: discovery.calls)
        pipeline.set_autopilot(False)
        assert pipeline.store.status is PipelineStatus.DISCOVERING

        discovery.gate.set()
        await pipeline.close()

    asyncio.run(scenario())

    assert len(discovery.calls) == 1
    assert pipeline.store.status is PipelineStatus.READY
    assert pipeline.store.message == MSG_SCAN_COMPLETE
    assert len(pipeline.store.trends) == 2


def test_close_stops_autopilot(config, scorer):
    pipeline = make_pipeline(config, scorer)

    async def scenario():
        async with pipeline:
            pipeline.set_autopilot(True)
            assert pipeline.autopilot_running

    asyncio.run(scenario())

    assert not pipeline.autopilot_running
    assert pipeline.store.autopilot is False


def test_pipeline_uses_given_store(config, scorer):
    store = SessionStore(Category.HEALTH)
    pipeline = Pipeline(
        config, store,
        discovery=FakeDiscovery(DISCOVERY_TEXT), seo=FakeSeo(), writer=FakeWriter(),
        generator=FakeGenerator(), scorer=scorer,
    )

    asyncio.run(pipeline.start_discovery())

    assert pipeline.store is store
    assert store.category is Category.HEALTH
    assert len(store.trends) == 2

def test_enabling_autopilot_outside_event_loop_leaves_flag_off(config, scorer):
    pipeline = make_pipeline(config, scorer)

    with pytest.raises(RuntimeError):
        pipeline.set_autopilot(True)

    assert pipeline.store.autopilot is False
    assert not pipeline.autopilot_running
    pipeline.set_autopilot(False)
