"""Shared fixtures: a network-free configuration, a seeded scorer and logger cleanup."""

import logging
import random

import pytest

from config import Config
from observability.logging import clear_context
from scoring import PlaceholderScorer


@pytest.fixture
def config(tmp_path):
    """Config that never reaches the network: no grounding, short timers."""
    return Config(
        gemini_api_key="test-key",
        search_grounding=False,
        agent_timeout_seconds=2.0,
        autopilot_interval_seconds=0.01,
        log_dir=tmp_path / "log",
    )


@pytest.fixture
def scorer():
    return PlaceholderScorer(rng=random.Random(42))


@pytest.fixture
def restore_root_logger():
    """Put back the root logger handlers that setup_logging() replaces."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    clear_context()
