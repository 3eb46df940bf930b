import pytest

from config import DEFAULT_MODEL, Config
from models.category import Category

CONFIG_ENV_VARS = [
    "GEMINI_API_KEY", "DISCOVERY_MODEL", "SEO_MODEL", "WRITER_MODEL", "GENERATOR_MODEL",
    "DEFAULT_CATEGORY", "SEARCH_GROUNDING", "MAX_TRENDS", "MAX_ARTICLE_SOURCES",
    "RELEVANCE_FLOOR", "RELEVANCE_CEILING", "SUMMARY_MAX_CHARS", "AGENT_TIMEOUT_SECONDS",
    "AGENT_REQUEST_LIMIT", "AUTOPILOT_INTERVAL_SECONDS", "LOG_LEVEL", "LOG_FORMAT",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    config = Config.load()

    assert config.discovery_model == DEFAULT_MODEL
    assert config.default_category is Category.TECHNOLOGY
    assert config.search_grounding is True
    assert config.max_trends == 5
    assert config.max_article_sources == 3
    assert (config.relevance_floor, config.relevance_ceiling) == (80, 99)
    assert config.autopilot_interval_seconds == 60.0


def test_env_overrides(clean_env):
    clean_env.setenv("DEFAULT_CATEGORY", "wellness")
    clean_env.setenv("SEARCH_GROUNDING", "off")
    clean_env.setenv("MAX_TRENDS", "3")
    clean_env.setenv("AGENT_TIMEOUT_SECONDS", "30.5")
    clean_env.setenv("LOG_LEVEL", "debug")

    config = Config.load()

    assert config.default_category is Category.HEALTH
    assert config.search_grounding is False
    assert config.max_trends == 3
    assert config.agent_timeout_seconds == 30.5
    assert config.log_level == "DEBUG"


def test_malformed_numbers_raise(clean_env):
    clean_env.setenv("MAX_TRENDS", "five")

    with pytest.raises(ValueError, match="MAX_TRENDS"):
        Config.load()


def test_unknown_category_raises(clean_env):
    clean_env.setenv("DEFAULT_CATEGORY", "Sports")

    with pytest.raises(ValueError):
        Config.load()


def test_validate_requires_key_for_gemini_models(clean_env):
    assert "GEMINI_API_KEY" in Config.load().validate()

    clean_env.setenv("GEMINI_API_KEY", "key")
    assert Config.load().validate() is None


def test_local_models_do_not_need_key():
    local = "openai:qwen@http://127.0.0.1:8080/v1"
    config = Config(discovery_model=local, seo_model=local, writer_model=local, generator_model=local)

    assert config.validate() is None


def test_validate_rejects_bad_values():
    assert Config(gemini_api_key="k", relevance_floor=95, relevance_ceiling=90).validate() is not None
    assert Config(gemini_api_key="k", max_trends=0).validate() is not None
    assert Config(gemini_api_key="k", log_format="xml").validate() is not None
