"""Configuration management for the TrendGenius content pipeline.

This module provides centralized configuration for all pipeline components.
All settings are loaded from environment variables with sensible defaults.

Environment Variables:
    Required:
        GEMINI_API_KEY: Google Gemini API key for the agents

    Models (PydanticAI format - provider:model, or openai:{name}@{base_url}):
        DISCOVERY_MODEL: Model for trend discovery
        SEO_MODEL: Model for SEO/AEO keyword analysis
        WRITER_MODEL: Model for article drafting in the full pipeline
        GENERATOR_MODEL: Model for single-stage drafts

    Pipeline Behavior:
        DEFAULT_CATEGORY: Category selected at startup
        SEARCH_GROUNDING: Enable Google Search grounding on text agents
        MAX_TRENDS: Trends kept per discovery run
        MAX_ARTICLE_SOURCES: Citations snapshotted into each article
        RELEVANCE_FLOOR / RELEVANCE_CEILING: Placeholder relevance band
        SUMMARY_MAX_CHARS: Summary truncation in the full pipeline
        AGENT_TIMEOUT_SECONDS: Wall-clock limit for one agent call
        AGENT_REQUEST_LIMIT: Model requests allowed per agent call
        AUTOPILOT_INTERVAL_SECONDS: Delay between autopilot discovery checks

    Optional Features:
        ENABLE_LOGFIRE: Enable Logfire/OpenTelemetry tracing
        LOGFIRE_TOKEN: Logfire authentication token

    Logging:
        LOG_DIR: Directory for log files
        LOG_LEVEL: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_BACKUP_COUNT: Number of rotated log files to keep
        LOG_MAX_BYTES: Max log file size in bytes (0 = time-based rotation)
        LOG_FORMAT: Log format ('text' or 'json' for structured logging)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from models.category import Category, normalize_category

DEFAULT_MODEL = "google-gla:gemini-3-flash-preview"


def _env(key: str, default: str = "") -> str:
    """Get string environment variable with optional default.

    Args:
        key: Environment variable name
        default: Value to return if not set

    Returns:
        Environment variable value or default
    """
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Raises:
        ValueError: If value is set but cannot be parsed as integer
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"Invalid integer value for {key}: '{val}'")


def _env_float(key: str, default: float) -> float:
    """Get float environment variable with default.

    Raises:
        ValueError: If value is set but cannot be parsed as float
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"Invalid float value for {key}: '{val}'")


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable with default.

    Recognizes truthy values: '1', 'true', 'yes', 'on'
    Recognizes falsy values: '0', 'false', 'no', 'off'
    """
    val = os.environ.get(key, "").lower()
    if val in ("1", "true", "yes", "on"):
        return True
    if val in ("0", "false", "no", "off"):
        return False
    return default


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    All settings can be overridden via environment variables. Use Config.load()
    to create an instance with values from the environment.

    Example:
        >>> config = Config.load()
        >>> if error := config.validate():
        ...     print(f"Config error: {error}")
    """

    # === Required ===
    gemini_api_key: str = ""  # GEMINI_API_KEY - Google AI API key

    # === AI Models ===
    discovery_model: str = DEFAULT_MODEL  # DISCOVERY_MODEL - Trend discovery
    seo_model: str = DEFAULT_MODEL  # SEO_MODEL - Keyword/question research
    writer_model: str = DEFAULT_MODEL  # WRITER_MODEL - Full pipeline drafting
    generator_model: str = DEFAULT_MODEL  # GENERATOR_MODEL - Single-stage drafts

    # === Discovery & Content ===
    default_category: Category = Category.TECHNOLOGY  # DEFAULT_CATEGORY
    search_grounding: bool = True  # SEARCH_GROUNDING - Google Search grounding on text agents
    max_trends: int = 5  # MAX_TRENDS - Trends kept per discovery
    max_article_sources: int = 3  # MAX_ARTICLE_SOURCES - Citations per article
    relevance_floor: int = 80  # RELEVANCE_FLOOR - Placeholder relevance band (low)
    relevance_ceiling: int = 99  # RELEVANCE_CEILING - Placeholder relevance band (high)
    summary_max_chars: int = 280  # SUMMARY_MAX_CHARS - Full pipeline summary length

    # === Agent Calls ===
    agent_timeout_seconds: float = 120.0  # AGENT_TIMEOUT_SECONDS - Per-call wall clock limit
    agent_request_limit: int = 5  # AGENT_REQUEST_LIMIT - Model requests per call

    # === Autopilot ===
    autopilot_interval_seconds: float = 60.0  # AUTOPILOT_INTERVAL_SECONDS

    # === Logging Configuration ===
    log_dir: Path = field(default_factory=lambda: Path("log"))  # LOG_DIR
    log_level: str = "INFO"  # LOG_LEVEL - DEBUG, INFO, WARNING, ERROR
    log_backup_count: int = 14  # LOG_BACKUP_COUNT - Number of rotated logs to keep
    log_max_bytes: int = 0  # LOG_MAX_BYTES - Max file size (0 = time-based rotation)
    log_format: str = "text"  # LOG_FORMAT - 'text' or 'json' for structured logging

    # === Optional: Observability ===
    # Requires: pip install logfire
    enable_logfire: bool = False  # ENABLE_LOGFIRE - Enable distributed tracing
    logfire_token: str = ""  # LOGFIRE_TOKEN - Authentication token

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment variables.

        Raises:
            ValueError: If a numeric variable or DEFAULT_CATEGORY is malformed
        """
        return cls(
            gemini_api_key=_env("GEMINI_API_KEY"),
            discovery_model=_env("DISCOVERY_MODEL", DEFAULT_MODEL),
            seo_model=_env("SEO_MODEL", DEFAULT_MODEL),
            writer_model=_env("WRITER_MODEL", DEFAULT_MODEL),
            generator_model=_env("GENERATOR_MODEL", DEFAULT_MODEL),
            default_category=normalize_category(_env("DEFAULT_CATEGORY", Category.TECHNOLOGY.value)),
            search_grounding=_env_bool("SEARCH_GROUNDING", True),
            max_trends=_env_int("MAX_TRENDS", 5),
            max_article_sources=_env_int("MAX_ARTICLE_SOURCES", 3),
            relevance_floor=_env_int("RELEVANCE_FLOOR", 80),
            relevance_ceiling=_env_int("RELEVANCE_CEILING", 99),
            summary_max_chars=_env_int("SUMMARY_MAX_CHARS", 280),
            agent_timeout_seconds=_env_float("AGENT_TIMEOUT_SECONDS", 120.0),
            agent_request_limit=_env_int("AGENT_REQUEST_LIMIT", 5),
            autopilot_interval_seconds=_env_float("AUTOPILOT_INTERVAL_SECONDS", 60.0),
            log_dir=Path(_env("LOG_DIR", "log")),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            log_backup_count=_env_int("LOG_BACKUP_COUNT", 14),
            log_max_bytes=_env_int("LOG_MAX_BYTES", 0),
            log_format=_env("LOG_FORMAT", "text").lower(),
            enable_logfire=_env_bool("ENABLE_LOGFIRE", False),
            logfire_token=_env("LOGFIRE_TOKEN"),
        )

    def validate(self) -> str | None:
        """Validate configuration for required fields and valid values.

        Checks:
            - GEMINI_API_KEY is set (unless every model is local or a test model)
            - Counts and limits are positive
            - Relevance band is within 0-100 and ordered
            - Logging settings are recognized

        Returns:
            Error message string if invalid, None if valid.
        """
        models = (self.discovery_model, self.seo_model, self.writer_model, self.generator_model)
        needs_key = any(m.startswith("google") for m in models)
        if needs_key and not self.gemini_api_key:
            return "GEMINI_API_KEY environment variable is required"
        if self.max_trends <= 0:
            return "MAX_TRENDS must be positive"
        if self.max_article_sources < 0:
            return "MAX_ARTICLE_SOURCES must be non-negative"
        if not 0 <= self.relevance_floor <= self.relevance_ceiling <= 100:
            return "RELEVANCE_FLOOR and RELEVANCE_CEILING must satisfy 0 <= floor <= ceiling <= 100"
        if self.summary_max_chars <= 0:
            return "SUMMARY_MAX_CHARS must be positive"
        if self.agent_timeout_seconds <= 0:
            return "AGENT_TIMEOUT_SECONDS must be positive"
        if self.agent_request_limit <= 0:
            return "AGENT_REQUEST_LIMIT must be positive"
        if self.autopilot_interval_seconds <= 0:
            return "AUTOPILOT_INTERVAL_SECONDS must be positive"
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return f"Invalid LOG_LEVEL '{self.log_level}' - must be DEBUG, INFO, WARNING, ERROR, or CRITICAL"
        if self.log_format not in ("text", "json"):
            return f"Invalid LOG_FORMAT '{self.log_format}' - must be 'text' or 'json'"
        if self.log_backup_count < 0:
            return "LOG_BACKUP_COUNT must be non-negative"
        if self.log_max_bytes < 0:
            return "LOG_MAX_BYTES must be non-negative"
        return None
