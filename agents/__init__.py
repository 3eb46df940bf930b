"""PydanticAI agents for the TrendGenius content pipeline.

Each agent issues exactly one model call per operation and never retries:

DiscoveryAgent:
    Grounded Gemini call listing today's trends for a category.

SeoAgent:
    Schema-constrained call returning keywords and reader questions.

WriterAgent:
    Grounded call drafting the long-form article from topic + SEO data.

GeneratorAgent:
    Legacy single-stage draft (topic + category only).

Transport, API and timeout failures surface as AgentError.

Example:
    >>> from agents import DiscoveryAgent, SeoAgent, WriterAgent
    >>> discovery = DiscoveryAgent(config)
    >>> response = await discovery.discover(Category.TECHNOLOGY)
"""

from agents.base import AgentError, GroundedText
from agents.discovery import DiscoveryAgent
from agents.seo import SeoAgent
from agents.writer import GeneratorAgent, WriterAgent

__all__ = [
    "AgentError",
    "GroundedText",
    "DiscoveryAgent",
    "SeoAgent",
    "WriterAgent",
    "GeneratorAgent",
]
