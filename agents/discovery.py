"""Discovery agent: find what is trending in a category today.

One grounded Gemini call per discovery run. The model searches the web and
answers in prose, one "Topic: description" line per trend, which the
response parser turns into Trend records. Citations come back as
retrieval metadata alongside the text.
"""

import logging

from agents.base import GroundedText, GroundedTextAgent
from config import Config
from models.category import Category

logger = logging.getLogger(__name__)


DISCOVERY_PROMPT = """You are a trend analyst for a digital publication. You monitor news sites, \
social platforms and search interest to spot what readers care about right now.

## Output format
- One trend per line, formatted exactly as: Topic Name: one-sentence description
- No introduction, no closing remarks, no blank lines between trends
- Topic names are short (2-6 words); descriptions say why the topic is trending today

## Principles
- Prefer concrete news, breakthroughs and widely discussed events over evergreen subjects
- Use web search so every trend is current
- Do not invent events; if little is happening, list fewer trends"""


def build_discovery_message(category: Category | str, limit: int = 5) -> str:
    """Build the user message for a discovery run."""
    return (
        f"Find the top {limit} trending and most searched topics in the {category} category for today.\n"
        "Focus on news, breakthroughs, or popular discussions from major web sources.\n"
        "Provide the output in a clean format with a topic name, a brief description, "
        "and relevance score (1-100)."
    )


class DiscoveryAgent(GroundedTextAgent):
    """Finds trending topics for a category using Google Search grounding.

    Example:
        >>> discovery = DiscoveryAgent(config)
        >>> response = await discovery.discover(Category.TECHNOLOGY)
        >>> trends = extract_trends(response.text, "Technology", scorer)
    """

    name = "discovery"
    system_prompt = DISCOVERY_PROMPT

    def _configured_model(self, config: Config) -> str:
        return config.discovery_model

    async def discover(self, category: Category | str) -> GroundedText:
        """Ask the model for today's trends in a category.

        Args:
            category: Category to scan

        Returns:
            Raw response text plus retrieval chunks

        Raises:
            AgentError: If the call fails or times out
        """
        response = await self._complete(build_discovery_message(category, self.config.max_trends))
        logger.info(
            "Discovery response | category=%s chars=%d chunks=%d",
            category, len(response.text), len(response.chunks),
        )
        return response
