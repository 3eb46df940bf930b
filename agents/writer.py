"""Writer agents: turn a trend into a long-form article.

WriterAgent:
    The drafting stage of the full pipeline. Receives the topic, the
    category and the SEO agent's keywords/questions, and writes a grounded
    markdown article with an FAQ section answering those questions.

GeneratorAgent:
    Single-stage generator used by the simple (draft) topology. Same
    grounded call, no SEO input.

Both return raw text plus retrieval chunks; title, summary and FAQ are
recovered by the response parser.
"""

import logging

from agents.base import GroundedText, GroundedTextAgent
from config import Config
from models.category import Category
from models.seo import SeoAnalysis

logger = logging.getLogger(__name__)


WRITER_PROMPT = """You are a senior content writer for a digital publication, writing articles \
that rank in search engines and get quoted by AI answer engines.

## Article Structure
1. Title: a single markdown level-1 heading on the first line ("# ...")
2. Summary: a 2-sentence paragraph directly under the title
3. Body: 4-6 sections with "## " headings, short paragraphs, lists where useful
4. FAQ: a "## FAQ" section; each question as a "### " heading followed by a 1-3 sentence answer

## Writing Principles
- Use web search to check facts, figures and dates; never invent quotes or statistics
- Work the target keywords in naturally; do not stuff them
- Answer each reader question directly in its first sentence (answer-engine friendly)
- Professional yet accessible tone"""

GENERATOR_PROMPT = """You are a content writer for a digital publication.

Write high-quality, SEO-optimized blog articles in markdown. Start with the title as a \
level-1 heading ("# ..."), follow it with a 2-sentence summary paragraph, then the full article.
Use web search to keep facts current and never invent quotes or statistics."""


def build_writer_message(topic: str, category: Category | str, seo: SeoAnalysis) -> str:
    """Build the writer's user message, folding in the SEO research."""
    lines = [
        f'Write a long-form article about "{topic}" in the context of {category}.',
        "",
        "## Target Keywords",
    ]
    if seo.keywords:
        lines.extend(f"- {keyword}" for keyword in seo.keywords)
    else:
        lines.append("(none provided - choose natural search phrases for the topic)")

    lines.extend(["", "## Reader Questions (answer each in the FAQ)"])
    if seo.questions:
        lines.extend(f"- {question}" for question in seo.questions)
    else:
        lines.append("(none provided - answer the 3 most common reader questions)")

    lines.extend(["", "Use markdown for formatting."])
    return "\n".join(lines)


def build_generator_message(topic: str, category: Category | str) -> str:
    """Build the single-stage generator's user message."""
    return (
        f'Write a high-quality, SEO-optimized blog article about "{topic}" in the context of {category}.\n'
        "Include an engaging title, a 2-sentence summary, and the full article content.\n"
        "The tone should be professional yet accessible.\n"
        "Use markdown for formatting."
    )


class WriterAgent(GroundedTextAgent):
    """Drafts the full article from a topic and SEO research.

    Example:
        >>> writer = WriterAgent(config)
        >>> response = await writer.write("Quantum Leap", Category.TECHNOLOGY, seo_analysis)
        >>> draft = parse_article(response.text, "Quantum Leap")
    """

    name = "writer"
    system_prompt = WRITER_PROMPT

    def _configured_model(self, config: Config) -> str:
        return config.writer_model

    async def write(self, topic: str, category: Category | str, seo: SeoAnalysis) -> GroundedText:
        """Write an article.

        Args:
            topic: Trend topic
            category: Category the article belongs to
            seo: Keywords and questions to target (may be empty)

        Returns:
            Article markdown plus retrieval chunks

        Raises:
            AgentError: If the call fails or times out
        """
        response = await self._complete(build_writer_message(topic, category, seo))
        logger.info(
            "Article drafted | topic=%s chars=%d chunks=%d",
            topic[:50], len(response.text), len(response.chunks),
        )
        return response


class GeneratorAgent(GroundedTextAgent):
    """Single-shot article generator for the simple draft topology."""

    name = "generator"
    system_prompt = GENERATOR_PROMPT

    def _configured_model(self, config: Config) -> str:
        return config.generator_model

    async def generate(self, topic: str, category: Category | str) -> GroundedText:
        """Generate a complete draft in one call.

        Raises:
            AgentError: If the call fails or times out
        """
        response = await self._complete(build_generator_message(topic, category))
        logger.info("Draft generated | topic=%s chars=%d", topic[:50], len(response.text))
        return response
