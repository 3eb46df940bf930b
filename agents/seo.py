"""SEO/AEO agent: keyword and question research for a topic.

This is the only schema-constrained agent. It returns a SeoAnalysis
(keywords and reader questions) that is folded into the writer's prompt.

Design:
    - Structured output: SeoAnalysis Pydantic model (PromptedOutput for
      local models that don't support tool calling)
    - Fail-soft on shape: output that cannot be validated becomes an
      empty SeoAnalysis after a single request (no validation retries),
      so the writer simply gets no SEO guidance
    - Fail-hard on transport: network/API/timeout errors propagate as
      AgentError and abort the pipeline run
"""

import logging

from pydantic_ai import Agent, PromptedOutput
from pydantic_ai.exceptions import UnexpectedModelBehavior, UsageLimitExceeded
from pydantic_ai.models import Model

from agents.base import create_model, is_local_model, run_bounded
from config import Config
from models.seo import SeoAnalysis

logger = logging.getLogger(__name__)


SEO_PROMPT = """You are an SEO and answer-engine optimization (AEO) strategist.

Given a topic, research how people search for it and what they ask about it.

## Output Requirements
- keywords: 5-10 search keywords and long-tail phrases, most valuable first
- questions: 3-6 natural-language questions readers ask, phrased the way they would type or speak them

## Principles
- Prefer specific, intent-rich phrases over generic single words
- Questions should be directly answerable in one or two sentences
- Do not repeat the same keyword with trivial variations"""


def _create_agent(model: Model | str) -> Agent[None, SeoAnalysis]:
    """Create the underlying PydanticAI agent for SEO analysis.

    Args:
        model: PydanticAI model string, local model string, or Model instance

    Returns:
        Configured PydanticAI Agent
    """
    output_type = PromptedOutput(SeoAnalysis) if is_local_model(model) else SeoAnalysis
    return Agent(
        create_model(model),
        output_type=output_type,
        system_prompt=SEO_PROMPT,
        # One request per analysis: invalid output is not sent back to the model
        retries=0,
        output_retries=0,
    )


class SeoAgent:
    """Produces keyword/question lists for a topic.

    Example:
        >>> seo = SeoAgent(config)
        >>> analysis = await seo.analyze("Quantum Leap")
        >>> analysis.keywords
        ['quantum chip', ...]
    """

    name = "seo"

    def __init__(self, config: Config, model: Model | str | None = None):
        """Initialize the SEO agent.

        Args:
            config: Application configuration
            model: Optional model override (defaults to config.seo_model)
        """
        self.config = config
        self._agent = _create_agent(model if model is not None else config.seo_model)

    async def analyze(self, topic: str) -> SeoAnalysis:
        """Research keywords and reader questions for a topic.

        Args:
            topic: Trend topic

        Returns:
            SeoAnalysis, empty if the model's output could not be validated

        Raises:
            AgentError: If the call fails or times out
        """
        message = f"Topic: {topic}\n\nReturn the keywords and questions for an article on this topic."
        try:
            result = await run_bounded(self._agent, message, name=self.name, config=self.config)
        except (UnexpectedModelBehavior, UsageLimitExceeded) as e:
            logger.warning("SEO output invalid, using empty analysis | topic=%s error=%s", topic[:50], e)
            return SeoAnalysis.empty()

        analysis = result.output
        logger.debug(
            "SEO analysis | topic=%s keywords=%d questions=%d",
            topic[:50], len(analysis.keywords), len(analysis.questions),
        )
        return analysis
