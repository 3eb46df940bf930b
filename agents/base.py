"""Shared plumbing for the pipeline's agents.

Every agent owns exactly one outbound model call per operation. This module
holds what they have in common:

    - Model resolution: remote PydanticAI model strings, local
      OpenAI-compatible servers, or an injected Model instance
    - Bounded execution: request limit plus a wall-clock timeout
    - Error normalization: transport/API/timeout failures become AgentError
    - Grounding: web citations read back from the run's message history

No retries happen here. A failed call propagates to the orchestrator,
which abandons the run.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from openai import AsyncOpenAI
from pydantic_ai import Agent, UsageLimits, WebSearchTool
from pydantic_ai.exceptions import UnexpectedModelBehavior, UsageLimitExceeded
from pydantic_ai.messages import BuiltinToolReturnPart, ModelMessage, ModelResponse
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.profiles.openai import OpenAIModelProfile
from pydantic_ai.providers.openai import OpenAIProvider

from config import Config

logger = logging.getLogger(__name__)

# Tool name PydanticAI uses for provider-side web search (Google Search grounding)
WEB_SEARCH_TOOL_NAME = "web_search"


class AgentError(Exception):
    """A model call failed (network, auth, quota, timeout, or API error).

    Attributes:
        agent: Name of the agent whose call failed
    """

    def __init__(self, agent: str, message: str):
        super().__init__(f"{agent}: {message}")
        self.agent = agent


@dataclass
class GroundedText:
    """Free-text model output plus the retrieval entries it was grounded on.

    Attributes:
        text: Model response text (empty string if the model returned nothing)
        chunks: Raw retrieval entries, e.g. {"title": ..., "uri": ...}
    """

    text: str
    chunks: list[Any] = field(default_factory=list)


def _parse_local_model(model_str: str) -> tuple[str, str] | None:
    """Parse local model string into (model_name, base_url) or None if not local."""
    if model_str.startswith("openai:") and "@" in model_str:
        rest = model_str[7:]  # Remove "openai:" prefix
        model_name, base_url = rest.split("@", 1)
        return model_name, base_url
    return None


def is_local_model(model: Model | str) -> bool:
    return isinstance(model, str) and _parse_local_model(model) is not None


def create_model(model: Model | str) -> Model | str:
    """Resolve a configured model into something Agent() accepts.

    Supports:
    - Model instances (returned unchanged, e.g. FunctionModel in tests)
    - Local OpenAI-compatible servers: 'openai:{model_name}@http://127.0.0.1:8080/v1'
    - Remote models: 'google-gla:gemini-3-flash-preview'

    Args:
        model: Model instance or identifier string

    Returns:
        PydanticAI model instance or model string
    """
    if not isinstance(model, str):
        return model
    parsed = _parse_local_model(model)
    if parsed:
        model_name, base_url = parsed
        logger.info("Using local model | model=%s base_url=%s", model_name, base_url)
        # Local servers don't need authentication - use placeholder
        client = AsyncOpenAI(base_url=base_url, api_key="local-model")
        profile = OpenAIModelProfile(supports_json_object_output=False)
        return OpenAIChatModel(
            model_name=model_name,
            provider=OpenAIProvider(openai_client=client),
            profile=profile,
        )
    return model


def grounding_builtin_tools(config: Config, model: Model | str) -> list[WebSearchTool]:
    """Google Search grounding, unless disabled or unsupported (local models)."""
    if not config.search_grounding or is_local_model(model):
        return []
    return [WebSearchTool()]


def grounding_chunks(messages: list[ModelMessage]) -> list[Any]:
    """Collect web-search results recorded in a run's message history.

    PydanticAI stores provider-side grounding as BuiltinToolReturnPart
    entries on model responses; their content is a list of citation dicts.
    """
    chunks: list[Any] = []
    for message in messages:
        if not isinstance(message, ModelResponse):
            continue
        for part in message.parts:
            if not isinstance(part, BuiltinToolReturnPart) or part.tool_name != WEB_SEARCH_TOOL_NAME:
                continue
            content = part.content
            if isinstance(content, list):
                chunks.extend(content)
            elif content:
                chunks.append(content)
    return chunks


async def run_bounded(agent: Agent, prompt: str, *, name: str, config: Config):
    """Run an agent once with the configured request limit and timeout.

    Args:
        agent: PydanticAI agent to run
        prompt: User message
        name: Agent name for logs and errors
        config: Supplies agent_timeout_seconds and agent_request_limit

    Returns:
        The PydanticAI run result

    Raises:
        AgentError: On timeout or any transport/API failure
        UnexpectedModelBehavior: When the model's output cannot be validated
        UsageLimitExceeded: When the run needs more than agent_request_limit
            requests (both left for structured-output callers to handle)
    """
    try:
        result = await asyncio.wait_for(
            agent.run(prompt, usage_limits=UsageLimits(request_limit=config.agent_request_limit)),
            timeout=config.agent_timeout_seconds,
        )
    except asyncio.TimeoutError as e:
        logger.error("Agent call timed out | agent=%s timeout=%ss", name, config.agent_timeout_seconds)
        raise AgentError(name, f"timed out after {config.agent_timeout_seconds}s") from e
    except (UnexpectedModelBehavior, UsageLimitExceeded):
        raise
    except Exception as e:
        logger.error("Agent call failed | agent=%s type=%s error=%s", name, type(e).__name__, e, exc_info=True)
        raise AgentError(name, f"{type(e).__name__}: {e}") from e

    usage = result.usage()
    logger.info(
        "Agent call complete | agent=%s requests=%d input_tokens=%d output_tokens=%d",
        name,
        usage.requests,
        usage.input_tokens or 0,
        usage.output_tokens or 0,
    )
    return result


class GroundedTextAgent:
    """Base for agents that return grounded prose.

    Subclasses set `name` and `system_prompt`, pick their model from the
    config in `_configured_model`, and build the user message themselves.
    """

    name: str = "agent"
    system_prompt: str = ""

    def __init__(self, config: Config, model: Model | str | None = None):
        """Initialize the agent.

        Args:
            config: Application configuration
            model: Optional model override (defaults to the configured model)
        """
        self.config = config
        model = model if model is not None else self._configured_model(config)
        self._agent: Agent[None, str] = Agent(
            create_model(model),
            output_type=str,
            system_prompt=self.system_prompt,
            builtin_tools=grounding_builtin_tools(config, model),
        )

    def _configured_model(self, config: Config) -> str:
        raise NotImplementedError

    async def _complete(self, prompt: str) -> GroundedText:
        """Issue the single model call and capture text plus grounding."""
        try:
            result = await run_bounded(self._agent, prompt, name=self.name, config=self.config)
        except UnexpectedModelBehavior as e:
            # Unusable output is not a service failure; downstream parsing falls back to defaults
            logger.warning("Unusable agent output | agent=%s error=%s", self.name, e)
            return GroundedText(text="")
        except UsageLimitExceeded as e:
            raise AgentError(self.name, str(e)) from e
        text = result.output or ""
        chunks = grounding_chunks(result.all_messages())
        logger.debug("Grounded text | agent=%s chars=%d chunks=%d", self.name, len(text), len(chunks))
        return GroundedText(text=text, chunks=chunks)
