"""Pydantic AI implementation of ``LLMClient``.

A fresh ``pydantic_ai.Agent`` is built per call: system messages become its
system prompt, the remaining messages are joined into the user prompt, and
structured calls use ``output_type=List[schema]``.
"""

from __future__ import annotations

import logging
from typing import Any, List, Sequence, Tuple, Type, Union

from pydantic import BaseModel
from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.openai import OpenAIResponsesModel
from pydantic_ai.providers.anthropic import AnthropicProvider
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.settings import ModelSettings

from ...core.config import LLMConfig
from ..errors import ConfigurationError
from .base import LLMResponse, Message, MessageRole

logger = logging.getLogger(__name__)


def build_model(config: LLMConfig) -> Model:
    """Create the Pydantic AI model for the configured provider.

    Raises:
        ConfigurationError: If the provider's API key is not set or the provider is unknown.
    """
    api_key = config.api_key()
    if not api_key:
        env_name = "OPENAI_API_KEY" if config.provider == "openai" else "ANTHROPIC_API_KEY"
        raise ConfigurationError(f"{env_name} environment variable is not set")

    model_settings = ModelSettings(max_tokens=config.max_tokens, timeout=config.timeout_seconds)
    if config.temperature is not None:
        model_settings["temperature"] = config.temperature

    if config.provider == "openai":
        logger.debug(f"Creating OpenAI model: {config.model} with Pydantic AI")
        return OpenAIResponsesModel(config.model, provider=OpenAIProvider(api_key=api_key), settings=model_settings)
    if config.provider == "anthropic":
        logger.debug(f"Creating Anthropic model: {config.model} with Pydantic AI")
        return AnthropicModel(config.model, provider=AnthropicProvider(api_key=api_key), settings=model_settings)
    raise ConfigurationError(f"Unsupported provider: {config.provider}")


class PydanticAIClient:
    """``LLMClient`` backed by Pydantic AI agents."""

    def __init__(self, model: Union[Model, str]) -> None:
        self._model = model

    async def generate_text(self, messages: Sequence[Message]) -> LLMResponse:
        system_prompt, prompt = _split_messages(messages)
        agent = Agent(self._model, system_prompt=system_prompt)
        try:
            result = await agent.run(prompt)
        except Exception as e:
            logger.warning(f"Text generation failed: {e}")
            return LLMResponse.failure(str(e))
        return LLMResponse(content=result.output)

    async def generate_structured(self, messages: Sequence[Message], schema: Type[BaseModel]) -> LLMResponse:
        system_prompt, prompt = _split_messages(messages)
        agent = Agent(self._model, output_type=List[schema], system_prompt=system_prompt)  # type: ignore[valid-type]
        try:
            result = await agent.run(prompt)
        except Exception as e:
            logger.warning(f"Structured generation failed: {e}")
            return LLMResponse.failure(str(e))
        calls: List[dict[str, Any]] = [item.model_dump(mode="json") for item in result.output]
        logger.debug(f"Structured generation returned {len(calls)} item(s)")
        return LLMResponse(structured_calls=calls)


def _split_messages(messages: Sequence[Message]) -> Tuple[Tuple[str, ...], str]:
    system = tuple(m.content for m in messages if m.role == MessageRole.system)
    rest = [m for m in messages if m.role != MessageRole.system]
    if len(rest) == 1:
        return system, rest[0].content
    prompt = "\n\n".join(f"[{m.role.value}]\n{m.content}" for m in rest)
    return system, prompt
