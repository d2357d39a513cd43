"""LLM client abstraction and its Pydantic AI implementation."""

from .base import LLMClient, LLMResponse, Message, MessageRole
from .pydantic_ai_client import PydanticAIClient, build_model

__all__ = [
    "LLMClient",
    "LLMResponse",
    "Message",
    "MessageRole",
    "PydanticAIClient",
    "build_model",
]
