"""Base abstraction for LLM clients.

Capabilities talk to language models only through ``LLMClient``. Failures are
reported as values (``LLMResponse.success`` is ``False`` and ``error`` is set)
so a capability can degrade without exceptions crossing into the engine.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Sequence, Type

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    system = "system"
    user = "user"
    assistant = "assistant"


class Message(BaseModel):
    """One chat message sent to the model."""

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=MessageRole.system, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=MessageRole.user, content=content)


class LLMResponse(BaseModel):
    """Response from an LLM client.

    Attributes:
        content: Free text returned by the model, if any
        structured_calls: Structured items returned by ``generate_structured``, as plain dicts
        metadata: Additional response metadata (model name, usage, etc.)
        error: Error message if the request failed
        success: Whether the request was successful
    """

    content: Optional[str] = Field(None, description="Free text returned by the model")
    structured_calls: List[Dict[str, Any]] = Field(default_factory=list, description="Structured output items")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional response metadata")
    error: Optional[str] = Field(None, description="Error message if the request failed")
    success: bool = Field(default=True, description="Whether the request was successful")

    @classmethod
    def failure(cls, error: str) -> "LLMResponse":
        return cls(error=error, success=False)


class LLMClient(Protocol):
    """Text and structured generation used by capabilities."""

    async def generate_text(self, messages: Sequence[Message]) -> LLMResponse: ...

    async def generate_structured(self, messages: Sequence[Message], schema: Type[BaseModel]) -> LLMResponse:
        """Ask for a list of ``schema`` items; they are returned in ``structured_calls``."""
        ...
