"""Convenience factories for wiring the agent core.

This module contains small helpers to build the default capability registry,
the LLM client and a ready-to-drain ``SubtaskEngine`` from ``Settings``.

The intent is to keep application wiring and tests concise, while still
allowing callers to provide their own registry, client, gate and sinks.
"""

from __future__ import annotations

from typing import Optional

from ..core.config import Settings
from .approval.gate import ConfirmationGate
from .capabilities.base import OutputSink, log_output
from .capabilities.builtin import (
    ExplainCapability,
    ListDirectoryCapability,
    ReadFileCapability,
    RunShellCommandCapability,
    SearchFilesCapability,
    UpdateFileCapability,
)
from .capabilities.planning import RunTaskCapability
from .capabilities.registry import CapabilityRegistry
from .llm.base import LLMClient
from .llm.pydantic_ai_client import PydanticAIClient, build_model
from .memory.context_memory import ContextMemory
from .runtime.engine import SubtaskEngine
from .runtime.models import EngineDeps, EventSink, InMemoryEventLog


def build_default_registry() -> CapabilityRegistry:
    """Build the default ``CapabilityRegistry``.

    The default registry covers every operation kind: planning, file reads,
    searches, directory listings, file updates, shell commands and
    explanations.
    """
    reg = CapabilityRegistry()
    reg.register(RunTaskCapability())
    reg.register(ReadFileCapability())
    reg.register(SearchFilesCapability())
    reg.register(UpdateFileCapability())
    reg.register(RunShellCommandCapability())
    reg.register(ListDirectoryCapability())
    reg.register(ExplainCapability())
    return reg


def build_llm_client(settings: Settings) -> LLMClient:
    """Create the Pydantic AI backed client for the configured provider.

    Raises:
        ConfigurationError: If the provider's API key is missing.
    """
    return PydanticAIClient(build_model(settings.llm))


def build_engine(
    *,
    settings: Settings,
    llm: LLMClient,
    gate: ConfirmationGate,
    registry: Optional[CapabilityRegistry] = None,
    events: Optional[EventSink] = None,
    emit: OutputSink = log_output,
    memory: Optional[ContextMemory] = None,
) -> SubtaskEngine:
    """Construct a ``SubtaskEngine`` from settings and collaborators."""
    deps = EngineDeps(
        capabilities=registry or build_default_registry(),
        llm=llm,
        gate=gate,
        events=events if events is not None else InMemoryEventLog(),
        emit=emit,
        tools=settings.tools,
    )
    return SubtaskEngine(deps=deps, config=settings.engine, memory=memory)
