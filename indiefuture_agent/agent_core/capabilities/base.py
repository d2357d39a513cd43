"""Capability protocol and execution outcomes.

A capability is the execution unit for one ``OperationKind``. The engine
resolves it through a ``CapabilityRegistry`` and calls ``handle`` with a
``CapabilityContext`` and the popped operation.

Capabilities should:

- never touch the work stack; every scheduling effect is expressed through
  the returned ``ExecutionOutcome``,
- either append evidence to ``ctx.memory`` themselves or return
  ``RecordEvidence`` and let the engine append it,
- report local failures as ``Failed`` instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, Sequence, Union

from ...core.config import ToolConfig
from ..llm.base import LLMClient
from ..memory.context_memory import ContextMemory
from ..schemas.domain import ContextFragment, Operation, OperationKind, WorkItem

logger = logging.getLogger(__name__)

OutputSink = Callable[[str, str], None]


def log_output(title: str, text: str) -> None:
    """Default output sink: user-facing output goes to the log."""
    logger.info(f"{title}\n{text}")


@dataclass(frozen=True)
class Done:
    """No further scheduling effect."""


@dataclass(frozen=True)
class RecordEvidence:
    """Append ``fragment`` to the context memory."""

    fragment: ContextFragment


@dataclass(frozen=True)
class Expand:
    """Push ``operations`` at the current depth, in list order."""

    operations: Sequence[Operation] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "operations", tuple(self.operations))


@dataclass(frozen=True)
class ExpandDeeper:
    """Re-queue the popped item, then push ``operations`` one level deeper."""

    operations: Sequence[Operation] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "operations", tuple(self.operations))


@dataclass(frozen=True)
class Failed:
    """The step failed locally. Logged and recorded; no stack mutation, no retry."""

    reason: str


ExecutionOutcome = Union[Done, RecordEvidence, Expand, ExpandDeeper, Failed]


@dataclass(frozen=True)
class CapabilityContext:
    """Execution context passed to capability implementations.

    Attributes
    ----------
    llm:
        Client used for text and structured generation.
    memory:
        The engine's shared ``ContextMemory``.
    item:
        The ``WorkItem`` being executed (depth and revisit count included).
    tools:
        File system and shell settings.
    emit:
        Sink for user-facing output such as plans, command output and answers.
    """

    llm: LLMClient
    memory: ContextMemory
    item: WorkItem
    tools: ToolConfig = field(default_factory=ToolConfig)
    emit: OutputSink = log_output


class Capability(Protocol):
    """Protocol for capability implementations."""

    kind: OperationKind

    async def handle(self, ctx: CapabilityContext, operation: Any) -> ExecutionOutcome: ...
