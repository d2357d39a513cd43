"""Subtask stack scheduler, capabilities and LLM abstraction.

Design overview
---------------

- ``schemas.domain`` defines the closed ``Operation`` union, ``WorkItem``
  and ``ContextFragment``.
- ``capabilities`` maps every operation kind to one implementation. A
  capability returns an ``ExecutionOutcome`` (``Done``, ``RecordEvidence``,
  ``Expand``, ``ExpandDeeper`` or ``Failed``) and never touches the stack.
- ``runtime.SubtaskEngine`` owns the stack, the depth cursor and the context
  memory, and drains the stack with a LangGraph state machine.
- ``approval`` holds the confirmation gates consulted before shell commands
  and file edits.

Typical usage
-------------

1. ``engine = build_engine(settings=..., llm=..., gate=...)``
2. ``engine.push_initial_operation(RunTask(description="..."))``
3. ``outcome = await engine.drain()``
"""

from .capabilities import CapabilityRegistry, Done, Expand, ExpandDeeper, Failed, RecordEvidence
from .errors import AgentCoreError, UnregisteredCapabilityError
from .factory import build_default_registry, build_engine, build_llm_client
from .memory import ContextMemory
from .runtime import EngineDeps, SubtaskEngine
from .schemas.domain import ContextFragment, Operation, OperationKind, RunOutcome, RunTask, WorkItem

__all__ = [
    "AgentCoreError",
    "CapabilityRegistry",
    "ContextFragment",
    "ContextMemory",
    "Done",
    "EngineDeps",
    "Expand",
    "ExpandDeeper",
    "Failed",
    "Operation",
    "OperationKind",
    "RecordEvidence",
    "RunOutcome",
    "RunTask",
    "SubtaskEngine",
    "UnregisteredCapabilityError",
    "WorkItem",
    "build_default_registry",
    "build_engine",
    "build_llm_client",
]
