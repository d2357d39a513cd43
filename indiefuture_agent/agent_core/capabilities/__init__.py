"""Capability registry and capability execution pipeline.

A *capability* is the execution unit for one operation kind.

- The engine pops a ``WorkItem`` and resolves its operation's ``kind`` through
  ``CapabilityRegistry``.
- The capability runs with a ``CapabilityContext`` (LLM client, context
  memory, the popped item, tool settings, output sink).
- It answers with an ``ExecutionOutcome`` that the engine applies to the
  stack and the context memory.

This package exports:

- ``Capability``: protocol for async capability execution.
- ``CapabilityRegistry``: kind → capability implementation mapping.
- ``CapabilityContext`` and the ``ExecutionOutcome`` variants.
"""

from .base import (
    Capability,
    CapabilityContext,
    Done,
    ExecutionOutcome,
    Expand,
    ExpandDeeper,
    Failed,
    OutputSink,
    RecordEvidence,
)
from .registry import CapabilityRegistry

__all__ = [
    "Capability",
    "CapabilityContext",
    "CapabilityRegistry",
    "Done",
    "ExecutionOutcome",
    "Expand",
    "ExpandDeeper",
    "Failed",
    "OutputSink",
    "RecordEvidence",
]
