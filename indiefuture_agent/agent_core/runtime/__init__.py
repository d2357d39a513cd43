"""LangGraph-based execution runtime for the subtask stack.

The runtime drains a LIFO stack of ``WorkItem`` objects, gating sensitive
operations on human confirmation and applying each capability's
``ExecutionOutcome`` to the stack and the context memory.

The main entry point is ``SubtaskEngine``; its collaborators are bundled in
``EngineDeps``.
"""

from .engine import SubtaskEngine
from .models import EngineDeps, EventSink, InMemoryEventLog, WorkStack

__all__ = [
    "EngineDeps",
    "EventSink",
    "InMemoryEventLog",
    "SubtaskEngine",
    "WorkStack",
]
