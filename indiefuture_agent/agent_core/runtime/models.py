"""Runtime data structures for ``SubtaskEngine``.

- ``WorkStack`` is the LIFO list of pending ``WorkItem`` objects.
- ``EngineDeps`` collects the collaborators the engine needs.
- ``EventSink``/``InMemoryEventLog`` receive the engine's observable events.
- ``_GraphState`` is the state passed between LangGraph nodes during a drain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, NotRequired, Optional, Protocol, Required, TypedDict

from ...core.config import ToolConfig
from ..approval.gate import ConfirmationGate
from ..capabilities.base import OutputSink, log_output
from ..capabilities.registry import CapabilityRegistry
from ..llm.base import LLMClient
from ..schemas.domain import EngineEvent, EngineEventType, RunOutcome, WorkItem


class WorkStack:
    """LIFO sequence of ``WorkItem``; the last pushed item is popped first."""

    def __init__(self) -> None:
        self._items: List[WorkItem] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[WorkItem]:
        return iter(list(self._items))

    def push(self, item: WorkItem) -> None:
        self._items.append(item)

    def pop(self) -> Optional[WorkItem]:
        return self._items.pop() if self._items else None

    def peek(self) -> Optional[WorkItem]:
        return self._items[-1] if self._items else None

    def items(self) -> List[WorkItem]:
        """Copy of the pending items, bottom first."""
        return list(self._items)

    def clear(self) -> int:
        count = len(self._items)
        self._items.clear()
        return count


class EventSink(Protocol):
    async def append(self, event: EngineEvent) -> None: ...


class InMemoryEventLog:
    """Event sink that keeps every event in a list."""

    def __init__(self) -> None:
        self.events: List[EngineEvent] = []

    async def append(self, event: EngineEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: EngineEventType) -> List[EngineEvent]:
        return [e for e in self.events if e.type == event_type]


@dataclass(frozen=True)
class EngineDeps:
    """Dependency bundle for ``SubtaskEngine``.

    This object is typically constructed by ``factory.build_engine`` and holds:

    - the capability registry used to resolve operations,
    - the LLM client handed to every capability,
    - the confirmation gate for sensitive operations,
    - the event sink, output sink and tool settings.
    """

    capabilities: CapabilityRegistry
    llm: LLMClient
    gate: ConfirmationGate
    events: EventSink = field(default_factory=InMemoryEventLog)
    emit: OutputSink = log_output
    tools: ToolConfig = field(default_factory=ToolConfig)


class _GraphState(TypedDict):
    """Mutable LangGraph state for a single drain.

    Required keys:

    - ``current``: the item popped by ``select``, ``None`` once the stack is empty.
    - ``steps``: number of items popped during this drain.

    Optional keys:

    - ``outcome``: set when the drain reaches a terminal state.
    """

    current: Required[Optional[WorkItem]]
    steps: Required[int]
    outcome: NotRequired[RunOutcome]
