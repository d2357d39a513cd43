"""LangGraph runtime engine.

``SubtaskEngine`` drains a LIFO stack of ``WorkItem`` objects.

Execution model
---------------

Each drain runs a LangGraph state machine with three working nodes:

1. ``select``: if the top item's depth differs from the depth cursor, the
   cursor is moved to it (the only place it moves down) and a
   ``depth.changed`` event is emitted. The top item is then popped. An empty
   stack ends the drain as ``idle``.
2. ``confirm``: operations with ``requires_approval`` go through the
   confirmation gate. A decline pushes the item back, leaving the stack as
   it was, and ends the drain as ``aborted``.
3. ``dispatch``: the capability registered for the operation kind runs and
   its ``ExecutionOutcome`` is applied.

Outcome application
-------------------

- ``Done``: nothing.
- ``RecordEvidence``: the fragment is appended to the context memory.
- ``Expand``: operations are pushed at the cursor depth in list order, so
  the last one runs first.
- ``ExpandDeeper``: the popped item is re-queued at its own depth, the cursor
  moves one level down, and the operations are pushed there in list order.
  An empty list is applied as ``Done``. Once an item has been re-queued
  ``max_revisits`` times it is not re-queued again.
- ``Failed``: logged and recorded as an event. No retry.

The stack, the cursor and the context memory belong to the engine instance
and survive across drains. An ``idle`` drain returns the cursor to depth 0, so
the next top-level task starts there; after ``aborted`` the cursor stays with
the pending work.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional, Sequence

from langgraph.errors import GraphRecursionError
from langgraph.graph import END, StateGraph

from ...core.config import EngineConfig
from ..capabilities.base import (
    Capability,
    CapabilityContext,
    Done,
    ExecutionOutcome,
    Expand,
    ExpandDeeper,
    Failed,
    RecordEvidence,
)
from ..errors import StepLimitExceededError
from ..memory.context_memory import ContextMemory
from ..schemas.domain import EngineEvent, EngineEventType, Operation, RunOutcome, WorkItem
from .models import EngineDeps, WorkStack, _GraphState

logger = logging.getLogger(__name__)


class SubtaskEngine:
    """Run-to-completion scheduler over the work stack.

    The engine delegates all actual work to capabilities registered in
    ``EngineDeps.capabilities`` and all approval decisions to
    ``EngineDeps.gate``.
    """

    def __init__(
        self,
        *,
        deps: EngineDeps,
        config: Optional[EngineConfig] = None,
        memory: Optional[ContextMemory] = None,
    ) -> None:
        """
        Initialize the SubtaskEngine.

        Args:
            deps: The runtime dependencies (capabilities, LLM client, gate, sinks).
            config: Revisit and step limits; defaults to ``EngineConfig()``.
            memory: Context memory to share; a fresh one is created if omitted.
        """
        self._deps = deps
        self._config = config or EngineConfig()
        self._memory = memory if memory is not None else ContextMemory()
        self._stack = WorkStack()
        self._depth = 0
        # Popped but not yet dispatched or declined
        self._in_flight: Optional[WorkItem] = None
        self._graph = self._build_graph()

    @property
    def depth(self) -> int:
        """The depth cursor."""
        return self._depth

    @property
    def stack(self) -> WorkStack:
        return self._stack

    @property
    def memory(self) -> ContextMemory:
        return self._memory

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_GraphState)
        g.add_node("select", self._node_select)
        g.add_node("confirm", self._node_confirm)
        g.add_node("dispatch", self._node_dispatch)
        g.add_node("finish", self._node_finish)

        g.set_entry_point("select")
        g.add_conditional_edges(
            "select",
            self._route_after_select,
            {"confirm": "confirm", "finish": "finish"},
        )
        g.add_conditional_edges(
            "confirm",
            self._route_after_confirm,
            {"dispatch": "dispatch", "finish": "finish"},
        )
        g.add_edge("dispatch", "select")
        g.add_edge("finish", END)
        return g.compile()

    def push_initial_operation(self, operation: Operation) -> WorkItem:
        """Seed the stack with a new top-level operation at the current depth."""
        item = WorkItem(depth=self._depth, operation=operation)
        self._stack.push(item)
        logger.info(f"Queued {operation.describe()} at depth {self._depth}")
        return item

    def discard_pending(self) -> int:
        """Drop every pending item. Returns how many were dropped."""
        dropped = self._stack.clear()
        logger.info(f"Discarded {dropped} pending work item(s)")
        return dropped

    async def drain(self) -> RunOutcome:
        """Run until the stack is empty or an operation is declined.

        When the drain stops on an exception, an item that was popped but not
        yet dispatched is pushed back first, so the stack holds everything
        that has not run.

        Returns:
            RunOutcome: ``idle`` or ``aborted``.

        Raises:
            UnregisteredCapabilityError: If an operation has no capability.
            StepLimitExceededError: If the drain exceeds ``EngineConfig.recursion_limit`` graph steps.
        """
        await self._record(EngineEventType.drain_started, pending=len(self._stack), depth=self._depth)
        state: _GraphState = {"current": None, "steps": 0}
        try:
            final = await self._graph.ainvoke(state, config={"recursion_limit": self._config.recursion_limit})
        except GraphRecursionError as e:
            await self._abandon(e)
            raise StepLimitExceededError(self._config.recursion_limit) from e
        except Exception as e:
            await self._abandon(e)
            raise
        return final["outcome"]

    async def _abandon(self, error: Exception) -> None:
        """Put the in-flight item back and record the failed drain."""
        item, self._in_flight = self._in_flight, None
        if item is not None:
            self._stack.push(item)
            logger.warning(f"Drain stopped by {type(error).__name__}; {item.operation.describe()} returned to the stack")
        await self._record(
            EngineEventType.drain_finished,
            outcome="error",
            error=f"{type(error).__name__}: {error}",
            pending=len(self._stack),
        )

    async def _node_select(self, state: _GraphState) -> _GraphState:
        """Synchronise the depth cursor with the top of the stack, then pop it."""
        top = self._stack.peek()
        if top is None:
            state["current"] = None
            state["outcome"] = RunOutcome.idle
            return state

        if top.depth != self._depth:
            await self._set_depth(top.depth)

        item = self._stack.pop()
        self._in_flight = item
        state["current"] = item
        state["steps"] = state["steps"] + 1
        logger.debug(f"Popped {item.operation.describe()} at depth {item.depth}")
        await self._record(
            EngineEventType.work_popped,
            kind=item.operation.kind.value,
            depth=item.depth,
            revisits=item.revisits,
        )
        return state

    async def _node_confirm(self, state: _GraphState) -> _GraphState:
        """Ask the gate about sensitive operations; a decline puts the item back."""
        item = _current(state)
        operation = item.operation
        if not operation.requires_approval:
            return state

        if await self._deps.gate.ask(operation.describe(), operation.category):
            return state

        self._stack.push(item)
        self._in_flight = None
        logger.info(f"Declined {operation.describe()}; {len(self._stack)} item(s) left pending")
        await self._record(EngineEventType.work_declined, kind=operation.kind.value, depth=item.depth)
        state["outcome"] = RunOutcome.aborted
        return state

    async def _node_dispatch(self, state: _GraphState) -> _GraphState:
        """Run the capability for the current item and apply its outcome."""
        item = _current(state)
        capability = self._deps.capabilities.get(item.operation.kind)
        ctx = CapabilityContext(
            llm=self._deps.llm,
            memory=self._memory,
            item=item,
            tools=self._deps.tools,
            emit=self._deps.emit,
        )
        await self._record(EngineEventType.capability_dispatched, kind=item.operation.kind.value, depth=item.depth)
        outcome = await self._invoke(capability, ctx, item)
        self._in_flight = None
        await self._apply(item, outcome)
        return state

    async def _node_finish(self, state: _GraphState) -> _GraphState:
        outcome = state.get("outcome", RunOutcome.idle)
        state["outcome"] = outcome
        if outcome is RunOutcome.idle and self._depth != 0:
            await self._set_depth(0)
        logger.info(f"Drain finished: {outcome.value} after {state['steps']} step(s), {len(self._stack)} pending")
        await self._record(
            EngineEventType.drain_finished,
            outcome=outcome.value,
            steps=state["steps"],
            pending=len(self._stack),
        )
        return state

    def _route_after_select(self, state: _GraphState) -> str:
        return "finish" if state["current"] is None else "confirm"

    def _route_after_confirm(self, state: _GraphState) -> str:
        return "finish" if state.get("outcome") == RunOutcome.aborted else "dispatch"

    async def _invoke(self, capability: Capability, ctx: CapabilityContext, item: WorkItem) -> ExecutionOutcome:
        timeout = self._config.capability_timeout_seconds
        try:
            if timeout is None:
                return await capability.handle(ctx, item.operation)
            return await asyncio.wait_for(capability.handle(ctx, item.operation), timeout=timeout)
        except asyncio.TimeoutError:
            return Failed(f"timed out after {timeout}s")
        except Exception as e:
            logger.exception(f"Capability for {item.operation.kind.value} raised")
            return Failed(f"{type(e).__name__}: {e}")

    async def _apply(self, item: WorkItem, outcome: ExecutionOutcome) -> None:
        kind = item.operation.kind.value
        if isinstance(outcome, Done):
            await self._record(EngineEventType.capability_completed, kind=kind, outcome="done")
        elif isinstance(outcome, RecordEvidence):
            await self._memory.append(outcome.fragment)
            await self._record(EngineEventType.context_appended, source=outcome.fragment.source, size=len(self._memory))
        elif isinstance(outcome, Expand):
            self._push_all(outcome.operations, self._depth)
            await self._record(EngineEventType.work_expanded, depth=self._depth, count=len(outcome.operations))
        elif isinstance(outcome, ExpandDeeper):
            await self._expand_deeper(item, list(outcome.operations))
        elif isinstance(outcome, Failed):
            logger.warning(f"{item.operation.describe()} failed: {outcome.reason}")
            await self._record(EngineEventType.capability_failed, kind=kind, reason=outcome.reason)
        else:
            raise TypeError(f"Unknown execution outcome: {outcome!r}")

    async def _expand_deeper(self, item: WorkItem, operations: List[Operation]) -> None:
        if not operations:
            logger.debug(f"{item.operation.describe()} asked to go deeper with nothing to do; treating as done")
            await self._record(EngineEventType.capability_completed, kind=item.operation.kind.value, outcome="done")
            return

        if item.revisits < self._config.max_revisits:
            self._stack.push(item.requeued())
            await self._record(EngineEventType.work_requeued, depth=item.depth, revisits=item.revisits + 1)
        else:
            logger.warning(
                f"{item.operation.describe()} reached the revisit limit ({self._config.max_revisits}); not re-queued"
            )

        await self._set_depth(self._depth + 1)
        self._push_all(operations, self._depth)
        await self._record(EngineEventType.work_expanded, depth=self._depth, count=len(operations))

    def _push_all(self, operations: Sequence[Operation], depth: int) -> None:
        for operation in operations:
            self._stack.push(WorkItem(depth=depth, operation=operation))

    async def _set_depth(self, depth: int) -> None:
        previous, self._depth = self._depth, depth
        logger.debug(f"Depth {previous} -> {depth}")
        await self._record(EngineEventType.depth_changed, previous=previous, depth=depth)

    async def _record(self, event_type: EngineEventType, **payload: Any) -> None:
        await self._deps.events.append(EngineEvent(type=event_type, payload=payload))


def _current(state: _GraphState) -> WorkItem:
    item = state["current"]
    if item is None:
        raise RuntimeError("graph routed to a work node without a selected item")
    return item
