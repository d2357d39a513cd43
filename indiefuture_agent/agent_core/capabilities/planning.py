"""Planning capability bound to ``RunTask``.

Planning takes two LLM calls:

1. A free-text plan for the task, written with the relevant evidence already
   in the context memory. The plan is shown to the user.
2. A structured call that turns the plan into a list of ``PlannedOperation``
   entries, which are converted into concrete operations.

The converted list is reversed before it is returned so that, after the
engine's LIFO push, the operations run in plan order. If any of them gathers
evidence the outcome is ``ExpandDeeper``: the task is re-queued behind the
deeper work and planned again once that evidence is in memory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Literal, Optional

from pydantic import Field, ValidationError

from ..llm.base import Message
from ..memory.context_memory import format_fragments
from ..schemas.base import BaseSchema
from ..schemas.domain import (
    EVIDENCE_KINDS,
    Explain,
    ListDirectory,
    Operation,
    OperationKind,
    ReadFile,
    RunShellCommand,
    RunTask,
    SearchFiles,
    UpdateFile,
)
from .base import Capability, CapabilityContext, Done, ExecutionOutcome, Expand, ExpandDeeper, Failed

logger = logging.getLogger(__name__)

PLANNING_SYSTEM_PROMPT = """You are an expert assistant for a command-line tool that helps with software development tasks in a local codebase.
Your job is to analyze the user's request and decide which operations the tool should perform.

Break the request into a short sequence of simple operations, in the order they should run:
- search_files: find files by glob pattern, optionally filtering lines with a regular expression
- list_directory: list the entries of a directory
- read_file: read the contents of a file
- update_file: create a file or replace one unique snippet in it
- run_shell_command: run a shell command
- explain: answer the user's question from the evidence gathered so far

Gather evidence first (search, list, read), act second (update, run), and finish with explain
when the user asked a question. Only plan what the evidence supports; you will be asked again
once the evidence you request has been collected."""

STRUCTURING_SYSTEM_PROMPT = """Convert the plan below into the list of operations it describes, in execution order.
Fill in every argument the chosen tool needs. Return an empty list if the plan needs no further operations."""


class PlannedOperation(BaseSchema):
    """One operation as proposed by the model."""

    tool_name: Literal[
        "read_file",
        "search_files",
        "update_file",
        "run_shell_command",
        "list_directory",
        "explain",
    ] = Field(description="Which tool to run")
    description: str = Field(description="What this step does and why")
    target: Optional[str] = Field(default=None, description="File or directory path (read_file, update_file, list_directory)")
    pattern: Optional[str] = Field(default=None, description="Glob pattern such as '**/*.py' (search_files)")
    content_pattern: Optional[str] = Field(default=None, description="Regular expression to match lines (search_files)")
    path: Optional[str] = Field(default=None, description="Directory to search in (search_files)")
    command: Optional[str] = Field(default=None, description="Shell command (run_shell_command)")
    old_string: Optional[str] = Field(default=None, description="Exact unique text to replace; empty creates the file (update_file)")
    new_string: Optional[str] = Field(default=None, description="Replacement text or new file content (update_file)")
    query: Optional[str] = Field(default=None, description="Question to answer (explain)")

    def to_operation(self) -> Operation:
        """Build the concrete operation.

        Raises:
            ValueError: If an argument the tool requires is missing.
            ValidationError: If an argument is present but invalid.
        """
        kind = OperationKind(self.tool_name)
        if kind is OperationKind.read_file:
            return ReadFile(target=_required(self.target, "target"))
        if kind is OperationKind.search_files:
            return SearchFiles(
                pattern=_required(self.pattern, "pattern"),
                path=self.path,
                content_pattern=self.content_pattern,
            )
        if kind is OperationKind.update_file:
            return UpdateFile(
                target=_required(self.target, "target"),
                old_string=self.old_string or "",
                new_string=_required(self.new_string, "new_string", allow_empty=True),
            )
        if kind is OperationKind.run_shell_command:
            return RunShellCommand(command=_required(self.command, "command"))
        if kind is OperationKind.list_directory:
            return ListDirectory(target=self.target or self.path or ".")
        return Explain(query=self.query or self.description)


def _required(value: Optional[str], name: str, *, allow_empty: bool = False) -> str:
    if value is None or (not allow_empty and not value.strip()):
        raise ValueError(f"missing {name}")
    return value


@dataclass(frozen=True)
class RunTaskCapability(Capability):
    """
    Capability that plans a task into follow-up operations.

    LLM failures are reported as ``Failed``; a plan that yields no usable
    operations is ``Done``.
    """

    kind: OperationKind = OperationKind.run_task
    context_limit: int = 5

    async def handle(self, ctx: CapabilityContext, operation: RunTask) -> ExecutionOutcome:
        """
        Plan ``operation.description``.

        Args:
            ctx: The execution context; ``ctx.item.revisits`` tells whether this is a re-plan.
            operation: The task to plan.

        Returns:
            ExecutionOutcome: ``ExpandDeeper`` or ``Expand`` with the planned operations in
            reverse order, ``Done`` when nothing usable was planned, or ``Failed``.
        """
        evidence = format_fragments(ctx.memory.relevant(operation.description, limit=self.context_limit))
        request = f"{evidence}\n\nTask: {operation.description}"
        if ctx.item.revisits:
            request += (
                f"\n\nThis task has already been planned {ctx.item.revisits} time(s) and the evidence above "
                "was gathered since. Plan only what is still needed."
            )

        plan = await ctx.llm.generate_text([Message.system(PLANNING_SYSTEM_PROMPT), Message.user(request)])
        if not plan.success:
            return Failed(f"planning failed: {plan.error}")
        if not plan.content:
            logger.info("Planner returned an empty plan")
            return Done()
        ctx.emit("Plan", plan.content)

        structured = await ctx.llm.generate_structured(
            [Message.system(STRUCTURING_SYSTEM_PROMPT), Message.user(plan.content)],
            PlannedOperation,
        )
        if not structured.success:
            return Failed(f"plan structuring failed: {structured.error}")

        operations = _convert(structured.structured_calls)
        if not operations:
            logger.info("Plan produced no usable operations")
            return Done()

        operations.reverse()
        if any(op.kind in EVIDENCE_KINDS for op in operations):
            return ExpandDeeper(operations)
        return Expand(operations)


def _convert(calls: List[dict]) -> List[Operation]:
    operations: List[Operation] = []
    for call in calls:
        try:
            operations.append(PlannedOperation.model_validate(call).to_operation())
        except (ValidationError, ValueError) as e:
            logger.warning(f"Skipping malformed planned operation {call!r}: {e}")
    return operations
