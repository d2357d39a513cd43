"""Domain model for the subtask stack.

Operations form a closed, discriminated union on ``kind``. Each variant carries
the parameters needed to run it plus three class-level traits the engine and
the CLI rely on: ``icon``, ``category`` and ``requires_approval``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import PurePath
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import Field, TypeAdapter

from .base import BaseSchema, FrozenSchema


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OperationKind(str, Enum):
    run_task = "run_task"
    read_file = "read_file"
    search_files = "search_files"
    update_file = "update_file"
    run_shell_command = "run_shell_command"
    list_directory = "list_directory"
    explain = "explain"


class OperationCategory(str, Enum):
    planning = "planning"
    read = "read"
    search = "search"
    write = "write"
    execute = "execute"
    explain = "explain"


class RunOutcome(str, Enum):
    idle = "idle"
    aborted = "aborted"


class EngineEventType(str, Enum):
    drain_started = "drain.started"
    depth_changed = "depth.changed"
    work_popped = "work.popped"
    work_declined = "work.declined"
    capability_dispatched = "capability.dispatched"
    capability_completed = "capability.completed"
    capability_failed = "capability.failed"
    context_appended = "context.appended"
    work_expanded = "work.expanded"
    work_requeued = "work.requeued"
    drain_finished = "drain.finished"


class _OperationBase(FrozenSchema):
    icon: ClassVar[str] = "•"
    category: ClassVar[OperationCategory]
    requires_approval: ClassVar[bool] = False

    def describe(self) -> str:
        """Human-readable one-line description used by the gate and the CLI."""
        raise NotImplementedError

    def __str__(self) -> str:
        return f"{self.icon} {self.describe()}"


class RunTask(_OperationBase):
    """Plan a free-form task into smaller operations."""

    kind: Literal[OperationKind.run_task] = OperationKind.run_task
    description: str = Field(min_length=1)

    icon: ClassVar[str] = "📋"
    category: ClassVar[OperationCategory] = OperationCategory.planning

    def describe(self) -> str:
        return f"Task: {self.description}"


class ReadFile(_OperationBase):
    kind: Literal[OperationKind.read_file] = OperationKind.read_file
    target: str = Field(min_length=1)
    offset: Optional[int] = Field(default=None, ge=0)
    limit: Optional[int] = Field(default=None, gt=0)

    icon: ClassVar[str] = "📄"
    category: ClassVar[OperationCategory] = OperationCategory.read

    def describe(self) -> str:
        if self.offset is not None or self.limit is not None:
            return f"Read {self.target} (offset={self.offset or 0}, limit={self.limit or 'all'})"
        return f"Read {self.target}"


class SearchFiles(_OperationBase):
    """Glob for files, optionally filtering their lines by a regex."""

    kind: Literal[OperationKind.search_files] = OperationKind.search_files
    pattern: str = Field(min_length=1)
    path: Optional[str] = None
    content_pattern: Optional[str] = None

    icon: ClassVar[str] = "🔍"
    category: ClassVar[OperationCategory] = OperationCategory.search

    def describe(self) -> str:
        where = f" in {self.path}" if self.path else ""
        if self.content_pattern:
            return f"Search '{self.content_pattern}' in files matching {self.pattern}{where}"
        return f"Find files matching {self.pattern}{where}"


class UpdateFile(_OperationBase):
    """Replace one occurrence of ``old_string``; an empty ``old_string`` creates the file."""

    kind: Literal[OperationKind.update_file] = OperationKind.update_file
    target: str = Field(min_length=1)
    old_string: str = ""
    new_string: str

    icon: ClassVar[str] = "✏️"
    category: ClassVar[OperationCategory] = OperationCategory.write
    requires_approval: ClassVar[bool] = True

    def describe(self) -> str:
        if not self.old_string:
            return f"Create {self.target}"
        return f"Edit {self.target}"


class RunShellCommand(_OperationBase):
    kind: Literal[OperationKind.run_shell_command] = OperationKind.run_shell_command
    command: str = Field(min_length=1)

    icon: ClassVar[str] = "💻"
    category: ClassVar[OperationCategory] = OperationCategory.execute
    requires_approval: ClassVar[bool] = True

    def describe(self) -> str:
        return f"Run: {self.command}"


class ListDirectory(_OperationBase):
    kind: Literal[OperationKind.list_directory] = OperationKind.list_directory
    target: str = "."
    ignore: List[str] = Field(default_factory=list)

    icon: ClassVar[str] = "📁"
    category: ClassVar[OperationCategory] = OperationCategory.read

    def describe(self) -> str:
        return f"List {self.target}"


class Explain(_OperationBase):
    """Answer a question from the evidence gathered so far."""

    kind: Literal[OperationKind.explain] = OperationKind.explain
    query: str = Field(min_length=1)

    icon: ClassVar[str] = "💡"
    category: ClassVar[OperationCategory] = OperationCategory.explain

    def describe(self) -> str:
        return f"Explain: {self.query}"


Operation = Annotated[
    Union[RunTask, ReadFile, SearchFiles, UpdateFile, RunShellCommand, ListDirectory, Explain],
    Field(discriminator="kind"),
]

OperationAdapter: TypeAdapter[Operation] = TypeAdapter(Operation)

EVIDENCE_KINDS = frozenset(
    {OperationKind.read_file, OperationKind.search_files, OperationKind.list_directory}
)


class WorkItem(FrozenSchema):
    """One pending operation tagged with the depth it was scheduled at."""

    depth: int = Field(ge=0)
    operation: Operation
    revisits: int = Field(default=0, ge=0)

    def requeued(self) -> "WorkItem":
        """Copy of this item with one more revisit recorded."""
        return self.model_copy(update={"revisits": self.revisits + 1})


class FragmentMetadata(FrozenSchema):
    kind: Optional[str] = None
    path: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utc_now)
    tags: List[str] = Field(default_factory=list)


class ContextFragment(FrozenSchema):
    """A piece of evidence produced by a tool."""

    source: str
    content: str
    metadata: Optional[FragmentMetadata] = None


def file_tags(path: str) -> List[str]:
    """Standard ``file:``/``ext:`` tags for a fragment about ``path``."""
    p = PurePath(path)
    tags = [f"file:{p.name}"]
    if p.suffix:
        tags.append(f"ext:{p.suffix.lstrip('.')}")
    return tags


class EngineEvent(BaseSchema):
    id: str = Field(default_factory=lambda: str(uuid4()))
    type: EngineEventType
    created_at: datetime = Field(default_factory=_utc_now)
    payload: Dict[str, Any] = Field(default_factory=dict)
