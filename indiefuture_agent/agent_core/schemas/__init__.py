"""Schemas and DTOs for the agent core."""

from .domain import (
    ContextFragment,
    EngineEvent,
    EngineEventType,
    Explain,
    FragmentMetadata,
    ListDirectory,
    Operation,
    OperationAdapter,
    OperationCategory,
    OperationKind,
    ReadFile,
    RunOutcome,
    RunShellCommand,
    RunTask,
    SearchFiles,
    UpdateFile,
    WorkItem,
)

__all__ = [
    "ContextFragment",
    "EngineEvent",
    "EngineEventType",
    "Explain",
    "FragmentMetadata",
    "ListDirectory",
    "Operation",
    "OperationAdapter",
    "OperationCategory",
    "OperationKind",
    "ReadFile",
    "RunOutcome",
    "RunShellCommand",
    "RunTask",
    "SearchFiles",
    "UpdateFile",
    "WorkItem",
]
