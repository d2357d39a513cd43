"""Error types for the agent core.

Defines a small hierarchy of exceptions. Scheduling contract violations
(``UnregisteredCapabilityError``, ``StepLimitExceededError``) propagate out of
the engine; ``ToolError`` subclasses are raised by the I/O primitives and are
turned into ``Failed`` outcomes by the capabilities that call them.
"""

from __future__ import annotations


class AgentCoreError(Exception):
    """Base error for all agent core exceptions."""


class ConfigurationError(AgentCoreError):
    """Raised when settings are missing or inconsistent."""


class UnregisteredCapabilityError(AgentCoreError):
    """Raised when no capability is registered for an operation kind."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"No capability registered for operation kind '{kind}'")
        self.kind = kind


class StepLimitExceededError(AgentCoreError):
    """Raised when a drain exceeds the configured graph step limit."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"Drain exceeded the step limit of {limit}")
        self.limit = limit


class ToolError(AgentCoreError):
    """Base error raised by file system and shell primitives."""


class FileToolError(ToolError):
    """Raised for unsuccessful file reads, edits, listings and searches."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class ShellToolError(ToolError):
    """Raised when a shell command cannot be spawned or times out."""

    def __init__(self, command: str, message: str) -> None:
        super().__init__(f"Shell command failed ({command!r}): {message}")
        self.command = command
