from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import ToolError
from ..llm.base import Message
from ..memory.context_memory import format_fragments
from ..schemas.domain import (
    ContextFragment,
    Explain,
    FragmentMetadata,
    ListDirectory,
    OperationKind,
    ReadFile,
    RunShellCommand,
    SearchFiles,
    UpdateFile,
    file_tags,
)
from ..tools import files as file_tools
from ..tools.shell import run_shell
from .base import (
    Capability,
    CapabilityContext,
    Done,
    ExecutionOutcome,
    Failed,
    RecordEvidence,
)

logger = logging.getLogger(__name__)

EXPLAIN_SYSTEM_PROMPT = """You are an AI assistant that explains code and answers questions about a codebase.

1. Review all provided context fragments for relevant information.
2. Answer the question directly, citing file paths where they help.
3. If the context does not contain the answer, say what is missing instead of guessing."""


@dataclass(frozen=True)
class ReadFileCapability(Capability):
    """
    Capability to read a window of lines from a file.

    The lines are returned as ``RecordEvidence`` so the engine appends them to
    the context memory.
    """

    kind: OperationKind = OperationKind.read_file

    async def handle(self, ctx: CapabilityContext, operation: ReadFile) -> ExecutionOutcome:
        """
        Read the file named by ``operation.target``.

        Args:
            ctx: The execution context.
            operation: The read request; ``limit`` is capped by ``ToolConfig.max_read_lines``.

        Returns:
            ExecutionOutcome: ``RecordEvidence`` with the file content, or ``Failed``.
        """
        path = file_tools.resolve_path(ctx.tools.workspace_root, operation.target)
        limit = min(operation.limit or ctx.tools.max_read_lines, ctx.tools.max_read_lines)
        try:
            window = file_tools.read_lines(path, offset=operation.offset or 0, limit=limit)
        except ToolError as e:
            return Failed(str(e))

        content = window.content
        if window.truncated:
            content = f"[lines {window.start + 1}-{window.end} of {window.total_lines}]\n{content}"
        fragment = ContextFragment(
            source="file_read",
            content=content,
            metadata=FragmentMetadata(kind="file", path=str(path), tags=file_tags(str(path))),
        )
        return RecordEvidence(fragment)


@dataclass(frozen=True)
class SearchFilesCapability(Capability):
    """
    Capability to find files by glob and optionally grep their content.
    """

    kind: OperationKind = OperationKind.search_files

    async def handle(self, ctx: CapabilityContext, operation: SearchFiles) -> ExecutionOutcome:
        base = file_tools.resolve_path(ctx.tools.workspace_root, operation.path or ".")
        limit = ctx.tools.max_search_results
        try:
            if operation.content_pattern:
                candidates = file_tools.glob_files(base, operation.pattern, ctx.tools.ignore_patterns)
                hits = file_tools.grep_files(candidates, operation.content_pattern, limit=limit)
                lines = [hit.render(base) for hit in hits]
                source, tag = "grep_search", f"pattern:{operation.content_pattern}"
            else:
                paths = file_tools.glob_files(base, operation.pattern, ctx.tools.ignore_patterns, limit=limit)
                lines = [str(p.relative_to(base)) for p in paths]
                source, tag = "glob_search", f"pattern:{operation.pattern}"
        except ToolError as e:
            return Failed(str(e))

        if lines:
            content = f"{operation.describe()} ({len(lines)} result(s)):\n" + "\n".join(lines)
        else:
            content = f"{operation.describe()}: no matches"
        logger.debug(f"{source} found {len(lines)} result(s) under {base}")
        fragment = ContextFragment(
            source=source,
            content=content,
            metadata=FragmentMetadata(kind="search", path=str(base), tags=[tag]),
        )
        return RecordEvidence(fragment)


@dataclass(frozen=True)
class UpdateFileCapability(Capability):
    """
    Capability to create or edit a file.

    Unlike the read-only capabilities, this one appends its evidence to the
    context memory itself and reports ``Done``.
    """

    kind: OperationKind = OperationKind.update_file

    async def handle(self, ctx: CapabilityContext, operation: UpdateFile) -> ExecutionOutcome:
        path = file_tools.resolve_path(ctx.tools.workspace_root, operation.target)
        try:
            change = file_tools.edit_file(path, operation.old_string, operation.new_string)
        except ToolError as e:
            return Failed(str(e))

        if change == "created":
            summary = f"Created {path} ({len(operation.new_string.splitlines())} line(s))"
        else:
            summary = f"Edited {path}\n--- old\n{operation.old_string}\n+++ new\n{operation.new_string}"
        await ctx.memory.append(
            ContextFragment(
                source="file_edit",
                content=summary,
                metadata=FragmentMetadata(
                    kind="file",
                    path=str(path),
                    tags=[*file_tags(str(path)), f"operation:{change}"],
                ),
            )
        )
        ctx.emit("File updated", summary.splitlines()[0])
        return Done()


@dataclass(frozen=True)
class RunShellCommandCapability(Capability):
    """
    Capability to execute shell commands.

    Runs the command in the workspace root. A non-zero exit status is still
    evidence; only spawn failures and timeouts are reported as ``Failed``.
    """

    kind: OperationKind = OperationKind.run_shell_command

    async def handle(self, ctx: CapabilityContext, operation: RunShellCommand) -> ExecutionOutcome:
        try:
            result = await run_shell(
                operation.command,
                cwd=ctx.tools.workspace_root,
                timeout=ctx.tools.shell_timeout_seconds,
            )
        except ToolError as e:
            return Failed(str(e))

        output = result.render()
        ctx.emit(f"$ {operation.command}", output)
        fragment = ContextFragment(
            source="shell",
            content=f"$ {operation.command}\n{output}",
            metadata=FragmentMetadata(kind="command", tags=[f"exit_code:{result.returncode}"]),
        )
        return RecordEvidence(fragment)


@dataclass(frozen=True)
class ListDirectoryCapability(Capability):
    kind: OperationKind = OperationKind.list_directory

    async def handle(self, ctx: CapabilityContext, operation: ListDirectory) -> ExecutionOutcome:
        path = file_tools.resolve_path(ctx.tools.workspace_root, operation.target)
        ignore = [*ctx.tools.ignore_patterns, *operation.ignore]
        try:
            entries = file_tools.list_directory(path, ignore)
        except ToolError as e:
            return Failed(str(e))

        listing = "\n".join(entries) if entries else "(empty directory)"
        fragment = ContextFragment(
            source="ls_tool",
            content=f"Contents of {path}:\n{listing}",
            metadata=FragmentMetadata(kind="directory", path=str(path), tags=[f"dir:{path.name or path}"]),
        )
        return RecordEvidence(fragment)


@dataclass(frozen=True)
class ExplainCapability(Capability):
    """
    Capability to answer a question from the gathered evidence.

    The whole context memory is formatted into the prompt; the answer is shown
    to the user and not stored.
    """

    kind: OperationKind = OperationKind.explain

    async def handle(self, ctx: CapabilityContext, operation: Explain) -> ExecutionOutcome:
        context = format_fragments(ctx.memory.snapshot())
        messages = [
            Message.system(EXPLAIN_SYSTEM_PROMPT),
            Message.user(f"{context}\n\nQuestion: {operation.query}"),
        ]
        response = await ctx.llm.generate_text(messages)
        if not response.success or not response.content:
            return Failed(f"explanation failed: {response.error or 'empty response'}")
        ctx.emit("Explanation", response.content)
        return Done()
