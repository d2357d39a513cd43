"""Shell execution primitive.

Commands run through ``sh -c`` as an asyncio subprocess that is awaited
inline. A timeout kills the process and raises ``ShellToolError``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from ..errors import ShellToolError

logger = logging.getLogger(__name__)

MAX_OUTPUT_CHARS = 8000


@dataclass(frozen=True, slots=True)
class ShellResult:
    """Result of a command execution."""

    command: str
    returncode: int
    stdout: str
    stderr: str
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def render(self) -> str:
        """Combined, size-capped output suitable for display and context memory."""
        output = self.stdout
        if self.stderr:
            output = f"{output}\n[stderr]\n{self.stderr}" if output else self.stderr
        if not self.ok:
            output = f"[exit code {self.returncode}]\n{output}"
        if not output:
            return f"Command completed (exit code {self.returncode})"
        if len(output) > MAX_OUTPUT_CHARS:
            return output[:MAX_OUTPUT_CHARS] + "...(truncated)"
        return output


def _decode(data: Optional[bytes]) -> str:
    return data.decode("utf-8", errors="replace") if data else ""


async def run_shell(command: str, *, cwd: Optional[str] = None, timeout: Optional[float] = None) -> ShellResult:
    """Run ``command`` with ``sh -c`` and capture its output.

    Raises:
        ShellToolError: If the process cannot be spawned or does not finish within ``timeout``.
    """
    logger.info(f"Running shell command: {command}")
    started = time.monotonic()
    try:
        proc = await asyncio.create_subprocess_exec(
            "sh",
            "-c",
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
    except OSError as e:
        raise ShellToolError(command, str(e)) from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError as e:
        proc.kill()
        await proc.wait()
        raise ShellToolError(command, f"timed out after {timeout}s") from e

    result = ShellResult(
        command=command,
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=_decode(stdout),
        stderr=_decode(stderr),
        duration_seconds=time.monotonic() - started,
    )
    logger.debug(f"Shell command finished: returncode={result.returncode} duration={result.duration_seconds:.2f}s")
    return result
