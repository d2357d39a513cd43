"""File system primitives used by the built-in capabilities.

All functions are synchronous and raise ``FileToolError`` on failure.
"""

from __future__ import annotations

import fnmatch
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Literal, Optional, Sequence

from ..errors import FileToolError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FileSlice:
    """A window of lines read from a file. ``start`` is 0-based, ``end`` exclusive."""

    path: Path
    content: str
    start: int
    end: int
    total_lines: int

    @property
    def truncated(self) -> bool:
        return self.start > 0 or self.end < self.total_lines


@dataclass(frozen=True, slots=True)
class GrepMatch:
    path: Path
    line_number: int
    line: str

    def render(self, base: Optional[Path] = None) -> str:
        shown = _relative(self.path, base)
        return f"{shown}:{self.line_number}: {self.line.rstrip()}"


def _relative(path: Path, base: Optional[Path]) -> str:
    if base is not None:
        try:
            return str(path.relative_to(base))
        except ValueError:
            pass
    return str(path)


def resolve_path(root: str | Path, target: str) -> Path:
    """Resolve ``target`` against ``root`` unless it is already absolute."""
    path = Path(target).expanduser()
    if not path.is_absolute():
        path = Path(root) / path
    return path


def is_ignored(path: Path, patterns: Iterable[str]) -> bool:
    """True when any segment of ``path`` matches one of the glob ``patterns``."""
    patterns = list(patterns)
    return any(fnmatch.fnmatch(part, pattern) for part in path.parts for pattern in patterns)


def read_lines(path: Path, *, offset: int = 0, limit: Optional[int] = None) -> FileSlice:
    """Read ``limit`` lines of ``path`` starting at line ``offset``."""
    if not path.exists():
        raise FileToolError(str(path), "file does not exist")
    if not path.is_file():
        raise FileToolError(str(path), "not a regular file")
    try:
        lines = path.read_text(encoding="utf-8", errors="replace").splitlines(keepends=True)
    except OSError as e:
        raise FileToolError(str(path), str(e)) from e

    start = min(offset, len(lines))
    end = len(lines) if limit is None else min(start + limit, len(lines))
    return FileSlice(path=path, content="".join(lines[start:end]), start=start, end=end, total_lines=len(lines))


def edit_file(path: Path, old_string: str, new_string: str) -> Literal["created", "edited"]:
    """Create or edit ``path``.

    An empty ``old_string`` creates a new file whose parent directory must
    already exist. Otherwise ``old_string`` must occur exactly once and is
    replaced by ``new_string``.

    Returns:
        ``"created"`` or ``"edited"``.

    Raises:
        FileToolError: When the preconditions above do not hold or the write fails.
    """
    if not old_string:
        if path.exists():
            raise FileToolError(str(path), "file already exists; an empty old_string only creates new files")
        if not path.parent.is_dir():
            raise FileToolError(str(path), f"parent directory {path.parent} does not exist")
        try:
            path.write_text(new_string, encoding="utf-8")
        except OSError as e:
            raise FileToolError(str(path), str(e)) from e
        logger.info(f"Created file {path}")
        return "created"

    if not path.is_file():
        raise FileToolError(str(path), "file does not exist")
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileToolError(str(path), str(e)) from e

    occurrences = content.count(old_string)
    if occurrences == 0:
        raise FileToolError(str(path), "old_string not found")
    if occurrences > 1:
        raise FileToolError(str(path), f"old_string occurs {occurrences} times; it must be unique")

    try:
        path.write_text(content.replace(old_string, new_string, 1), encoding="utf-8")
    except OSError as e:
        raise FileToolError(str(path), str(e)) from e
    logger.info(f"Edited file {path}")
    return "edited"


def list_directory(path: Path, ignore: Sequence[str] = ()) -> List[str]:
    """Sorted entry names of ``path``; directories carry a trailing ``/``."""
    if not path.exists():
        raise FileToolError(str(path), "path does not exist")
    if not path.is_dir():
        raise FileToolError(str(path), "not a directory")
    try:
        entries = sorted(path.iterdir(), key=lambda p: (not p.is_dir(), p.name.lower()))
    except OSError as e:
        raise FileToolError(str(path), str(e)) from e
    return [f"{e.name}/" if e.is_dir() else e.name for e in entries if not is_ignored(Path(e.name), ignore)]


def glob_files(base: Path, pattern: str, ignore: Sequence[str] = (), limit: Optional[int] = None) -> List[Path]:
    """Files under ``base`` matching the glob ``pattern``, sorted by path."""
    if not base.is_dir():
        raise FileToolError(str(base), "search path is not a directory")
    try:
        candidates = sorted(p for p in base.glob(pattern) if p.is_file())
    except (OSError, ValueError) as e:
        raise FileToolError(str(base), f"invalid glob pattern {pattern!r}: {e}") from e
    matches = [p for p in candidates if not is_ignored(p.relative_to(base), ignore)]
    return matches if limit is None else matches[:limit]


def grep_files(files: Iterable[Path], regex: str, limit: Optional[int] = None) -> List[GrepMatch]:
    """Lines of ``files`` matching ``regex``; unreadable files are skipped."""
    try:
        compiled = re.compile(regex)
    except re.error as e:
        raise FileToolError(regex, f"invalid regular expression: {e}") from e

    matches: List[GrepMatch] = []
    for path in files:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            logger.debug(f"Skipping unreadable file during grep: {path}")
            continue
        for number, line in enumerate(text.splitlines(), start=1):
            if compiled.search(line):
                matches.append(GrepMatch(path=path, line_number=number, line=line))
                if limit is not None and len(matches) >= limit:
                    return matches
    return matches
