"""File system and shell primitives wrapped by the built-in capabilities."""

from .files import FileSlice, GrepMatch, edit_file, glob_files, grep_files, list_directory, read_lines, resolve_path
from .shell import ShellResult, run_shell

__all__ = [
    "FileSlice",
    "GrepMatch",
    "ShellResult",
    "edit_file",
    "glob_files",
    "grep_files",
    "list_directory",
    "read_lines",
    "resolve_path",
    "run_shell",
]
