from __future__ import annotations

from pathlib import Path

import pytest

from indiefuture_agent.agent_core.errors import FileToolError
from indiefuture_agent.agent_core.tools.files import (
    edit_file,
    glob_files,
    grep_files,
    is_ignored,
    list_directory,
    read_lines,
    resolve_path,
)


@pytest.fixture
def sample(tmp_path: Path) -> Path:
    path = tmp_path / "sample.txt"
    path.write_text("one\ntwo\nthree\nfour\n")
    return path


class TestReadLines:
    def test_whole_file(self, sample: Path) -> None:
        window = read_lines(sample)

        assert window.content == "one\ntwo\nthree\nfour\n"
        assert (window.start, window.end, window.total_lines) == (0, 4, 4)
        assert not window.truncated

    def test_offset_and_limit(self, sample: Path) -> None:
        window = read_lines(sample, offset=1, limit=2)

        assert window.content == "two\nthree\n"
        assert window.truncated

    def test_offset_past_end_is_empty(self, sample: Path) -> None:
        assert read_lines(sample, offset=10).content == ""

    def test_directory_is_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(FileToolError, match="not a regular file"):
            read_lines(tmp_path)


class TestEditFile:
    def test_unique_replacement(self, sample: Path) -> None:
        assert edit_file(sample, "two", "2") == "edited"
        assert sample.read_text() == "one\n2\nthree\nfour\n"

    def test_missing_snippet(self, sample: Path) -> None:
        with pytest.raises(FileToolError, match="not found"):
            edit_file(sample, "five", "5")

    def test_create_refuses_existing_file(self, sample: Path) -> None:
        with pytest.raises(FileToolError, match="already exists"):
            edit_file(sample, "", "new")
        assert sample.read_text() == "one\ntwo\nthree\nfour\n"

    def test_create(self, tmp_path: Path) -> None:
        target = tmp_path / "fresh.txt"

        assert edit_file(target, "", "hello") == "created"
        assert target.read_text() == "hello"


class TestListingAndSearch:
    def test_resolve_path(self, tmp_path: Path) -> None:
        assert resolve_path(tmp_path, "a/b.txt") == tmp_path / "a" / "b.txt"
        assert resolve_path(tmp_path, "/etc/hosts") == Path("/etc/hosts")

    def test_is_ignored_matches_any_segment(self) -> None:
        assert is_ignored(Path("pkg/node_modules/x.js"), ["node_modules"])
        assert is_ignored(Path("build/cache.pyc"), ["*.pyc"])
        assert not is_ignored(Path("src/app.py"), [".git", "node_modules"])

    def test_list_directory_sorts_directories_first(self, tmp_path: Path) -> None:
        (tmp_path / "b.txt").write_text("")
        (tmp_path / "a_dir").mkdir()
        (tmp_path / "C.txt").write_text("")

        assert list_directory(tmp_path) == ["a_dir/", "b.txt", "C.txt"]

    def test_list_directory_rejects_files(self, sample: Path) -> None:
        with pytest.raises(FileToolError, match="not a directory"):
            list_directory(sample)

    def test_glob_and_grep(self, tmp_path: Path) -> None:
        (tmp_path / "a.py").write_text("x = 1\n# TODO: fix\n")
        (tmp_path / "b.py").write_text("# TODO: more\n# TODO: again\n")
        (tmp_path / "c.txt").write_text("TODO\n")

        files = glob_files(tmp_path, "*.py")
        assert [p.name for p in files] == ["a.py", "b.py"]

        hits = grep_files(files, r"TODO", limit=2)
        assert [(h.path.name, h.line_number) for h in hits] == [("a.py", 2), ("b.py", 1)]
        assert hits[0].render(tmp_path) == "a.py:2: # TODO: fix"

    def test_glob_requires_directory(self, sample: Path) -> None:
        with pytest.raises(FileToolError):
            glob_files(sample, "*")
