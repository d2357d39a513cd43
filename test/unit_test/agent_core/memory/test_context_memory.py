from __future__ import annotations

import asyncio

import pytest

from indiefuture_agent.agent_core.memory.context_memory import ContextMemory, format_fragments
from indiefuture_agent.agent_core.schemas.domain import ContextFragment, FragmentMetadata


def _frag(content: str, source: str = "note", **meta) -> ContextFragment:
    return ContextFragment(source=source, content=content, metadata=FragmentMetadata(**meta) if meta else None)


class TestContextMemory:
    @pytest.mark.asyncio
    async def test_append_and_snapshot_preserve_order(self) -> None:
        memory = ContextMemory()
        for i in range(3):
            await memory.append(_frag(f"f{i}"))

        snapshot = memory.snapshot()

        assert [f.content for f in snapshot] == ["f0", "f1", "f2"]
        assert len(memory) == 3

    @pytest.mark.asyncio
    async def test_snapshot_is_a_copy(self) -> None:
        memory = ContextMemory()
        await memory.append(_frag("a"))
        snapshot = memory.snapshot()

        await memory.append(_frag("b"))

        assert [f.content for f in snapshot] == ["a"]

    @pytest.mark.asyncio
    async def test_clear_drops_everything(self) -> None:
        memory = ContextMemory([_frag("a"), _frag("b")])

        await memory.clear()

        assert len(memory) == 0
        assert memory.snapshot() == []

    @pytest.mark.asyncio
    async def test_concurrent_appends_are_all_kept(self) -> None:
        memory = ContextMemory()

        await asyncio.gather(*(memory.append(_frag(str(i))) for i in range(50)))

        assert sorted(int(f.content) for f in memory.snapshot()) == list(range(50))

    def test_fragments_are_immutable(self) -> None:
        fragment = _frag("a")

        with pytest.raises(Exception):
            fragment.content = "b"  # type: ignore[misc]


class TestRelevance:
    def test_path_and_tag_matches_outrank_content_matches(self) -> None:
        memory = ContextMemory(
            [
                _frag("the logger is configured here", source="note"),
                _frag("x = 1", source="note", path="/repo/logger.py", tags=["file:logger.py"]),
                _frag("unrelated", source="note"),
            ]
        )

        selected = memory.relevant("logger")

        assert [f.content for f in selected] == ["x = 1", "the logger is configured here"]

    def test_tool_evidence_is_kept_even_without_matches(self) -> None:
        memory = ContextMemory([_frag("listing", source="ls_tool"), _frag("chat", source="note")])

        assert [f.content for f in memory.relevant("database")] == ["listing"]

    def test_limit_is_applied_after_ranking(self) -> None:
        memory = ContextMemory([_frag(f"api {i}", source="note") for i in range(8)])

        selected = memory.relevant("api", limit=5)

        assert [f.content for f in selected] == [f"api {i}" for i in range(5)]


class TestFormatFragments:
    def test_empty(self) -> None:
        assert format_fragments([]) == "No relevant context available."

    def test_renders_metadata_and_truncates(self) -> None:
        text = format_fragments(
            [_frag("a" * 30, source="file_read", kind="file", path="/x.py", tags=["file:x.py", "ext:py"])],
            max_chars=10,
        )

        assert text.startswith("=== RELEVANT CONTEXT (1 ITEMS) ===")
        assert "--- CONTEXT ITEM 1 ---" in text
        assert "Source: file_read" in text
        assert "Type: file" in text
        assert "Path: /x.py" in text
        assert "Tags: file:x.py, ext:py" in text
        assert "aaaaaaaaaa...(truncated)" in text
