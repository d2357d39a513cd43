"""Shared, append-only evidence log.

``ContextMemory`` is owned by the engine for its whole lifetime and handed by
reference to every capability. Mutations go through an ``asyncio.Lock`` so at
most one mutator is in flight even if dispatch ever becomes concurrent.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Sequence

from ..schemas.domain import ContextFragment

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 100
_EVIDENCE_SOURCES = ("search", "file_read", "ls_tool")


class ContextMemory:
    """Ordered fragment log with exclusive mutation."""

    def __init__(self, fragments: Iterable[ContextFragment] = ()) -> None:
        self._fragments: List[ContextFragment] = list(fragments)
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._fragments)

    async def append(self, fragment: ContextFragment) -> None:
        async with self._lock:
            self._fragments.append(fragment)
        preview = fragment.content[:_PREVIEW_CHARS].replace("\n", " ")
        logger.debug(f"Context fragment #{len(self._fragments)} from '{fragment.source}': {preview}")

    def snapshot(self) -> List[ContextFragment]:
        """Copy of the fragments in append order."""
        return list(self._fragments)

    async def clear(self) -> None:
        async with self._lock:
            count = len(self._fragments)
            self._fragments.clear()
        logger.info(f"Context memory cleared ({count} fragments dropped)")

    def relevant(self, query: str, limit: int = 5) -> List[ContextFragment]:
        """Select the fragments that best match ``query``.

        Every whitespace-separated query term found in a fragment's content
        scores 1; terms found in its path or tags score 2. Fragments with a
        positive score, plus any produced by read/search/list tools, are kept
        and the ``limit`` best are returned, ties keeping append order.

        Args:
            query: Free-text description of what the caller is looking for.
            limit: Maximum number of fragments returned.

        Returns:
            The selected fragments, best first.
        """
        terms = [t for t in query.lower().split() if t]
        scored = []
        for position, fragment in enumerate(self._fragments):
            score = _score(fragment, terms)
            if score > 0 or any(src in fragment.source for src in _EVIDENCE_SOURCES):
                scored.append((score, position, fragment))
        scored.sort(key=lambda entry: (-entry[0], entry[1]))
        return [fragment for _, _, fragment in scored[:limit]]


def _score(fragment: ContextFragment, terms: Sequence[str]) -> int:
    content = fragment.content.lower()
    score = sum(1 for term in terms if term in content)
    meta = fragment.metadata
    if meta is not None:
        if meta.path:
            path = meta.path.lower()
            score += sum(2 for term in terms if term in path)
        for tag in meta.tags:
            tag_lower = tag.lower()
            score += sum(2 for term in terms if term in tag_lower)
    return score


def format_fragments(fragments: Sequence[ContextFragment], max_chars: int = 2000) -> str:
    """Render fragments as a prompt-ready context block."""
    if not fragments:
        return "No relevant context available."

    parts = [f"=== RELEVANT CONTEXT ({len(fragments)} ITEMS) ===\n"]
    for i, fragment in enumerate(fragments, start=1):
        lines = [f"--- CONTEXT ITEM {i} ---", f"Source: {fragment.source}"]
        meta = fragment.metadata
        if meta is not None:
            if meta.kind:
                lines.append(f"Type: {meta.kind}")
            if meta.path:
                lines.append(f"Path: {meta.path}")
            if meta.tags:
                lines.append(f"Tags: {', '.join(meta.tags)}")
        content = fragment.content
        if len(content) > max_chars:
            content = content[:max_chars] + "...(truncated)"
        lines.extend(["Content:", "```", content, "```", ""])
        parts.append("\n".join(lines))
    return "\n".join(parts)
