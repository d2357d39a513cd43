"""Context memory shared by every capability of a run."""

from .context_memory import ContextMemory, format_fragments

__all__ = ["ContextMemory", "format_fragments"]
