"""Capability lookup by operation kind.

The set of operation kinds is closed (``OperationKind``), so the registry is a
plain table from kind to handler. ``SubtaskEngine`` resolves every popped work
item here before dispatch; a kind with no handler is a wiring error and is
reported as ``UnregisteredCapabilityError`` instead of being skipped.
"""

from __future__ import annotations

from typing import Dict, List, Union

from ..errors import UnregisteredCapabilityError
from ..schemas.domain import OperationKind
from .base import Capability


class CapabilityRegistry:
    """Table of operation handlers.

    Registering a second handler for a kind replaces the first, which is how
    tests swap a built-in capability for a scripted one.
    """

    def __init__(self) -> None:
        self._caps: Dict[OperationKind, Capability] = {}

    def register(self, cap: Capability) -> None:
        """Install ``cap`` as the handler for ``cap.kind``.

        Raises:
            ValueError: If ``cap.kind`` is not an ``OperationKind`` value.
        """
        self._caps[OperationKind(cap.kind)] = cap

    def get(self, kind: Union[OperationKind, str]) -> Capability:
        """Return the handler for ``kind``.

        Raises:
            UnregisteredCapabilityError: If nothing handles ``kind``, including
                strings that name no operation kind at all.
        """
        try:
            return self._caps[OperationKind(kind)]
        except (KeyError, ValueError):
            raise UnregisteredCapabilityError(str(getattr(kind, "value", kind))) from None

    def has(self, kind: Union[OperationKind, str]) -> bool:
        return kind in self._caps

    def kinds(self) -> List[OperationKind]:
        """Kinds with a handler, in registration order."""
        return list(self._caps)
