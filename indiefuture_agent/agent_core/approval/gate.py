"""Confirmation gate.

The engine asks the gate before running any operation whose
``requires_approval`` flag is set. A ``False`` answer ends the current drain.

Gates:

- ``ClickConfirmationGate``: asks on the terminal via ``click.confirm``.
- ``AutoApproveGate``: approves everything and logs a warning each time.
- ``DenyAllGate``: declines everything and logs a warning each time.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

import click

from ...core.config import ApprovalConfig
from ..schemas.domain import OperationCategory

logger = logging.getLogger(__name__)


class ConfirmationGate(Protocol):
    async def ask(self, description: str, category: OperationCategory) -> bool: ...


@dataclass(frozen=True)
class ClickConfirmationGate:
    """Interactive yes/no prompt. The default answer is yes.

    An interrupted prompt (Ctrl-C or end of input) counts as a decline.
    """

    default: bool = True

    async def ask(self, description: str, category: OperationCategory) -> bool:
        question = f"[{category.value}] {description}\nProceed?"
        try:
            return await asyncio.to_thread(click.confirm, question, default=self.default)
        except (click.Abort, EOFError):
            logger.info(f"Confirmation prompt interrupted; declining [{category.value}] {description}")
            return False


@dataclass(frozen=True)
class AutoApproveGate:
    reason: str = "auto-approve enabled"

    async def ask(self, description: str, category: OperationCategory) -> bool:
        logger.warning(f"Approving [{category.value}] {description} without confirmation ({self.reason})")
        return True


@dataclass(frozen=True)
class DenyAllGate:
    reason: str = "no interactive terminal"

    async def ask(self, description: str, category: OperationCategory) -> bool:
        logger.warning(f"Declining [{category.value}] {description} ({self.reason})")
        return False


def select_gate(config: ApprovalConfig, *, interactive: bool, assume_yes: bool = False) -> ConfirmationGate:
    """Pick the gate for the current session.

    Args:
        config: Approval settings.
        interactive: Whether a terminal is attached to stdin.
        assume_yes: Explicit ``--yes`` from the command line.

    Returns:
        ConfirmationGate: The gate the engine should use.
    """
    if assume_yes or config.auto_approve:
        return AutoApproveGate(reason="--yes" if assume_yes else "INDIEFUTURE_AUTO_APPROVE")
    if interactive:
        return ClickConfirmationGate()
    if config.approve_when_non_interactive:
        return AutoApproveGate(reason="no interactive terminal")
    return DenyAllGate()
