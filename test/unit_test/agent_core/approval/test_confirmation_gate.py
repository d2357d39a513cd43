from __future__ import annotations

import logging

import click
import pytest

from indiefuture_agent.agent_core.approval.gate import (
    AutoApproveGate,
    ClickConfirmationGate,
    DenyAllGate,
    select_gate,
)
from indiefuture_agent.agent_core.schemas.domain import OperationCategory
from indiefuture_agent.core.config import ApprovalConfig


class TestSelectGate:
    def test_yes_flag_wins(self) -> None:
        gate = select_gate(ApprovalConfig(), interactive=True, assume_yes=True)

        assert gate == AutoApproveGate(reason="--yes")

    def test_auto_approve_setting(self) -> None:
        gate = select_gate(ApprovalConfig(auto_approve=True), interactive=True)

        assert isinstance(gate, AutoApproveGate)

    def test_interactive_terminal_prompts(self) -> None:
        assert isinstance(select_gate(ApprovalConfig(), interactive=True), ClickConfirmationGate)

    def test_non_interactive_approves_by_default(self) -> None:
        assert isinstance(select_gate(ApprovalConfig(), interactive=False), AutoApproveGate)

    def test_non_interactive_can_decline(self) -> None:
        gate = select_gate(ApprovalConfig(approve_when_non_interactive=False), interactive=False)

        assert isinstance(gate, DenyAllGate)


class TestGates:
    @pytest.mark.asyncio
    async def test_auto_approve_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="indiefuture_agent.agent_core.approval.gate"):
            approved = await AutoApproveGate().ask("Run: make", OperationCategory.execute)

        assert approved is True
        assert "Run: make" in caplog.text

    @pytest.mark.asyncio
    async def test_deny_all_declines(self) -> None:
        assert await DenyAllGate().ask("Edit a.py", OperationCategory.write) is False

    @pytest.mark.asyncio
    async def test_click_gate_asks_with_category(self, monkeypatch: pytest.MonkeyPatch) -> None:
        questions = []

        def fake_confirm(question: str, default: bool) -> bool:
            questions.append((question, default))
            return False

        monkeypatch.setattr(click, "confirm", fake_confirm)

        approved = await ClickConfirmationGate().ask("Run: rm -rf build", OperationCategory.execute)

        assert approved is False
        assert questions == [("[execute] Run: rm -rf build\nProceed?", True)]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [click.Abort(), EOFError()])
    async def test_click_gate_interrupted_prompt_declines(self, monkeypatch: pytest.MonkeyPatch, error) -> None:
        def interrupted(question: str, default: bool) -> bool:
            raise error

        monkeypatch.setattr(click, "confirm", interrupted)

        assert await ClickConfirmationGate().ask("Run: make", OperationCategory.execute) is False
