"""Human approval checkpoint for sensitive operations."""

from .gate import AutoApproveGate, ClickConfirmationGate, ConfirmationGate, DenyAllGate, select_gate

__all__ = [
    "AutoApproveGate",
    "ClickConfirmationGate",
    "ConfirmationGate",
    "DenyAllGate",
    "select_gate",
]
