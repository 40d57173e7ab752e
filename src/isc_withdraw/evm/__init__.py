"""ISC EVM withdrawal components."""

from .client import PreparedWithdrawal, WithdrawalClient
from .config import WithdrawalConfig
from .connections import ChainRpc
from .reconcile import (
    BalanceReconciler,
    ConvergencePolicy,
    FixedRoundsPolicy,
    Reconciliation,
    ReconcileRound,
)
from .signers import ExternalSigner, LocalKeySigner, MnemonicSigner

__all__ = [
    "BalanceReconciler",
    "ChainRpc",
    "ConvergencePolicy",
    "ExternalSigner",
    "FixedRoundsPolicy",
    "LocalKeySigner",
    "MnemonicSigner",
    "PreparedWithdrawal",
    "Reconciliation",
    "ReconcileRound",
    "WithdrawalClient",
    "WithdrawalConfig",
]
