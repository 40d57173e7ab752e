"""ISC withdraw - move an ISC EVM account balance to a layer 1 address.

This library builds, externally signs and serializes the magic contract
``send`` call that withdraws an account's full balance from an IOTA/Shimmer
smart contract chain to a bech32 layer 1 address.
"""

from .address import L1Address, decode_l1_address, encode_l1_address
from .evm import (
    BalanceReconciler,
    ChainRpc,
    ConvergencePolicy,
    ExternalSigner,
    FixedRoundsPolicy,
    LocalKeySigner,
    MnemonicSigner,
    PreparedWithdrawal,
    WithdrawalClient,
    WithdrawalConfig,
)
from .exceptions import (
    EstimationError,
    FormatError,
    InsufficientFundsError,
    MismatchError,
    RpcError,
    WithdrawalError,
)
from .types import (
    AssetAllowance,
    Bip44Path,
    CallMetadata,
    CallOptions,
    RawSignature,
    WithdrawalResult,
)
from .utils import wei_to_base_tokens

__version__ = "0.1.0"

__all__ = [
    # Client
    "WithdrawalClient",
    "WithdrawalConfig",
    "ChainRpc",
    "PreparedWithdrawal",
    # Reconciliation
    "BalanceReconciler",
    "FixedRoundsPolicy",
    "ConvergencePolicy",
    # Signing
    "ExternalSigner",
    "MnemonicSigner",
    "LocalKeySigner",
    # Types
    "L1Address",
    "AssetAllowance",
    "CallMetadata",
    "CallOptions",
    "RawSignature",
    "Bip44Path",
    "WithdrawalResult",
    # Exceptions
    "WithdrawalError",
    "FormatError",
    "RpcError",
    "EstimationError",
    "InsufficientFundsError",
    "MismatchError",
    # Utility functions
    "decode_l1_address",
    "encode_l1_address",
    "wei_to_base_tokens",
]
