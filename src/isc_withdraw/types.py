"""Type definitions and data models for the ISC withdrawal builder."""

from dataclasses import dataclass, field
from typing import Any

from .constants import ETHEREUM_COIN_TYPE


@dataclass(frozen=True)
class NativeTokenAmount:
    """Amount of a single L1 native token."""

    token_id: bytes
    amount: int

    def as_tuple(self) -> tuple[tuple[bytes], int]:
        return ((self.token_id,), self.amount)


@dataclass(frozen=True)
class AssetAllowance:
    """Serializable representation of ``ISCAssets``."""

    base_tokens: int = 0
    native_tokens: tuple[NativeTokenAmount, ...] = ()
    nfts: tuple[bytes, ...] = ()

    def as_tuple(self) -> tuple[int, list[tuple[tuple[bytes], int]], list[bytes]]:
        """Return the allowance as tuple consumable by eth_abi."""

        return (
            self.base_tokens,
            [token.as_tuple() for token in self.native_tokens],
            list(self.nfts),
        )


@dataclass(frozen=True)
class CallMetadata:
    """Serializable representation of ``ISCSendMetadata``.

    All fields default to zero, which is the "plain transfer" mode of the
    magic contract: no contract is invoked on the receiving chain.
    """

    target_contract: int = 0
    entrypoint: int = 0
    params: tuple[tuple[bytes, bytes], ...] = ()
    allowance: AssetAllowance = field(default_factory=AssetAllowance)
    gas_budget: int = 0

    def as_tuple(self) -> tuple[Any, ...]:
        return (
            self.target_contract,
            self.entrypoint,
            ([(key, value) for key, value in self.params],),
            self.allowance.as_tuple(),
            self.gas_budget,
        )


@dataclass(frozen=True)
class Expiration:
    """Expiration time and the address funds fall back to after it."""

    time: int = 0
    return_address: bytes = b""


@dataclass(frozen=True)
class CallOptions:
    """Serializable representation of ``ISCSendOptions``."""

    timelock: int = 0
    expiration: Expiration = field(default_factory=Expiration)

    def as_tuple(self) -> tuple[int, tuple[int, tuple[bytes]]]:
        return (
            self.timelock,
            (self.expiration.time, (self.expiration.return_address,)),
        )


@dataclass(frozen=True)
class RawSignature:
    """Recoverable secp256k1 signature as returned by an external signer."""

    r: bytes
    s: bytes
    recovery_parity: int


@dataclass(frozen=True)
class Bip44Path:
    """BIP-44 derivation path descriptor handed to the external signer."""

    coin_type: int = ETHEREUM_COIN_TYPE
    account: int = 0
    change: int = 0
    address_index: int = 0

    def to_derivation_path(self) -> str:
        return f"m/44'/{self.coin_type}'/{self.account}'/{self.change}/{self.address_index}"


@dataclass
class WithdrawalResult:
    """Outcome of a broadcast withdrawal."""

    transaction_hash: str
    raw_transaction: str
    sender: str
    recipient: str
    base_tokens: int
    gas_limit: int
    gas_price: int
    nonce: int
    receipt: dict[str, Any] | None = None
    block_number: int | None = None
