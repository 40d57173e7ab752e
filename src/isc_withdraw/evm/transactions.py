"""Legacy (EIP-155) transaction assembly and wire serialization."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import rlp
from eth_account import Account
from eth_typing import ChecksumAddress
from rlp.sedes import Binary, big_endian_int, binary
from web3 import Web3

from ..exceptions import FormatError, MismatchError

logger = logging.getLogger(__name__)

V_SLOT, R_SLOT, S_SLOT = 6, 7, 8


class LegacyTransaction(rlp.Serializable):
    """The nine-field legacy transaction as it appears on the wire."""

    fields = [
        ("nonce", big_endian_int),
        ("gas_price", big_endian_int),
        ("gas", big_endian_int),
        ("to", Binary.fixed_length(20, allow_empty=True)),
        ("value", big_endian_int),
        ("data", binary),
        ("v", big_endian_int),
        ("r", big_endian_int),
        ("s", big_endian_int),
    ]


@dataclass(frozen=True)
class UnsignedTransaction:
    nonce: int
    gas_price: int
    gas_limit: int
    to: bytes
    value: int
    data: bytes
    chain_id: int

    def raw(self) -> list[Any]:
        """Return the field vector with empty signature slots."""

        return [self.nonce, self.gas_price, self.gas_limit, self.to, self.value, self.data, 0, 0, 0]

    def signing_payload(self) -> bytes:
        """RLP pre-image of the signature: the chain id takes the ``v`` slot."""

        fields = self.raw()
        fields[V_SLOT] = self.chain_id
        return rlp.encode(LegacyTransaction(*fields))

    def message_hash(self) -> bytes:
        return bytes(Web3.keccak(self.signing_payload()))


class SignedTransaction:
    """Signed transaction derived from an :class:`UnsignedTransaction` field vector."""

    def __init__(self, transaction: LegacyTransaction) -> None:
        self._transaction = transaction

    @property
    def v(self) -> int:
        return self._transaction.v

    @property
    def r(self) -> int:
        return self._transaction.r

    @property
    def s(self) -> int:
        return self._transaction.s

    def raw(self) -> list[Any]:
        return [getattr(self._transaction, name) for name in LegacyTransaction._meta.field_names]

    def serialize(self) -> bytes:
        return rlp.encode(self._transaction)

    def to_hex(self) -> str:
        return "0x" + self.serialize().hex()

    @property
    def hash(self) -> str:
        return Web3.keccak(self.serialize()).to_0x_hex()

    @property
    def sender(self) -> ChecksumAddress:
        """Recover the signer address from the serialized transaction."""

        return Account.recover_transaction(self.serialize())

    def verify_sender(self, expected: str) -> None:
        try:
            actual = self.sender
        except Exception as exc:
            raise MismatchError(
                "Unable to recover sender from signed transaction",
                expected=expected,
                details={"error": str(exc)},
            ) from exc

        if actual.lower() != expected.lower():
            raise MismatchError(
                "Mismatch in addresses",
                expected=expected,
                actual=actual,
                details={"tx_hash": self.hash},
            )
        logger.debug("Recovered sender %s matches", actual)


def assemble_transaction(
    *,
    nonce: int,
    gas_price: int,
    gas_limit: int,
    to: str,
    data: bytes,
    chain_id: int,
) -> UnsignedTransaction:
    """Build the unsigned contract call; funds move through calldata so value is 0."""

    try:
        to_bytes = bytes(Web3.to_bytes(hexstr=Web3.to_checksum_address(to)))
    except (TypeError, ValueError) as exc:
        raise FormatError("Invalid contract address", field="to", value=to) from exc

    return UnsignedTransaction(
        nonce=int(nonce),
        gas_price=int(gas_price),
        gas_limit=int(gas_limit),
        to=to_bytes,
        value=0,
        data=bytes(data),
        chain_id=int(chain_id),
    )


def attach_signature(
    unsigned: UnsignedTransaction, v: int, r: bytes, s: bytes
) -> SignedTransaction:
    """Fold ``(v, r, s)`` into the signature slots of the unsigned field vector."""

    fields = unsigned.raw()
    fields[V_SLOT] = v
    fields[R_SLOT] = int.from_bytes(r, "big")
    fields[S_SLOT] = int.from_bytes(s, "big")
    return SignedTransaction(LegacyTransaction(*fields))
