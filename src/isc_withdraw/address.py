"""bech32 codec for layer 1 recipient addresses.

A layer 1 address is ``bech32(hrp, payload)`` where the first payload byte is
the address type and the remainder is the address body (for example the
blake2b hash of an Ed25519 public key). The ISC magic contract expects the
body prefixed with a discriminator byte, see :meth:`L1Address.as_call_argument`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import bech32

from .constants import AddressKind
from .exceptions import FormatError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class L1Address:
    """Decoded layer 1 address."""

    address_type: int
    address_bytes: bytes
    hrp: str

    @property
    def payload(self) -> bytes:
        return bytes([self.address_type]) + self.address_bytes

    def to_bech32(self, hrp: str | None = None) -> str:
        return encode_l1_address(self.address_type, self.address_bytes, hrp or self.hrp)

    def as_call_argument(self) -> tuple[bytes]:
        """Return the ``L1Address`` struct tuple passed to the magic contract."""

        return (bytes([AddressKind.PLAIN]) + self.address_bytes,)


def decode_l1_address(text: str, expected_hrp: str) -> L1Address:
    """Decode ``text`` and check it belongs to the ``expected_hrp`` network."""

    hrp, data = bech32.bech32_decode(text)
    if hrp is None or data is None:
        raise FormatError(f"Bech32 decoding of {text} failed", field="address", value=text)

    if hrp != expected_hrp:
        raise FormatError(
            f"The hrp part of the address should be {expected_hrp}, it is {hrp}",
            field="hrp",
            value=hrp,
            details={"address": text},
        )

    payload = bech32.convertbits(data, 5, 8, False)
    if payload is None:
        raise FormatError(
            f"Bech32 payload of {text} has invalid padding", field="address", value=text
        )

    if len(payload) == 0:
        raise FormatError(
            "The data part of the address should be at least length 1, it is 0",
            field="address",
            value=text,
        )

    address = L1Address(address_type=payload[0], address_bytes=bytes(payload[1:]), hrp=hrp)
    logger.debug(
        "Decoded L1 address %s (type=%d, %d bytes)", text, address.address_type, len(payload) - 1
    )
    return address


def encode_l1_address(address_type: int, address_bytes: bytes, hrp: str) -> str:
    if not 0 <= address_type <= 0xFF:
        raise FormatError(
            "Address type must fit in one byte", field="address_type", value=address_type
        )

    data = bech32.convertbits(bytes([address_type]) + bytes(address_bytes), 8, 5, True)
    return bech32.bech32_encode(hrp, data)
