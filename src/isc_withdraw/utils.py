"""Utility functions for the ISC withdrawal builder."""

from collections.abc import Mapping, Sequence
from typing import Any

from hexbytes import HexBytes

from .constants import UINT64_MAX, WEI_PER_GLOW
from .exceptions import FormatError


def wei_to_base_tokens(balance_wei: int) -> tuple[int, int]:
    """Convert an EVM balance to L1 base tokens.

    Returns ``(base_tokens, dust)``; ``dust`` is the wei remainder that cannot
    be expressed in base tokens and stays on the account.
    """
    if balance_wei < 0:
        raise FormatError("Balance cannot be negative", field="balance", value=balance_wei)
    return divmod(int(balance_wei), WEI_PER_GLOW)


def parse_base_tokens(value: int | str) -> int:
    """Validate a base token amount given as int or decimal string."""
    if isinstance(value, bool):
        raise FormatError("Base tokens must be an integer", field="base_tokens", value=value)

    if isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            raise FormatError(
                "Base tokens must be a non-negative decimal string",
                field="base_tokens",
                value=value,
            )
        amount = int(text)
    elif isinstance(value, int):
        amount = value
    else:
        raise FormatError("Base tokens must be an integer", field="base_tokens", value=value)

    if amount < 0:
        raise FormatError("Base tokens cannot be negative", field="base_tokens", value=value)

    if amount > UINT64_MAX:
        raise FormatError("Base tokens exceed uint64 maximum", field="base_tokens", value=value)

    return amount


def serialise_receipt(receipt: Any) -> Any:
    """Serialise web3 receipt objects into JSON-friendly structures."""
    if receipt is None:
        return None
    if isinstance(receipt, Mapping):
        return {key: serialise_receipt(value) for key, value in receipt.items()}
    if isinstance(receipt, Sequence) and not isinstance(
        receipt, str | bytes | bytearray | HexBytes
    ):
        return [serialise_receipt(item) for item in receipt]
    if isinstance(receipt, bytes | bytearray | HexBytes):
        return HexBytes(receipt).to_0x_hex()
    return receipt
