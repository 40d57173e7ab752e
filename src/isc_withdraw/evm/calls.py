"""Calldata encoding for the ISC magic contract ``send`` entrypoint."""

from __future__ import annotations

from eth_abi import encode as abi_encode
from web3 import Web3

from ..abi import SEND_INPUT_TYPES, SEND_SIGNATURE
from ..address import L1Address
from ..types import AssetAllowance, CallMetadata, CallOptions
from ..utils import parse_base_tokens

SEND_SELECTOR = bytes(Web3.keccak(text=SEND_SIGNATURE)[:4])

PLAIN_TRANSFER_METADATA = CallMetadata()
NO_SEND_OPTIONS = CallOptions()


def build_send_calldata(recipient: L1Address, base_tokens: int | str) -> bytes:
    """Encode a plain transfer of ``base_tokens`` to ``recipient``.

    The call carries no native tokens or NFTs, does not ask the contract to
    adjust the storage deposit, and uses zero-valued metadata and options.
    """
    allowance = AssetAllowance(base_tokens=parse_base_tokens(base_tokens))
    args = [
        recipient.as_call_argument(),
        allowance.as_tuple(),
        False,
        PLAIN_TRANSFER_METADATA.as_tuple(),
        NO_SEND_OPTIONS.as_tuple(),
    ]
    return SEND_SELECTOR + abi_encode(SEND_INPUT_TYPES, args)
