"""Conversion of recoverable signatures to EIP-155 replay-protected form."""

from __future__ import annotations

from hexbytes import HexBytes

from ..constants import EIP155_V_OFFSET
from ..exceptions import FormatError
from ..types import RawSignature

SignatureLike = RawSignature | bytes | str

_COMPACT_SIGNATURE_LENGTH = 65


def parse_rpc_signature(signature: bytes | str) -> RawSignature:
    """Split a compact ``r || s || v`` signature into its components.

    ``v`` may be a bare recovery id (0/1) or the legacy 27/28 form.
    """
    try:
        raw = bytes(HexBytes(signature))
    except (TypeError, ValueError) as exc:
        raise FormatError("Signature is not valid hex", field="signature", value=signature) from exc

    if len(raw) != _COMPACT_SIGNATURE_LENGTH:
        raise FormatError(
            f"Signature must be {_COMPACT_SIGNATURE_LENGTH} bytes, got {len(raw)}",
            field="signature",
            value=signature,
        )

    return RawSignature(r=raw[:32], s=raw[32:64], recovery_parity=raw[64])


def coerce_signature(signature: SignatureLike) -> RawSignature:
    if isinstance(signature, RawSignature):
        return signature
    return parse_rpc_signature(signature)


def to_eip155_v(recovery_parity: int, chain_id: int) -> int:
    """Return ``chain_id * 2 + 35 + parity``; legacy 27/28 values are reduced first."""

    if chain_id < 0:
        raise FormatError("Chain id cannot be negative", field="chain_id", value=chain_id)

    parity = recovery_parity % 27
    if parity not in (0, 1):
        raise FormatError(
            "Recovery parity must be 0 or 1", field="recovery_parity", value=recovery_parity
        )
    return chain_id * 2 + EIP155_V_OFFSET + parity


def normalize_signature(raw: RawSignature, chain_id: int) -> tuple[int, bytes, bytes]:
    for name, component in (("r", raw.r), ("s", raw.s)):
        if len(component) != 32:
            raise FormatError(
                f"Signature component {name} must be 32 bytes", field=name, value=component
            )

    return to_eip155_v(raw.recovery_parity, chain_id), raw.r, raw.s
