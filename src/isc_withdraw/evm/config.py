"""Configuration containers for the ISC withdrawal client."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from web3.types import ChecksumAddress

from ..constants import (
    DEFAULT_CHAIN_ID,
    DEFAULT_L1_HRP,
    DEFAULT_RPC_URL,
    ETHEREUM_COIN_TYPE,
    MAGIC_CONTRACT,
)
from ..exceptions import FormatError

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_RECEIPT_TIMEOUT = 120.0


@dataclass(frozen=True)
class WithdrawalConfig:
    """Aggregated configuration used to construct the withdrawal client."""

    rpc_url: str = DEFAULT_RPC_URL
    chain_id: int = DEFAULT_CHAIN_ID
    bridge_address: ChecksumAddress = ChecksumAddress(MAGIC_CONTRACT)
    l1_hrp: str = DEFAULT_L1_HRP
    coin_type: int = ETHEREUM_COIN_TYPE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    wait_for_receipt: bool = True
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    verify_chain_id: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> WithdrawalConfig:
        """Build a config from ``ISC_*`` environment variables, falling back to defaults."""

        env = os.environ if environ is None else environ

        try:
            chain_id = int(env.get("ISC_CHAIN_ID", DEFAULT_CHAIN_ID))
        except ValueError as exc:
            raise FormatError(
                "ISC_CHAIN_ID must be an integer", field="ISC_CHAIN_ID", value=env["ISC_CHAIN_ID"]
            ) from exc

        try:
            request_timeout = float(env.get("ISC_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT))
        except ValueError as exc:
            raise FormatError(
                "ISC_REQUEST_TIMEOUT must be a number",
                field="ISC_REQUEST_TIMEOUT",
                value=env["ISC_REQUEST_TIMEOUT"],
            ) from exc

        return cls(
            rpc_url=env.get("ISC_RPC_URL", DEFAULT_RPC_URL).rstrip("/"),
            chain_id=chain_id,
            l1_hrp=env.get("ISC_L1_HRP", DEFAULT_L1_HRP),
            request_timeout=request_timeout,
        )
