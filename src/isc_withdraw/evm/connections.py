"""Async JSON-RPC access to the ISC EVM chain."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from hexbytes import HexBytes
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.types import ChecksumAddress

from ..exceptions import EstimationError, MismatchError, RpcError
from .config import WithdrawalConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChainRpc:
    """Wrap the chain RPC calls used by the withdrawal flow.

    Every call is bounded by ``request_timeout``; failures and timeouts are
    raised as :class:`RpcError` (:class:`EstimationError` for gas estimation).
    Cancellation is never swallowed.
    """

    def __init__(self, config: WithdrawalConfig, web3: AsyncWeb3 | None = None) -> None:
        self.config = config
        self._web3 = web3
        self._connected = web3 is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def connect(self) -> None:
        if self._web3 is None:
            self._web3 = AsyncWeb3(AsyncHTTPProvider(self.config.rpc_url))

        connected = await self._call("check connection", lambda: self.web3.is_connected())
        if not connected:
            self._web3 = None
            raise RpcError("Unable to connect to ISC EVM RPC", endpoint=self.config.rpc_url)

        if self.config.verify_chain_id:
            chain_id = await self.get_chain_id()
            if chain_id != self.config.chain_id:
                self._web3 = None
                raise MismatchError(
                    "RPC endpoint serves a different chain",
                    expected=self.config.chain_id,
                    actual=chain_id,
                    details={"endpoint": self.config.rpc_url},
                )

        self._connected = True
        logger.info("Connected to ISC EVM RPC at %s", self.config.rpc_url)

    def disconnect(self) -> None:
        self._web3 = None
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected and self._web3 is not None

    @property
    def web3(self) -> AsyncWeb3:
        if self._web3 is None:
            raise RpcError("ISC EVM RPC provider not connected", endpoint=self.config.rpc_url)
        return self._web3

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def get_chain_id(self) -> int:
        return int(await self._call("fetch chain id", lambda: self.web3.eth.chain_id))

    async def get_balance(self, address: ChecksumAddress) -> int:
        return int(await self._call("fetch balance", lambda: self.web3.eth.get_balance(address)))

    async def get_transaction_count(self, address: ChecksumAddress) -> int:
        return int(
            await self._call(
                "fetch transaction count",
                lambda: self.web3.eth.get_transaction_count(address, "pending"),
            )
        )

    async def get_gas_price(self) -> int:
        return int(await self._call("fetch gas price", lambda: self.web3.eth.gas_price))

    async def estimate_gas(self, sender: ChecksumAddress, to: ChecksumAddress, data: bytes) -> int:
        transaction = {"from": sender, "to": to, "data": HexBytes(data), "value": 0}
        estimate = await self._call(
            "estimate gas",
            lambda: self.web3.eth.estimate_gas(transaction),  # type: ignore[arg-type]
            error=EstimationError,
        )
        return int(estimate)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def send_raw_transaction(self, raw_transaction: str | bytes) -> str:
        tx_hash = await self._call(
            "send raw transaction",
            lambda: self.web3.eth.send_raw_transaction(HexBytes(raw_transaction)),
        )
        return HexBytes(tx_hash).to_0x_hex()

    async def wait_for_receipt(self, tx_hash: str) -> Any:
        return await self._call(
            "wait for transaction receipt",
            lambda: self.web3.eth.wait_for_transaction_receipt(
                HexBytes(tx_hash), timeout=self.config.receipt_timeout
            ),
            timeout=self.config.receipt_timeout,
        )

    # ------------------------------------------------------------------
    # Internal wiring
    # ------------------------------------------------------------------
    async def _call(
        self,
        operation: str,
        request: Callable[[], Awaitable[T]],
        *,
        error: type[RpcError] = RpcError,
        timeout: float | None = None,
    ) -> T:
        limit = self.config.request_timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(request(), timeout=limit)
        except RpcError:
            raise
        except asyncio.TimeoutError as exc:
            raise error(
                f"Timed out after {limit}s while trying to {operation}",
                endpoint=self.config.rpc_url,
                details={"operation": operation, "timeout": limit},
            ) from exc
        except Exception as exc:
            raise error(
                f"Failed to {operation}",
                endpoint=self.config.rpc_url,
                details={"operation": operation, "error": str(exc)},
            ) from exc
