"""Layer 2 to layer 1 withdrawal through the ISC magic contract."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass

from web3 import Web3
from web3.types import ChecksumAddress

from ..address import L1Address, decode_l1_address
from ..exceptions import FormatError
from ..types import Bip44Path, WithdrawalResult
from ..utils import serialise_receipt, wei_to_base_tokens
from .calls import build_send_calldata
from .config import WithdrawalConfig
from .connections import ChainRpc
from .reconcile import BalanceReconciler, Reconciliation, ReconcilePolicy
from .signatures import coerce_signature, normalize_signature
from .signers import ExternalSigner
from .transactions import (
    SignedTransaction,
    UnsignedTransaction,
    assemble_transaction,
    attach_signature,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedWithdrawal:
    """A signed, sender-checked withdrawal ready for broadcast."""

    sender: ChecksumAddress
    recipient: L1Address
    balance_wei: int
    dust_wei: int
    reconciliation: Reconciliation
    unsigned: UnsignedTransaction
    signed: SignedTransaction

    @property
    def raw_transaction(self) -> str:
        return self.signed.to_hex()


class WithdrawalClient:
    """Move an account's full balance from the ISC EVM chain to a layer 1 address."""

    def __init__(
        self,
        config: WithdrawalConfig,
        rpc: ChainRpc,
        signer: ExternalSigner,
        *,
        policy: ReconcilePolicy | None = None,
    ) -> None:
        self._config = config
        self._rpc = rpc
        self._signer = signer
        self._policy = policy

    async def sender_address(self, path: Bip44Path | None = None) -> ChecksumAddress:
        """Return the address the signer derives at ``path``."""

        path = path or Bip44Path(coin_type=self._config.coin_type)
        addresses = await self._signer.generate_addresses(
            path.coin_type, path.account, count=path.address_index + 1
        )
        if len(addresses) <= path.address_index:
            raise FormatError(
                "Signer did not return an address for the requested index",
                field="addresses",
                value=path.address_index,
            )
        return Web3.to_checksum_address(addresses[path.address_index])

    async def prepare(
        self,
        sender: str,
        recipient: str,
        *,
        path: Bip44Path | None = None,
    ) -> PreparedWithdrawal:
        """Build and sign the withdrawal without broadcasting it."""

        sender_address = self._checksum(sender, field="sender")
        bridge_address = self._checksum(self._config.bridge_address, field="bridge_address")
        l1_recipient = decode_l1_address(recipient, self._config.l1_hrp)

        logger.debug("Stage withdraw [%s]: read account state", sender_address)
        balance_wei = await self._rpc.get_balance(sender_address)
        nonce = await self._rpc.get_transaction_count(sender_address)
        gas_price = await self._rpc.get_gas_price()

        balance, dust = wei_to_base_tokens(balance_wei)
        if dust:
            logger.warning(
                "Dropping %s wei of dust that cannot be expressed in base tokens", dust
            )
        logger.info(
            "Withdrawing balance of %s base tokens from %s (nonce=%s, gas_price=%s)",
            balance,
            sender_address,
            nonce,
            gas_price,
        )

        async def estimate(calldata: bytes) -> int:
            return await self._rpc.estimate_gas(sender_address, bridge_address, calldata)

        reconciler = BalanceReconciler(
            functools.partial(build_send_calldata, l1_recipient),
            estimate,
            policy=self._policy,
        )
        reconciliation = await reconciler.reconcile(balance)

        unsigned = assemble_transaction(
            nonce=nonce,
            gas_price=gas_price,
            gas_limit=reconciliation.gas_limit,
            to=bridge_address,
            data=reconciliation.calldata,
            chain_id=self._config.chain_id,
        )

        signing_path = path or Bip44Path(coin_type=self._config.coin_type)
        logger.debug(
            "Stage withdraw [%s]: request signature (path=%s)",
            sender_address,
            signing_path.to_derivation_path(),
        )
        raw_signature = coerce_signature(
            await self._signer.sign_digest(unsigned.message_hash(), signing_path)
        )
        v, r, s = normalize_signature(raw_signature, self._config.chain_id)
        signed = attach_signature(unsigned, v, r, s)
        signed.verify_sender(sender_address)

        return PreparedWithdrawal(
            sender=sender_address,
            recipient=l1_recipient,
            balance_wei=balance_wei,
            dust_wei=dust,
            reconciliation=reconciliation,
            unsigned=unsigned,
            signed=signed,
        )

    async def withdraw(
        self,
        sender: str,
        recipient: str,
        *,
        path: Bip44Path | None = None,
    ) -> WithdrawalResult:
        """Prepare the withdrawal and broadcast it."""

        prepared = await self.prepare(sender, recipient, path=path)
        raw_transaction = prepared.raw_transaction

        tx_hash = await self._rpc.send_raw_transaction(raw_transaction)
        logger.info("Withdrawal sent from %s to %s hash=%s", prepared.sender, recipient, tx_hash)

        receipt = None
        block_number = None
        if self._config.wait_for_receipt:
            raw_receipt = await self._rpc.wait_for_receipt(tx_hash)
            receipt = serialise_receipt(raw_receipt)
            block_number = receipt.get("blockNumber") if receipt else None
            logger.info("Withdrawal confirmed hash=%s block=%s", tx_hash, block_number)

        return WithdrawalResult(
            transaction_hash=tx_hash,
            raw_transaction=raw_transaction,
            sender=prepared.sender,
            recipient=recipient,
            base_tokens=prepared.reconciliation.base_tokens,
            gas_limit=prepared.unsigned.gas_limit,
            gas_price=prepared.unsigned.gas_price,
            nonce=prepared.unsigned.nonce,
            receipt=receipt,
            block_number=block_number,
        )

    @staticmethod
    def _checksum(address: str, *, field: str) -> ChecksumAddress:
        try:
            return Web3.to_checksum_address(address)
        except (TypeError, ValueError) as exc:
            raise FormatError("Invalid EVM address", field=field, value=address) from exc
