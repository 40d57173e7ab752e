"""End-to-end tests for the withdrawal client with fake collaborators."""

from __future__ import annotations

import asyncio
from typing import Any, cast

import pytest
from eth_abi import decode as abi_decode
from eth_account import Account
from hexbytes import HexBytes

from isc_withdraw.abi import SEND_INPUT_TYPES
from isc_withdraw.address import encode_l1_address
from isc_withdraw.constants import MAGIC_CONTRACT, WEI_PER_GLOW
from isc_withdraw.evm.client import WithdrawalClient
from isc_withdraw.evm.config import WithdrawalConfig
from isc_withdraw.evm.connections import ChainRpc
from isc_withdraw.evm.reconcile import ConvergencePolicy
from isc_withdraw.evm.signers import LocalKeySigner, MnemonicSigner
from isc_withdraw.exceptions import (
    EstimationError,
    FormatError,
    InsufficientFundsError,
    MismatchError,
)
from isc_withdraw.types import Bip44Path

SENDER_KEY = "0x" + "4c" * 32
OTHER_KEY = "0x" + "5d" * 32
SENDER = Account.from_key(SENDER_KEY).address
RECIPIENT_BYTES = bytes(range(1, 33))
RECIPIENT = encode_l1_address(0, RECIPIENT_BYTES, "rms")
BALANCE = 5_000_000
DUST = 123
GAS_PRICE = 10 * WEI_PER_GLOW
NONCE = 7
MNEMONIC = "test test test test test test test test test test test junk"
SECOND_MNEMONIC_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


class FakeRpc:
    """Chain RPC double returning fixed account state and scripted estimates."""

    def __init__(self, estimates: list[int] | None = None) -> None:
        self._estimates = list(estimates or [30_000, 30_500, 30_400])
        self.calldata: list[bytes] = []
        self.estimate_calls: list[tuple[str, str]] = []
        self.sent: list[str] = []

    async def get_balance(self, address: str) -> int:
        return BALANCE * WEI_PER_GLOW + DUST

    async def get_transaction_count(self, address: str) -> int:
        return NONCE

    async def get_gas_price(self) -> int:
        return GAS_PRICE

    async def estimate_gas(self, sender: str, to: str, data: bytes) -> int:
        self.estimate_calls.append((sender, to))
        self.calldata.append(data)
        return self._estimates[len(self.calldata) - 1]

    async def send_raw_transaction(self, raw_transaction: str) -> str:
        self.sent.append(raw_transaction)
        return "0x" + "cd" * 32

    async def wait_for_receipt(self, tx_hash: str) -> Any:
        return {"status": 1, "blockNumber": 99, "transactionHash": HexBytes(tx_hash)}


class RecordingSigner(LocalKeySigner):
    def __init__(self, private_key: str) -> None:
        super().__init__(private_key)
        self.requests: list[tuple[bytes, Bip44Path]] = []

    async def sign_digest(self, digest: bytes, path: Bip44Path):
        self.requests.append((digest, path))
        return await super().sign_digest(digest, path)


def _client(rpc: FakeRpc, signer, **kwargs) -> WithdrawalClient:
    config = WithdrawalConfig(rpc_url="https://rpc.test")
    return WithdrawalClient(config, cast(ChainRpc, rpc), signer, **kwargs)


def test_prepare_signs_for_sender() -> None:
    rpc = FakeRpc()
    signer = RecordingSigner(SENDER_KEY)
    prepared = asyncio.run(_client(rpc, signer).prepare(SENDER, RECIPIENT))

    assert prepared.signed.sender == SENDER
    assert prepared.raw_transaction.startswith("0x")
    assert prepared.unsigned.nonce == NONCE
    assert prepared.unsigned.gas_price == GAS_PRICE
    assert prepared.unsigned.chain_id == 1073
    assert prepared.unsigned.value == 0
    assert prepared.dust_wei == DUST
    assert len(signer.requests) == 1
    assert signer.requests[0][0] == prepared.unsigned.message_hash()


def test_prepare_adopts_second_round() -> None:
    rpc = FakeRpc()
    prepared = asyncio.run(_client(rpc, LocalKeySigner(SENDER_KEY)).prepare(SENDER, RECIPIENT))

    assert len(rpc.calldata) == 3
    assert prepared.unsigned.gas_limit == 30_500
    assert prepared.unsigned.data == rpc.calldata[1]
    assert prepared.reconciliation.base_tokens == BALANCE - 30_000

    recipient, assets, *_ = abi_decode(SEND_INPUT_TYPES, prepared.unsigned.data[4:])
    assert recipient == (b"\x00" + RECIPIENT_BYTES,)
    assert assets[0] == BALANCE - 30_000


def test_prepare_estimates_against_magic_contract() -> None:
    rpc = FakeRpc()
    asyncio.run(_client(rpc, LocalKeySigner(SENDER_KEY)).prepare(SENDER.lower(), RECIPIENT))

    assert rpc.estimate_calls == [(SENDER, MAGIC_CONTRACT)] * 3


def test_prepare_with_convergence_policy() -> None:
    rpc = FakeRpc([30_000, 30_500, 30_500])
    client = _client(rpc, LocalKeySigner(SENDER_KEY), policy=ConvergencePolicy())
    prepared = asyncio.run(client.prepare(SENDER, RECIPIENT))

    assert prepared.reconciliation.adopted.index == 2
    assert prepared.unsigned.data == rpc.calldata[2]


def test_foreign_signer_raises_mismatch_and_does_not_broadcast() -> None:
    rpc = FakeRpc()
    client = _client(rpc, LocalKeySigner(OTHER_KEY))

    with pytest.raises(MismatchError) as excinfo:
        asyncio.run(client.withdraw(SENDER, RECIPIENT))

    assert excinfo.value.expected == SENDER
    assert rpc.sent == []


def test_estimation_failure_skips_signing() -> None:
    class FailingRpc(FakeRpc):
        async def estimate_gas(self, sender: str, to: str, data: bytes) -> int:
            raise EstimationError("node unavailable", endpoint="https://rpc.test")

    signer = RecordingSigner(SENDER_KEY)
    with pytest.raises(EstimationError):
        asyncio.run(_client(FailingRpc(), signer).withdraw(SENDER, RECIPIENT))

    assert signer.requests == []


def test_insufficient_balance_skips_signing() -> None:
    signer = RecordingSigner(SENDER_KEY)
    rpc = FakeRpc([BALANCE + 1, 0, 0])

    with pytest.raises(InsufficientFundsError):
        asyncio.run(_client(rpc, signer).prepare(SENDER, RECIPIENT))
    assert signer.requests == []


def test_wrong_network_recipient_raises_format_error() -> None:
    rpc = FakeRpc()
    foreign = encode_l1_address(0, RECIPIENT_BYTES, "smr")

    with pytest.raises(FormatError):
        asyncio.run(_client(rpc, LocalKeySigner(SENDER_KEY)).prepare(SENDER, foreign))
    assert rpc.calldata == []


def test_invalid_sender_raises_format_error() -> None:
    with pytest.raises(FormatError) as excinfo:
        asyncio.run(_client(FakeRpc(), LocalKeySigner(SENDER_KEY)).prepare("0x12", RECIPIENT))
    assert excinfo.value.field == "sender"


def test_withdraw_broadcasts_and_waits_for_receipt() -> None:
    rpc = FakeRpc()
    result = asyncio.run(_client(rpc, LocalKeySigner(SENDER_KEY)).withdraw(SENDER, RECIPIENT))

    assert rpc.sent == [result.raw_transaction]
    assert result.transaction_hash == "0x" + "cd" * 32
    assert result.block_number == 99
    assert result.receipt is not None
    assert result.receipt["transactionHash"] == "0x" + "cd" * 32
    assert result.base_tokens == BALANCE - 30_000
    assert result.gas_limit == 30_500
    assert Account.recover_transaction(result.raw_transaction) == SENDER


def test_sender_address_comes_from_signer() -> None:
    client = _client(FakeRpc(), LocalKeySigner(SENDER_KEY))
    assert asyncio.run(client.sender_address()) == SENDER


def test_sender_address_honours_address_index() -> None:
    signer = MnemonicSigner(MNEMONIC)
    path = Bip44Path(address_index=1)
    client = _client(FakeRpc(), signer)

    sender = asyncio.run(client.sender_address(path))
    prepared = asyncio.run(client.prepare(sender, RECIPIENT, path=path))

    assert sender == SECOND_MNEMONIC_ADDRESS
    assert prepared.signed.sender == SECOND_MNEMONIC_ADDRESS


def test_sender_address_without_enough_addresses_raises_format_error() -> None:
    class ShortSigner(LocalKeySigner):
        async def generate_addresses(self, coin_type=60, account_index=0, count=1):
            return []

    client = _client(FakeRpc(), ShortSigner(SENDER_KEY))
    with pytest.raises(FormatError) as excinfo:
        asyncio.run(client.sender_address(Bip44Path(address_index=2)))
    assert excinfo.value.field == "addresses"
