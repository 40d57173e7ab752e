"""Example: Withdraw the full ShimmerEVM balance to a layer 1 address."""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv

from isc_withdraw import ChainRpc, MnemonicSigner, WithdrawalClient, WithdrawalConfig

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("send_layer2_to_layer1")

L1_RECIPIENT = "rms1qzzk86qv30l4e85ljtccxa0ruy8y7u8zn2dle3g8dv2tl2m4cu227a7n2wj"


async def main() -> None:
    """Sign the withdrawal with a mnemonic-backed signer and broadcast it."""
    mnemonic = os.getenv("MNEMONIC")
    if not mnemonic:
        raise ValueError("MNEMONIC not found in environment variables")

    recipient = os.getenv("L1_RECIPIENT", L1_RECIPIENT)

    config = WithdrawalConfig.from_env()
    rpc = ChainRpc(config)
    signer = MnemonicSigner(mnemonic)
    client = WithdrawalClient(config, rpc, signer)

    logger.info("Connecting to %s", config.rpc_url)
    await rpc.connect()

    try:
        sender = await client.sender_address()
        logger.info("Sender address %s", sender)

        result = await client.withdraw(sender, recipient)
        logger.info("Withdrawal sent: %s", result.transaction_hash)
        logger.info(
            "Moved %s base tokens (gas_limit=%s, block=%s)",
            result.base_tokens,
            result.gas_limit,
            result.block_number,
        )
    finally:
        rpc.disconnect()
        logger.info("Disconnected from ISC EVM")


if __name__ == "__main__":
    asyncio.run(main())
