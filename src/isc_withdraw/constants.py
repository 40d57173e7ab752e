"""Constants for the ISC layer 2 to layer 1 withdrawal flow."""

from enum import IntEnum

# ShimmerEVM testnet
DEFAULT_RPC_URL = "https://json-rpc.evm.testnet.shimmer.network"
DEFAULT_CHAIN_ID = 1073

# ISC magic contract, mediates L2 -> L1 asset transfers
MAGIC_CONTRACT = "0x1074000000000000000000000000000000000000"

# bech32 human-readable part of Shimmer testnet L1 addresses
DEFAULT_L1_HRP = "rms"

ETHEREUM_COIN_TYPE = 60

# EVM balances carry 18 decimals, L1 base tokens ("glow") carry 6
WEI_PER_GLOW = 10**12

UINT64_MAX = 2**64 - 1

EIP155_V_OFFSET = 35


class AddressKind(IntEnum):
    """Leading discriminator byte expected by the ISC ``L1Address`` struct."""

    PLAIN = 0
