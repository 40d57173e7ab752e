"""ABI fragment of the ISC magic contract used by the withdrawal flow."""

from typing import Any

_L1_ADDRESS = {
    "components": [{"internalType": "bytes", "name": "data", "type": "bytes"}],
    "internalType": "struct L1Address",
    "type": "tuple",
}

_ISC_ASSETS = {
    "components": [
        {"internalType": "uint64", "name": "baseTokens", "type": "uint64"},
        {
            "components": [
                {
                    "components": [{"internalType": "bytes", "name": "data", "type": "bytes"}],
                    "internalType": "struct NativeTokenID",
                    "name": "ID",
                    "type": "tuple",
                },
                {"internalType": "uint256", "name": "amount", "type": "uint256"},
            ],
            "internalType": "struct NativeToken[]",
            "name": "nativeTokens",
            "type": "tuple[]",
        },
        {"internalType": "NFTID[]", "name": "nfts", "type": "bytes32[]"},
    ],
    "internalType": "struct ISCAssets",
    "type": "tuple",
}

ISC_SANDBOX_SEND_ABI: dict[str, Any] = {
    "inputs": [
        {**_L1_ADDRESS, "name": "targetAddress"},
        {**_ISC_ASSETS, "name": "assets"},
        {"internalType": "bool", "name": "adjustMinimumStorageDeposit", "type": "bool"},
        {
            "components": [
                {"internalType": "ISCHname", "name": "targetContract", "type": "uint32"},
                {"internalType": "ISCHname", "name": "entrypoint", "type": "uint32"},
                {
                    "components": [
                        {
                            "components": [
                                {"internalType": "bytes", "name": "key", "type": "bytes"},
                                {"internalType": "bytes", "name": "value", "type": "bytes"},
                            ],
                            "internalType": "struct ISCDictItem[]",
                            "name": "items",
                            "type": "tuple[]",
                        }
                    ],
                    "internalType": "struct ISCDict",
                    "name": "params",
                    "type": "tuple",
                },
                {**_ISC_ASSETS, "name": "allowance"},
                {"internalType": "uint64", "name": "gasBudget", "type": "uint64"},
            ],
            "internalType": "struct ISCSendMetadata",
            "name": "metadata",
            "type": "tuple",
        },
        {
            "components": [
                {"internalType": "int64", "name": "timelock", "type": "int64"},
                {
                    "components": [
                        {"internalType": "int64", "name": "time", "type": "int64"},
                        {**_L1_ADDRESS, "name": "returnAddress"},
                    ],
                    "internalType": "struct ISCExpiration",
                    "name": "expiration",
                    "type": "tuple",
                },
            ],
            "internalType": "struct ISCSendOptions",
            "name": "sendOptions",
            "type": "tuple",
        },
    ],
    "name": "send",
    "outputs": [],
    "stateMutability": "payable",
    "type": "function",
}


def canonical_type(param: dict[str, Any]) -> str:
    """Collapse a (possibly nested) tuple parameter into its canonical type string."""
    abi_type = param["type"]
    if abi_type.startswith("tuple"):
        inner = ",".join(canonical_type(component) for component in param["components"])
        return f"({inner}){abi_type[len('tuple'):]}"
    return abi_type


def function_signature(fragment: dict[str, Any]) -> str:
    input_types = ",".join(canonical_type(param) for param in fragment["inputs"])
    return f"{fragment['name']}({input_types})"


SEND_INPUT_TYPES = [canonical_type(param) for param in ISC_SANDBOX_SEND_ABI["inputs"]]
SEND_SIGNATURE = function_signature(ISC_SANDBOX_SEND_ABI)
