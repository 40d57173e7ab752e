"""External signer capability and the key-holding implementations shipped with it.

The withdrawal client only talks to :class:`ExternalSigner`: it hands over a
32-byte digest and a derivation path and receives a recoverable signature.
Key material never crosses that boundary.
"""

from __future__ import annotations

import logging
from typing import Protocol, cast

from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..constants import ETHEREUM_COIN_TYPE
from ..exceptions import FormatError
from ..types import Bip44Path
from .signatures import SignatureLike

logger = logging.getLogger(__name__)


class ExternalSigner(Protocol):
    """Capability interface for signing transaction digests."""

    async def generate_addresses(
        self, coin_type: int, account_index: int, count: int = 1
    ) -> list[str]: ...

    async def sign_digest(self, digest: bytes, path: Bip44Path) -> SignatureLike: ...


class MnemonicSigner:
    """Derive BIP-44 accounts from a mnemonic and sign digests with them."""

    def __init__(self, mnemonic: str, *, passphrase: str = "") -> None:
        Account.enable_unaudited_hdwallet_features()
        self._mnemonic = mnemonic
        self._passphrase = passphrase
        try:
            self._derive(Bip44Path())
        except Exception as exc:
            raise FormatError(
                "Failed to derive signer account from provided mnemonic",
                field="mnemonic",
                details={"error": str(exc)},
            ) from exc

    async def generate_addresses(
        self, coin_type: int = ETHEREUM_COIN_TYPE, account_index: int = 0, count: int = 1
    ) -> list[str]:
        return [
            self._derive(
                Bip44Path(coin_type=coin_type, account=account_index, address_index=index)
            ).address
            for index in range(count)
        ]

    async def sign_digest(self, digest: bytes, path: Bip44Path) -> SignatureLike:
        logger.debug("Signing digest with account at %s", path.to_derivation_path())
        signed = self._derive(path).unsafe_sign_hash(digest)
        return bytes(signed.signature)

    def _derive(self, path: Bip44Path) -> LocalAccount:
        return cast(
            LocalAccount,
            Account.from_mnemonic(
                self._mnemonic,
                passphrase=self._passphrase,
                account_path=path.to_derivation_path(),
            ),
        )


class LocalKeySigner:
    """Sign with a single private key; the derivation path is ignored."""

    def __init__(self, private_key: str | bytes) -> None:
        try:
            self._account = cast(LocalAccount, Account.from_key(private_key))
        except Exception as exc:
            raise FormatError(
                "Failed to derive signer account from provided private key",
                field="private_key",
                details={"error": str(exc)},
            ) from exc

    async def generate_addresses(
        self, coin_type: int = ETHEREUM_COIN_TYPE, account_index: int = 0, count: int = 1
    ) -> list[str]:
        """Every index resolves to the single key's address."""
        return [self._account.address] * count

    async def sign_digest(self, digest: bytes, path: Bip44Path) -> SignatureLike:
        signed = self._account.unsafe_sign_hash(digest)
        return bytes(signed.signature)
