"""Key material derivation from BIP-39 mnemonics.

Uses eth-account's HD wallet support for mnemonic generation, seed
derivation and BIP-32 child key derivation. The derivation path is not
Ethereum specific, so the standard Cosmos path (coin type 118) yields the
same secp256k1 key as any other Cosmos wallet.
"""

import hashlib
from dataclasses import dataclass, field

from Crypto.Hash import RIPEMD160
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_keys import keys
from loguru import logger

from cosmos_wallet.encoding import encode_address
from cosmos_wallet.interfaces.transport import KeyProvider

Account.enable_unaudited_hdwallet_features()


@dataclass(frozen=True)
class KeyMaterial:
    """Private/public key pair of the primary account and its derivation data."""

    private_key: bytes = field(repr=False)
    public_key: bytes  # 33-byte compressed secp256k1 point
    mnemonic: str = field(repr=False)
    prefix: str
    hd_path: str

    @property
    def account_id(self) -> bytes:
        """RIPEMD160(SHA256(public key)), the raw 20-byte account id."""
        sha = hashlib.sha256(self.public_key).digest()
        return RIPEMD160.new(sha).digest()

    @property
    def address(self) -> str:
        """Bech32 account address under this key's prefix."""
        return encode_address(self.prefix, self.account_id)

    @property
    def public_key_hex(self) -> str:
        return self.public_key.hex()

    @property
    def short_address(self) -> str:
        """Return shortened address for display (cosmos1abcd...wxyz)."""
        address = self.address
        return f"{address[: len(self.prefix) + 5]}...{address[-4:]}"


class MnemonicKeyProvider(KeyProvider):
    """Derives key material from BIP-39 mnemonics with eth-account.

    Usage:
        provider = MnemonicKeyProvider()

        # Import
        key = provider.from_mnemonic(phrase, "cosmos", "m/44'/118'/0'/0/0")

        # Generate
        key = provider.generate("cosmos", "m/44'/118'/0'/0/0", 24)
        print(key.address, key.mnemonic)
    """

    def from_mnemonic(self, mnemonic: str, prefix: str, hd_path: str) -> KeyMaterial:
        """Derive key material from an existing mnemonic.

        Args:
            mnemonic: Space separated BIP-39 word list.
            prefix: Bech32 address prefix.
            hd_path: BIP-32 derivation path.

        Returns:
            Key material for the account at hd_path.

        Raises:
            ValueError: If the mnemonic or path is invalid.
        """
        phrase = " ".join(mnemonic.split())
        account: LocalAccount = Account.from_mnemonic(phrase, account_path=hd_path)
        return self._build(account, phrase, prefix, hd_path)

    def generate(self, prefix: str, hd_path: str, words: int) -> KeyMaterial:
        """Generate a new mnemonic and derive key material from it.

        Args:
            prefix: Bech32 address prefix.
            hd_path: BIP-32 derivation path.
            words: Mnemonic length (12, 15, 18, 21 or 24).

        Returns:
            Key material whose mnemonic restores the same key.
        """
        account, phrase = Account.create_with_mnemonic(
            num_words=words, account_path=hd_path
        )
        logger.debug("Generated {}-word mnemonic", words)
        return self._build(account, phrase, prefix, hd_path)

    @staticmethod
    def _build(
        account: LocalAccount, mnemonic: str, prefix: str, hd_path: str
    ) -> KeyMaterial:
        if not prefix or prefix != prefix.lower():
            raise ValueError(f"Invalid address prefix: {prefix!r}")

        private_key = bytes(account.key)
        public_key = keys.PrivateKey(private_key).public_key.to_compressed_bytes()
        return KeyMaterial(
            private_key=private_key,
            public_key=public_key,
            mnemonic=mnemonic,
            prefix=prefix,
            hd_path=hd_path,
        )
