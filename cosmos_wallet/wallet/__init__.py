"""Wallet session module.

Provides key material derivation and the wallet session state machine.
"""

from cosmos_wallet.wallet.keys import KeyMaterial, MnemonicKeyProvider
from cosmos_wallet.wallet.session import WalletSession

__all__ = ["KeyMaterial", "MnemonicKeyProvider", "WalletSession"]
