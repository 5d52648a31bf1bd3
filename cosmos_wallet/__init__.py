"""Client-side wallet sessions for Cosmos SDK chains."""

from cosmos_wallet.config import Settings, get_settings
from cosmos_wallet.exceptions import (
    ChainConnectionError,
    ClientNotInitializedError,
    InvalidVoteOptionError,
    OperationError,
    PreconditionError,
    QueryClientNotInitializedError,
    QueryError,
    TransactionError,
    TransportUnavailableError,
    WalletCreationError,
    WalletError,
    WalletNotInitializedError,
)
from cosmos_wallet.models import (
    Balance,
    BondStatus,
    Coin,
    DelegationReward,
    Fee,
    Operation,
    Proposal,
    SessionState,
    TxReceipt,
    Validator,
    VoteOption,
    WalletInfo,
)
from cosmos_wallet.wallet import KeyMaterial, MnemonicKeyProvider, WalletSession

__all__ = [
    "Balance",
    "BondStatus",
    "ChainConnectionError",
    "ClientNotInitializedError",
    "Coin",
    "DelegationReward",
    "Fee",
    "InvalidVoteOptionError",
    "KeyMaterial",
    "MnemonicKeyProvider",
    "Operation",
    "OperationError",
    "PreconditionError",
    "Proposal",
    "QueryClientNotInitializedError",
    "QueryError",
    "SessionState",
    "Settings",
    "TransactionError",
    "TransportUnavailableError",
    "TxReceipt",
    "Validator",
    "VoteOption",
    "WalletCreationError",
    "WalletError",
    "WalletInfo",
    "WalletNotInitializedError",
    "WalletSession",
    "get_settings",
]
