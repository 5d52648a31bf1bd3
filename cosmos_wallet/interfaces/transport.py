"""Abstract base classes defining the key and chain transport interfaces."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from cosmos_wallet.models import (
    Balance,
    BondStatus,
    Coin,
    DelegationReward,
    Fee,
    Proposal,
    TextProposal,
    TxReceipt,
    Validator,
    VoteOption,
)

if TYPE_CHECKING:
    from cosmos_wallet.config import Settings
    from cosmos_wallet.wallet.keys import KeyMaterial

__all__ = [
    "KeyProvider",
    "QueryConnector",
    "QueryTransport",
    "SigningConnector",
    "SigningTransport",
]


class KeyProvider(ABC):
    """Produces deterministic key material from mnemonic phrases."""

    @abstractmethod
    def from_mnemonic(self, mnemonic: str, prefix: str, hd_path: str) -> "KeyMaterial":
        """Derive key material from an existing mnemonic.

        Raises:
            ValueError: If the mnemonic is not a valid BIP-39 phrase.
        """
        raise NotImplementedError

    @abstractmethod
    def generate(self, prefix: str, hd_path: str, words: int) -> "KeyMaterial":
        """Generate fresh entropy and derive key material from it."""
        raise NotImplementedError


class SigningTransport(ABC):
    """Signing and broadcast handle bound to one endpoint and one key.

    Every broadcasting method builds the corresponding message, signs it
    with the bound key and returns the receipt once the node reports it.
    """

    @abstractmethod
    async def get_balance(self, address: str, denom: str) -> Balance:
        raise NotImplementedError

    @abstractmethod
    async def get_all_balances(self, address: str) -> list[Balance]:
        raise NotImplementedError

    @abstractmethod
    async def send_tokens(
        self,
        sender: str,
        recipient: str,
        amount: list[Coin],
        fee: Fee,
        memo: str = "",
    ) -> TxReceipt:
        raise NotImplementedError

    @abstractmethod
    async def delegate(
        self, delegator: str, validator: str, amount: Coin, fee: Fee, memo: str = ""
    ) -> TxReceipt:
        raise NotImplementedError

    @abstractmethod
    async def undelegate(
        self, delegator: str, validator: str, amount: Coin, fee: Fee, memo: str = ""
    ) -> TxReceipt:
        raise NotImplementedError

    @abstractmethod
    async def redelegate(
        self,
        delegator: str,
        source_validator: str,
        destination_validator: str,
        amount: Coin,
        fee: Fee,
        memo: str = "",
    ) -> TxReceipt:
        raise NotImplementedError

    @abstractmethod
    async def withdraw_rewards(
        self, delegator: str, validator: str, fee: Fee, memo: str = ""
    ) -> TxReceipt:
        """Withdraw staking rewards.

        Args:
            delegator: Delegator account address.
            validator: Validator operator address, or "" to withdraw from
                every validator the delegator has a position with.
            fee: Transaction fee.
            memo: Transaction memo.
        """
        raise NotImplementedError

    @abstractmethod
    async def submit_proposal(
        self, proposal: TextProposal, fee: Fee, memo: str = ""
    ) -> TxReceipt:
        raise NotImplementedError

    @abstractmethod
    async def vote(
        self, voter: str, proposal_id: int, option: VoteOption, fee: Fee, memo: str = ""
    ) -> TxReceipt:
        raise NotImplementedError


class QueryTransport(ABC):
    """Read-only handle with staking, governance and distribution queries."""

    @abstractmethod
    async def validators(self, status: BondStatus) -> list[Validator]:
        raise NotImplementedError

    @abstractmethod
    async def proposals(self) -> list[Proposal]:
        """Return every proposal regardless of status."""
        raise NotImplementedError

    @abstractmethod
    async def delegation_rewards(self, delegator: str) -> list[DelegationReward]:
        raise NotImplementedError


SigningConnector = Callable[
    [str, "KeyMaterial", "Settings"], Awaitable[SigningTransport]
]
QueryConnector = Callable[[str, "Settings"], Awaitable[QueryTransport]]
