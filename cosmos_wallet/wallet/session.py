"""Wallet session: key material, chain connection and the operation surface."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from loguru import logger

from cosmos_wallet.config import Settings, get_settings
from cosmos_wallet.encoding import check_address
from cosmos_wallet.exceptions import (
    ChainConnectionError,
    ClientNotInitializedError,
    InvalidVoteOptionError,
    OperationError,
    QueryClientNotInitializedError,
    QueryError,
    TransactionError,
    WalletCreationError,
    WalletNotInitializedError,
)
from cosmos_wallet.interfaces.transport import (
    KeyProvider,
    QueryConnector,
    QueryTransport,
    SigningConnector,
    SigningTransport,
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
    TextProposal,
    TxReceipt,
    Validator,
    VoteOption,
    WalletInfo,
)
from cosmos_wallet.transports import default_query_connector, default_signing_connector
from cosmos_wallet.wallet.keys import KeyMaterial, MnemonicKeyProvider

T = TypeVar("T")

_WALLET_OR_CLIENT = "Wallet or client not initialized"


@dataclass(frozen=True)
class _Keyless:
    pass


@dataclass(frozen=True)
class _Keyed:
    key: KeyMaterial


@dataclass(frozen=True)
class _Connected:
    key: KeyMaterial
    signer: SigningTransport
    query: QueryTransport
    endpoint: str


_State = _Keyless | _Keyed | _Connected


def _account(key: KeyMaterial, address: str) -> str:
    return check_address(address, key.prefix)


def _validator(key: KeyMaterial, address: str) -> str:
    return check_address(address, f"{key.prefix}valoper")


class WalletSession:
    """A single wallet's lifecycle against one Cosmos SDK chain.

    The session moves through three states:

    - KEYLESS: constructed, no key material.
    - KEYED: create_wallet() succeeded.
    - CONNECTED: connect_to_chain() succeeded; signing and query
      transports are bound to the current key material and one endpoint.

    Creating a new wallet while connected drops the transports and returns
    the session to KEYED, so a signer can never act for a key the session
    no longer exposes.

    Every operation validates session state first (raising a
    PreconditionError before any network call), then delegates to a
    transport and wraps any failure in an OperationError tagged with the
    operation. Nothing is retried.

    Usage:
        session = WalletSession()
        info = await session.create_wallet()
        await session.connect_to_chain("grpc+https://cosmos-grpc.publicnode.com:443")
        balance = await session.get_balance(info.address)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        key_provider: KeyProvider | None = None,
        signing_connector: SigningConnector | None = None,
        query_connector: QueryConnector | None = None,
    ) -> None:
        """Initialize an empty session.

        Args:
            settings: Derivation, chain and fee configuration.
                      Defaults to the global settings.
            key_provider: Mnemonic key provider. Defaults to MnemonicKeyProvider.
            signing_connector: Factory for signing transports.
                               Defaults to the cosmpy transport.
            query_connector: Factory for query transports.
                             Defaults to the cosmpy transport.
        """
        self._settings = settings or get_settings()
        self._key_provider = key_provider or MnemonicKeyProvider()
        self._signing_connector = signing_connector or default_signing_connector
        self._query_connector = query_connector or default_query_connector
        self._state: _State = _Keyless()

    # =========================================================================
    # State
    # =========================================================================

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def state(self) -> SessionState:
        if isinstance(self._state, _Connected):
            return SessionState.CONNECTED
        if isinstance(self._state, _Keyed):
            return SessionState.KEYED
        return SessionState.KEYLESS

    @property
    def is_connected(self) -> bool:
        return isinstance(self._state, _Connected)

    @property
    def address(self) -> str | None:
        """Primary account address, or None before create_wallet()."""
        if isinstance(self._state, _Keyless):
            return None
        return self._state.key.address

    @property
    def mnemonic(self) -> str | None:
        if isinstance(self._state, _Keyless):
            return None
        return self._state.key.mnemonic

    @property
    def public_key(self) -> str | None:
        if isinstance(self._state, _Keyless):
            return None
        return self._state.key.public_key_hex

    @property
    def endpoint(self) -> str | None:
        if isinstance(self._state, _Connected):
            return self._state.endpoint
        return None

    def _require_key(self) -> KeyMaterial:
        if isinstance(self._state, _Keyless):
            raise WalletNotInitializedError()
        return self._state.key

    def _require_signer(self, message: str) -> _Connected:
        if not isinstance(self._state, _Connected):
            raise ClientNotInitializedError(message)
        return self._state

    def _require_query(self) -> _Connected:
        if not isinstance(self._state, _Connected):
            raise QueryClientNotInitializedError()
        return self._state

    def _fee(self, gas_limit: int) -> Fee:
        fee = self._settings.fee
        return Fee(
            amount=[Coin(amount=str(fee.amount), denom=fee.denom)],
            gas_limit=gas_limit,
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def create_wallet(
        self, mnemonic: str | None = None, prefix: str | None = None
    ) -> WalletInfo:
        """Create a new wallet or import one from a mnemonic.

        Args:
            mnemonic: BIP-39 phrase to import. A fresh phrase is generated
                      when omitted.
            prefix: Bech32 address prefix. Defaults to the configured prefix.

        Returns:
            WalletInfo with the primary account's address, its mnemonic
            and its public key.

        Raises:
            WalletCreationError: If derivation or generation fails.
        """
        key_config = self._settings.key
        if prefix is None:
            prefix = key_config.address_prefix

        try:
            if mnemonic:
                key = await asyncio.to_thread(
                    self._key_provider.from_mnemonic, mnemonic, prefix, key_config.hd_path
                )
            else:
                key = await asyncio.to_thread(
                    self._key_provider.generate,
                    prefix,
                    key_config.hd_path,
                    key_config.mnemonic_words,
                )
            info = WalletInfo(
                address=key.address,
                mnemonic=key.mnemonic,
                public_key=key.public_key_hex,
            )
        except Exception as e:
            raise WalletCreationError(e) from e

        if isinstance(self._state, _Connected):
            logger.warning(
                "Replacing key material of connected session | endpoint={} "
                "- reconnect required",
                self._state.endpoint,
            )

        self._state = _Keyed(key)
        logger.info(
            "{} wallet: {}", "Imported" if mnemonic else "Created", key.short_address
        )
        return info

    async def connect_to_chain(self, rpc_endpoint: str) -> SigningTransport:
        """Connect signing and query transports to a node.

        Args:
            rpc_endpoint: Node endpoint, e.g. "grpc+https://host:443" or
                          "rest+http://localhost:1317".

        Returns:
            The signing transport (also retained by the session).

        Raises:
            WalletNotInitializedError: If create_wallet() has not succeeded.
            ChainConnectionError: If either transport cannot be established.
        """
        key = self._require_key()

        try:
            signer = await self._signing_connector(rpc_endpoint, key, self._settings)
            query = await self._query_connector(rpc_endpoint, self._settings)
        except ChainConnectionError:
            raise
        except Exception as e:
            raise ChainConnectionError(e) from e

        self._state = _Connected(key=key, signer=signer, query=query, endpoint=rpc_endpoint)
        logger.info("Connected to chain | endpoint={} address={}", rpc_endpoint, key.short_address)
        return signer

    # =========================================================================
    # Delegation helpers
    # =========================================================================

    @staticmethod
    async def _run(
        operation: Operation,
        error_type: type[OperationError],
        call: Callable[[], Awaitable[T]],
    ) -> T:
        logger.debug("{} | delegating to transport", operation.value)
        try:
            return await call()
        except Exception as e:
            raise error_type(operation, e) from e

    async def _transact(
        self,
        operation: Operation,
        gas_limit: int,
        submit: Callable[[_Connected, Fee], Awaitable[TxReceipt]],
    ) -> TxReceipt:
        """Broadcast through the signing transport with the configured fee.

        submit receives the connected state and the fee; anything it builds
        (coins, checked addresses, proposals) is validated inside the
        wrapped region, so bad input surfaces as a TransactionError.
        """
        state = self._require_signer(_WALLET_OR_CLIENT)
        receipt = await self._run(
            operation, TransactionError, lambda: submit(state, self._fee(gas_limit))
        )
        logger.debug(
            "{} | tx_hash={} code={} height={}",
            operation.value,
            receipt.tx_hash,
            receipt.code,
            receipt.height,
        )
        return receipt

    async def _query(self, operation: Operation, call: Callable[[], Awaitable[T]]) -> T:
        return await self._run(operation, QueryError, call)

    def _coin(self, amount: str, denom: str | None) -> Coin:
        return Coin(amount=amount, denom=denom or self._settings.chain.denom)

    # =========================================================================
    # Bank
    # =========================================================================

    async def get_balance(self, address: str | None = None, denom: str | None = None) -> Balance:
        """Get one denomination's balance.

        Args:
            address: Account to query. Defaults to the session's account.
            denom: Denomination. Defaults to the chain denomination.

        Raises:
            ClientNotInitializedError: If not connected.
            QueryError: If the query fails.
        """
        state = self._require_signer("Client not initialized")
        target = address or state.key.address
        denom = denom or self._settings.chain.denom
        return await self._query(
            Operation.GET_BALANCE, lambda: state.signer.get_balance(target, denom)
        )

    async def get_all_balances(self, address: str | None = None) -> list[Balance]:
        """Get every denomination held by an account."""
        state = self._require_signer("Client not initialized")
        target = address or state.key.address
        return await self._query(
            Operation.GET_ALL_BALANCES, lambda: state.signer.get_all_balances(target)
        )

    async def send_tokens(
        self, recipient_address: str, amount: str, denom: str | None = None, memo: str = ""
    ) -> TxReceipt:
        """Send tokens from the session's account.

        Raises:
            ClientNotInitializedError: If not connected.
            TransactionError: If the transfer fails (including insufficient
                funds and malformed recipient addresses).
        """
        return await self._transact(
            Operation.SEND_TOKENS,
            self._settings.fee.send_gas,
            lambda s, fee: s.signer.send_tokens(
                s.key.address, _account(s.key, recipient_address),
                [self._coin(amount, denom)], fee, memo,
            ),
        )

    # =========================================================================
    # Staking
    # =========================================================================

    async def delegate(
        self, validator_address: str, amount: str, denom: str | None = None, memo: str = ""
    ) -> TxReceipt:
        """Delegate tokens to a validator."""
        return await self._transact(
            Operation.DELEGATE,
            self._settings.fee.staking_gas,
            lambda s, fee: s.signer.delegate(
                s.key.address, _validator(s.key, validator_address),
                self._coin(amount, denom), fee, memo,
            ),
        )

    async def undelegate(
        self, validator_address: str, amount: str, denom: str | None = None, memo: str = ""
    ) -> TxReceipt:
        """Begin unbonding tokens from a validator."""
        return await self._transact(
            Operation.UNDELEGATE,
            self._settings.fee.staking_gas,
            lambda s, fee: s.signer.undelegate(
                s.key.address, _validator(s.key, validator_address),
                self._coin(amount, denom), fee, memo,
            ),
        )

    async def redelegate(
        self,
        source_validator_address: str,
        destination_validator_address: str,
        amount: str,
        denom: str | None = None,
        memo: str = "",
    ) -> TxReceipt:
        """Move delegated tokens from one validator to another."""
        return await self._transact(
            Operation.REDELEGATE,
            self._settings.fee.staking_gas,
            lambda s, fee: s.signer.redelegate(
                s.key.address,
                _validator(s.key, source_validator_address),
                _validator(s.key, destination_validator_address),
                self._coin(amount, denom), fee, memo,
            ),
        )

    async def get_rewards(self, validator_address: str | None = None, memo: str = "") -> TxReceipt:
        """Withdraw staking rewards.

        When validator_address is omitted, rewards are withdrawn from every
        validator the account has delegated to.
        """
        return await self._transact(
            Operation.GET_REWARDS,
            self._settings.fee.rewards_gas,
            lambda s, fee: s.signer.withdraw_rewards(
                s.key.address,
                _validator(s.key, validator_address) if validator_address else "",
                fee, memo,
            ),
        )

    # =========================================================================
    # Governance
    # =========================================================================

    async def submit_proposal(
        self,
        title: str,
        description: str,
        initial_deposit: list[Coin] | list[dict[str, Any]],
        memo: str = "",
    ) -> TxReceipt:
        """Submit a text proposal proposed by the session's account.

        initial_deposit takes Coin models or {"amount": ..., "denom": ...} dicts.
        """

        def proposal(proposer: str) -> TextProposal:
            return TextProposal(
                title=title,
                description=description,
                initial_deposit=[Coin.model_validate(c) for c in initial_deposit],
                proposer=proposer,
            )

        return await self._transact(
            Operation.SUBMIT_PROPOSAL,
            self._settings.fee.proposal_gas,
            lambda s, fee: s.signer.submit_proposal(proposal(s.key.address), fee, memo),
        )

    async def vote(
        self, proposal_id: int, option: VoteOption | str, memo: str = ""
    ) -> TxReceipt:
        """Vote on a governance proposal.

        Raises:
            InvalidVoteOptionError: If option is not Yes, No, NoWithVeto or Abstain.
            ClientNotInitializedError: If not connected.
            TransactionError: If the vote fails.
        """
        try:
            vote_option = VoteOption(option)
        except ValueError as e:
            allowed = ", ".join(o.value for o in VoteOption)
            raise InvalidVoteOptionError(
                f"Invalid vote option {option!r} (expected one of {allowed})"
            ) from e

        return await self._transact(
            Operation.VOTE,
            self._settings.fee.vote_gas,
            lambda s, fee: s.signer.vote(s.key.address, proposal_id, vote_option, fee, memo),
        )

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_validators(self) -> list[Validator]:
        """List bonded validators."""
        state = self._require_query()
        return await self._query(
            Operation.GET_VALIDATORS, lambda: state.query.validators(BondStatus.BONDED)
        )

    async def get_proposals(self) -> list[Proposal]:
        """List all governance proposals, whatever their status."""
        state = self._require_query()
        return await self._query(Operation.GET_PROPOSALS, state.query.proposals)

    async def get_pending_rewards(
        self, delegator_address: str | None = None
    ) -> list[DelegationReward]:
        """List outstanding rewards per validator for a delegator.

        Args:
            delegator_address: Delegator to query. Defaults to the session's account.
        """
        state = self._require_query()
        delegator = delegator_address or state.key.address
        return await self._query(
            Operation.GET_PENDING_REWARDS,
            lambda: state.query.delegation_rewards(delegator),
        )
