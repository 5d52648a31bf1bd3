"""Tests for the wallet session state machine and operation surface."""

import sys
from io import StringIO
from typing import Any

import pytest
from loguru import logger

import cosmos_wallet.transports as transports
from cosmos_wallet.config import ChainConfig, FeeConfig, KeyConfig, Settings
from cosmos_wallet.encoding import encode_address
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
    WalletNotInitializedError,
)
from cosmos_wallet.interfaces.transport import QueryTransport, SigningTransport
from cosmos_wallet.models import (
    Balance,
    BondStatus,
    Coin,
    DelegationReward,
    DecCoin,
    Fee,
    Operation,
    Proposal,
    SessionState,
    TextProposal,
    TxReceipt,
    Validator,
    VoteOption,
)
from cosmos_wallet.wallet import KeyMaterial, WalletSession

TEST_MNEMONIC = (
    "special sign fit simple patrol salute grocery chicken wheat radar tonight ceiling"
)
TEST_ADDRESS = "cosmos1jhg0e7s6gn44tfc5k37kr04sznyhedtc9rzys5"
RECIPIENT = encode_address("cosmos", bytes(range(20)))
VALIDATOR = encode_address("cosmosvaloper", bytes(range(1, 21)))
OTHER_VALIDATOR = encode_address("cosmosvaloper", bytes(range(2, 22)))
ENDPOINT = "rest+http://localhost:1317"


class MockSigningTransport(SigningTransport):
    """Mock signing transport recording every delegated call."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.error = error
        self.balances: dict[tuple[str, str], int] = {}

    def _record(self, name: str, *args: Any) -> TxReceipt:
        self.calls.append((name, args))
        if self.error is not None:
            raise self.error
        return TxReceipt(tx_hash=f"HASH_{len(self.calls)}", code=0, height=100, raw_log="[]")

    async def get_balance(self, address: str, denom: str) -> Balance:
        self.calls.append(("get_balance", (address, denom)))
        if self.error is not None:
            raise self.error
        return Balance(amount=self.balances.get((address, denom), 0), denom=denom)

    async def get_all_balances(self, address: str) -> list[Balance]:
        self.calls.append(("get_all_balances", (address,)))
        if self.error is not None:
            raise self.error
        return [
            Balance(amount=amount, denom=denom)
            for (holder, denom), amount in self.balances.items()
            if holder == address
        ]

    async def send_tokens(
        self, sender: str, recipient: str, amount: list[Coin], fee: Fee, memo: str = ""
    ) -> TxReceipt:
        return self._record("send_tokens", sender, recipient, amount, fee, memo)

    async def delegate(
        self, delegator: str, validator: str, amount: Coin, fee: Fee, memo: str = ""
    ) -> TxReceipt:
        return self._record("delegate", delegator, validator, amount, fee, memo)

    async def undelegate(
        self, delegator: str, validator: str, amount: Coin, fee: Fee, memo: str = ""
    ) -> TxReceipt:
        return self._record("undelegate", delegator, validator, amount, fee, memo)

    async def redelegate(
        self,
        delegator: str,
        source_validator: str,
        destination_validator: str,
        amount: Coin,
        fee: Fee,
        memo: str = "",
    ) -> TxReceipt:
        return self._record(
            "redelegate", delegator, source_validator, destination_validator, amount, fee, memo
        )

    async def withdraw_rewards(
        self, delegator: str, validator: str, fee: Fee, memo: str = ""
    ) -> TxReceipt:
        return self._record("withdraw_rewards", delegator, validator, fee, memo)

    async def submit_proposal(
        self, proposal: TextProposal, fee: Fee, memo: str = ""
    ) -> TxReceipt:
        return self._record("submit_proposal", proposal, fee, memo)

    async def vote(
        self, voter: str, proposal_id: int, option: VoteOption, fee: Fee, memo: str = ""
    ) -> TxReceipt:
        return self._record("vote", voter, proposal_id, option, fee, memo)


class MockQueryTransport(QueryTransport):
    """Mock query transport with a fixed validator and proposal set."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.requested_status: BondStatus | None = None
        self.validator_set = [
            Validator(operator_address=VALIDATOR, moniker="a", tokens=10, status=BondStatus.BONDED),
            Validator(operator_address=OTHER_VALIDATOR, moniker="b", tokens=5, status=BondStatus.UNBONDING),
            Validator(operator_address="cosmosvaloper1x", moniker="c", status=BondStatus.UNBONDED),
        ]
        self.proposal_set = [
            Proposal(proposal_id=1, status="PROPOSAL_STATUS_PASSED"),
            Proposal(proposal_id=2, status="PROPOSAL_STATUS_VOTING_PERIOD"),
            Proposal(proposal_id=3, status="PROPOSAL_STATUS_REJECTED"),
        ]
        self.reward_requests: list[str] = []

    async def validators(self, status: BondStatus) -> list[Validator]:
        if self.error is not None:
            raise self.error
        self.requested_status = status
        return [v for v in self.validator_set if v.status == status]

    async def proposals(self) -> list[Proposal]:
        if self.error is not None:
            raise self.error
        return list(self.proposal_set)

    async def delegation_rewards(self, delegator: str) -> list[DelegationReward]:
        if self.error is not None:
            raise self.error
        self.reward_requests.append(delegator)
        return [
            DelegationReward(
                validator_address=VALIDATOR,
                reward=[DecCoin(amount="12.5", denom="uatom")],
            )
        ]


class Connector:
    """Records connector invocations and hands out mock transports."""

    def __init__(
        self,
        signer: MockSigningTransport,
        query: MockQueryTransport,
        error: Exception | None = None,
    ) -> None:
        self.signer = signer
        self.query = query
        self.error = error
        self.signing_calls: list[tuple[str, KeyMaterial]] = []
        self.query_calls: list[str] = []

    async def connect_signing(
        self, endpoint: str, key: KeyMaterial, settings: Settings
    ) -> SigningTransport:
        if self.error is not None:
            raise self.error
        self.signing_calls.append((endpoint, key))
        return self.signer

    async def connect_query(self, endpoint: str, settings: Settings) -> QueryTransport:
        self.query_calls.append(endpoint)
        return self.query


@pytest.fixture
def settings() -> Settings:
    return Settings(
        key=KeyConfig(_env_file=None, address_prefix="cosmos", mnemonic_words=24),
        chain=ChainConfig(_env_file=None, chain_id="testing", denom="uatom"),
        fee=FeeConfig(_env_file=None, amount=5000, denom="uatom"),
    )


@pytest.fixture
def signer() -> MockSigningTransport:
    return MockSigningTransport()


@pytest.fixture
def query() -> MockQueryTransport:
    return MockQueryTransport()


@pytest.fixture
def connector(signer: MockSigningTransport, query: MockQueryTransport) -> Connector:
    return Connector(signer, query)


@pytest.fixture
def session(settings: Settings, connector: Connector) -> WalletSession:
    return WalletSession(
        settings=settings,
        signing_connector=connector.connect_signing,
        query_connector=connector.connect_query,
    )


async def connect(session: WalletSession) -> None:
    await session.create_wallet(TEST_MNEMONIC)
    await session.connect_to_chain(ENDPOINT)


# =============================================================================
# Wallet Creation
# =============================================================================


class TestCreateWallet:
    """Tests for create_wallet()."""

    @pytest.mark.asyncio
    async def test_import_returns_account(self, session: WalletSession) -> None:
        info = await session.create_wallet(TEST_MNEMONIC)

        assert info.address == TEST_ADDRESS
        assert info.mnemonic == TEST_MNEMONIC
        assert info.public_key == session.public_key
        assert session.state == SessionState.KEYED
        assert session.address == TEST_ADDRESS

    @pytest.mark.asyncio
    async def test_import_is_deterministic(self, settings: Settings) -> None:
        first = await WalletSession(settings=settings).create_wallet(TEST_MNEMONIC, "cosmos")
        second = await WalletSession(settings=settings).create_wallet(TEST_MNEMONIC, "cosmos")

        assert first.address == second.address
        assert first.public_key == second.public_key

    @pytest.mark.asyncio
    async def test_custom_prefix(self, session: WalletSession) -> None:
        info = await session.create_wallet(TEST_MNEMONIC, prefix="osmo")
        assert info.address.startswith("osmo1")

    @pytest.mark.asyncio
    async def test_generate_fresh_mnemonic(self, session: WalletSession) -> None:
        first = await session.create_wallet()
        second = await session.create_wallet()

        assert len(first.mnemonic.split()) == 24
        assert first.mnemonic != second.mnemonic
        assert first.address != second.address
        assert session.mnemonic == second.mnemonic

    @pytest.mark.asyncio
    async def test_generated_wallet_is_recoverable(self, session: WalletSession) -> None:
        generated = await session.create_wallet()
        restored = await WalletSession(settings=session.settings).create_wallet(generated.mnemonic)

        assert restored.address == generated.address

    @pytest.mark.asyncio
    async def test_invalid_mnemonic_wrapped(self, session: WalletSession) -> None:
        with pytest.raises(WalletCreationError) as exc_info:
            await session.create_wallet("definitely not a mnemonic")

        assert exc_info.value.operation == Operation.CREATE_WALLET
        assert exc_info.value.cause is exc_info.value.__cause__
        assert str(exc_info.value).startswith("Failed to create wallet:")
        assert session.state == SessionState.KEYLESS

    @pytest.mark.asyncio
    async def test_invalid_prefix_wrapped(self, session: WalletSession) -> None:
        with pytest.raises(WalletCreationError):
            await session.create_wallet(TEST_MNEMONIC, prefix="")

    @pytest.mark.asyncio
    async def test_logs_without_secrets(self, session: WalletSession) -> None:
        log_output = StringIO()
        handler_id = logger.add(log_output, format="{message}", level="DEBUG")

        try:
            await session.create_wallet(TEST_MNEMONIC)
            log_content = log_output.getvalue()
            assert "Imported wallet" in log_content
            assert "special sign" not in log_content
        finally:
            logger.remove(handler_id)


# =============================================================================
# Chain Connection
# =============================================================================


class TestConnectToChain:
    """Tests for connect_to_chain()."""

    @pytest.mark.asyncio
    async def test_requires_wallet(self, session: WalletSession, connector: Connector) -> None:
        with pytest.raises(WalletNotInitializedError) as exc_info:
            await session.connect_to_chain(ENDPOINT)

        assert str(exc_info.value) == "Wallet not initialized"
        assert connector.signing_calls == []

    @pytest.mark.asyncio
    async def test_connect_binds_both_transports(
        self, session: WalletSession, connector: Connector, signer: MockSigningTransport
    ) -> None:
        await session.create_wallet(TEST_MNEMONIC)
        returned = await session.connect_to_chain(ENDPOINT)

        assert returned is signer
        assert session.state == SessionState.CONNECTED
        assert session.is_connected
        assert session.endpoint == ENDPOINT
        assert connector.signing_calls[0][0] == ENDPOINT
        assert connector.signing_calls[0][1].address == TEST_ADDRESS
        assert connector.query_calls == [ENDPOINT]

    @pytest.mark.asyncio
    async def test_connection_failure_wrapped(
        self, settings: Settings, signer: MockSigningTransport, query: MockQueryTransport
    ) -> None:
        failing = Connector(signer, query, error=OSError("connection refused"))
        session = WalletSession(
            settings=settings,
            signing_connector=failing.connect_signing,
            query_connector=failing.connect_query,
        )
        await session.create_wallet(TEST_MNEMONIC)

        with pytest.raises(ChainConnectionError) as exc_info:
            await session.connect_to_chain(ENDPOINT)

        assert "Failed to connect to chain: connection refused" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, OSError)
        assert session.state == SessionState.KEYED
        assert failing.query_calls == []

    @pytest.mark.asyncio
    async def test_missing_default_transport(
        self, settings: Settings, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setitem(sys.modules, "cosmos_wallet.transports.cosmpy_transport", None)
        monkeypatch.delattr(transports, "cosmpy_transport", raising=False)
        session = WalletSession(settings=settings)
        await session.create_wallet(TEST_MNEMONIC)

        with pytest.raises(TransportUnavailableError) as exc_info:
            await session.connect_to_chain(ENDPOINT)

        assert isinstance(exc_info.value, ChainConnectionError)
        assert "cosmpy" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_recreate_wallet_drops_connection(
        self, session: WalletSession, signer: MockSigningTransport
    ) -> None:
        await connect(session)
        new_info = await session.create_wallet()

        assert session.state == SessionState.KEYED
        assert session.address == new_info.address
        assert session.endpoint is None

        with pytest.raises(ClientNotInitializedError):
            await session.send_tokens(RECIPIENT, "1")
        with pytest.raises(QueryClientNotInitializedError):
            await session.get_validators()
        assert signer.calls == []

    @pytest.mark.asyncio
    async def test_reconnect_binds_new_key(
        self, session: WalletSession, connector: Connector, signer: MockSigningTransport
    ) -> None:
        await connect(session)
        new_info = await session.create_wallet()
        await session.connect_to_chain(ENDPOINT)

        await session.send_tokens(RECIPIENT, "1")

        assert connector.signing_calls[-1][1].address == new_info.address
        assert signer.calls[0][1][0] == new_info.address


# =============================================================================
# Preconditions
# =============================================================================


class TestPreconditions:
    """Operations fail before any network call when state is missing."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "call",
        [
            lambda s: s.get_balance(TEST_ADDRESS),
            lambda s: s.get_all_balances(TEST_ADDRESS),
            lambda s: s.send_tokens(RECIPIENT, "1000"),
            lambda s: s.delegate(VALIDATOR, "1000"),
            lambda s: s.undelegate(VALIDATOR, "1000"),
            lambda s: s.redelegate(VALIDATOR, OTHER_VALIDATOR, "1000"),
            lambda s: s.get_rewards(),
            lambda s: s.submit_proposal("t", "d", []),
            lambda s: s.vote(1, "Yes"),
        ],
    )
    async def test_signing_operations_require_connection(
        self, session: WalletSession, signer: MockSigningTransport, call: Any
    ) -> None:
        with pytest.raises(ClientNotInitializedError):
            await call(session)

        await session.create_wallet(TEST_MNEMONIC)
        with pytest.raises(ClientNotInitializedError):
            await call(session)

        assert signer.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "call",
        [
            lambda s: s.get_validators(),
            lambda s: s.get_proposals(),
            lambda s: s.get_pending_rewards(),
        ],
    )
    async def test_query_operations_require_connection(
        self, session: WalletSession, call: Any
    ) -> None:
        with pytest.raises(QueryClientNotInitializedError) as exc_info:
            await call(session)

        assert str(exc_info.value) == "Query client not initialized"

    @pytest.mark.asyncio
    async def test_precondition_messages(self, session: WalletSession) -> None:
        with pytest.raises(ClientNotInitializedError, match="^Client not initialized$"):
            await session.get_balance(TEST_ADDRESS)
        with pytest.raises(
            ClientNotInitializedError, match="^Wallet or client not initialized$"
        ):
            await session.send_tokens(RECIPIENT, "1")

    @pytest.mark.asyncio
    async def test_precondition_errors_are_not_operation_errors(
        self, session: WalletSession
    ) -> None:
        with pytest.raises(PreconditionError) as exc_info:
            await session.delegate(VALIDATOR, "1")

        assert not isinstance(exc_info.value, OperationError)


# =============================================================================
# Bank Operations
# =============================================================================


class TestBank:
    """Tests for balance and transfer operations."""

    @pytest.mark.asyncio
    async def test_get_balance(
        self, session: WalletSession, signer: MockSigningTransport
    ) -> None:
        signer.balances[(TEST_ADDRESS, "uatom")] = 42
        await connect(session)

        balance = await session.get_balance(TEST_ADDRESS, "uatom")

        assert balance == Balance(amount=42, denom="uatom")

    @pytest.mark.asyncio
    async def test_get_balance_defaults(
        self, session: WalletSession, signer: MockSigningTransport
    ) -> None:
        await connect(session)
        balance = await session.get_balance()

        assert balance.amount == 0
        assert balance.denom == "uatom"
        assert signer.calls == [("get_balance", (TEST_ADDRESS, "uatom"))]

    @pytest.mark.asyncio
    async def test_get_all_balances(
        self, session: WalletSession, signer: MockSigningTransport
    ) -> None:
        signer.balances[(TEST_ADDRESS, "uatom")] = 7
        signer.balances[(TEST_ADDRESS, "uosmo")] = 3
        await connect(session)

        balances = await session.get_all_balances()

        assert {b.denom: b.amount for b in balances} == {"uatom": 7, "uosmo": 3}

    @pytest.mark.asyncio
    async def test_get_balance_failure_wrapped(self, settings: Settings) -> None:
        signer = MockSigningTransport(error=RuntimeError("node unavailable"))
        connector = Connector(signer, MockQueryTransport())
        session = WalletSession(
            settings=settings,
            signing_connector=connector.connect_signing,
            query_connector=connector.connect_query,
        )
        await connect(session)

        with pytest.raises(QueryError) as exc_info:
            await session.get_balance(TEST_ADDRESS)

        assert exc_info.value.operation == Operation.GET_BALANCE
        assert str(exc_info.value) == "Failed to get balance: node unavailable"

    @pytest.mark.asyncio
    async def test_send_tokens(
        self, session: WalletSession, signer: MockSigningTransport
    ) -> None:
        await connect(session)

        receipt = await session.send_tokens(RECIPIENT, "1000", "uatom", memo="hello")

        assert receipt.tx_hash == "HASH_1"
        name, (sender, recipient, coins, fee, memo) = signer.calls[0]
        assert name == "send_tokens"
        assert sender == TEST_ADDRESS
        assert recipient == RECIPIENT
        assert coins == [Coin(amount="1000", denom="uatom")]
        assert fee == Fee(amount=[Coin(amount="5000", denom="uatom")], gas_limit=200000)
        assert memo == "hello"

    @pytest.mark.asyncio
    async def test_send_tokens_insufficient_funds(self, settings: Settings) -> None:
        signer = MockSigningTransport(
            error=RuntimeError("0uatom is smaller than 1000uatom: insufficient funds")
        )
        connector = Connector(signer, MockQueryTransport())
        session = WalletSession(
            settings=settings,
            signing_connector=connector.connect_signing,
            query_connector=connector.connect_query,
        )
        await connect(session)

        with pytest.raises(TransactionError) as exc_info:
            await session.send_tokens(RECIPIENT, "1000", "uatom")

        assert not isinstance(exc_info.value, PreconditionError)
        assert exc_info.value.operation == Operation.SEND_TOKENS
        assert "insufficient funds" in str(exc_info.value)
        assert str(exc_info.value).startswith("Failed to send tokens:")

    @pytest.mark.asyncio
    async def test_send_tokens_invalid_amount_wrapped(
        self, session: WalletSession, signer: MockSigningTransport
    ) -> None:
        await connect(session)

        with pytest.raises(TransactionError):
            await session.send_tokens(RECIPIENT, "-5")

        assert signer.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "recipient",
        [
            encode_address("osmo", bytes(range(20))),
            RECIPIENT[:-1] + ("q" if RECIPIENT[-1] != "q" else "p"),
            "not-an-address",
        ],
    )
    async def test_send_tokens_invalid_recipient_wrapped(
        self, session: WalletSession, signer: MockSigningTransport, recipient: str
    ) -> None:
        await connect(session)

        with pytest.raises(TransactionError) as exc_info:
            await session.send_tokens(recipient, "1")

        assert exc_info.value.operation == Operation.SEND_TOKENS
        assert isinstance(exc_info.value.cause, ValueError)
        assert signer.calls == []


# =============================================================================
# Staking Operations
# =============================================================================


class TestStaking:
    """Tests for delegation and reward operations."""

    STAKING_FEE = Fee(amount=[Coin(amount="5000", denom="uatom")], gas_limit=250000)

    @pytest.mark.asyncio
    async def test_account_address_rejected_as_validator(
        self, session: WalletSession, signer: MockSigningTransport
    ) -> None:
        await connect(session)

        with pytest.raises(TransactionError, match="^Failed to delegate tokens"):
            await session.delegate(RECIPIENT, "1")
        with pytest.raises(TransactionError, match="^Failed to redelegate tokens"):
            await session.redelegate(VALIDATOR, RECIPIENT, "1")
        with pytest.raises(TransactionError, match="^Failed to get rewards"):
            await session.get_rewards("cosmosvaloper1invalid")

        assert signer.calls == []

    @pytest.mark.asyncio
    async def test_delegate(self, session: WalletSession, signer: MockSigningTransport) -> None:
        await connect(session)
        await session.delegate(VALIDATOR, "500")

        assert signer.calls[0] == (
            "delegate",
            (TEST_ADDRESS, VALIDATOR, Coin(amount="500", denom="uatom"), self.STAKING_FEE, ""),
        )

    @pytest.mark.asyncio
    async def test_undelegate(self, session: WalletSession, signer: MockSigningTransport) -> None:
        await connect(session)
        await session.undelegate(VALIDATOR, "500", "uatom")

        assert signer.calls[0] == (
            "undelegate",
            (TEST_ADDRESS, VALIDATOR, Coin(amount="500", denom="uatom"), self.STAKING_FEE, ""),
        )

    @pytest.mark.asyncio
    async def test_redelegate(self, session: WalletSession, signer: MockSigningTransport) -> None:
        await connect(session)
        await session.redelegate(VALIDATOR, OTHER_VALIDATOR, "500")

        assert signer.calls[0] == (
            "redelegate",
            (
                TEST_ADDRESS,
                VALIDATOR,
                OTHER_VALIDATOR,
                Coin(amount="500", denom="uatom"),
                self.STAKING_FEE,
                "",
            ),
        )

    @pytest.mark.asyncio
    async def test_get_rewards_all_validators(
        self, session: WalletSession, signer: MockSigningTransport
    ) -> None:
        await connect(session)
        await session.get_rewards()

        assert signer.calls[0] == ("withdraw_rewards", (TEST_ADDRESS, "", self.STAKING_FEE, ""))

    @pytest.mark.asyncio
    async def test_get_rewards_single_validator(
        self, session: WalletSession, signer: MockSigningTransport
    ) -> None:
        await connect(session)
        await session.get_rewards(VALIDATOR)

        assert signer.calls[0] == (
            "withdraw_rewards",
            (TEST_ADDRESS, VALIDATOR, self.STAKING_FEE, ""),
        )

    @pytest.mark.asyncio
    async def test_delegate_failure_wrapped(self, settings: Settings) -> None:
        signer = MockSigningTransport(error=ValueError("validator does not exist"))
        connector = Connector(signer, MockQueryTransport())
        session = WalletSession(
            settings=settings,
            signing_connector=connector.connect_signing,
            query_connector=connector.connect_query,
        )
        await connect(session)

        with pytest.raises(TransactionError) as exc_info:
            await session.delegate(VALIDATOR, "1")

        assert str(exc_info.value) == "Failed to delegate tokens: validator does not exist"
        assert isinstance(exc_info.value.cause, ValueError)

    @pytest.mark.asyncio
    async def test_custom_fee_settings(self, signer: MockSigningTransport) -> None:
        settings = Settings(
            key=KeyConfig(_env_file=None),
            chain=ChainConfig(_env_file=None, denom="stake"),
            fee=FeeConfig(_env_file=None, amount=10, denom="stake", staking_gas=300000),
        )
        connector = Connector(signer, MockQueryTransport())
        session = WalletSession(
            settings=settings,
            signing_connector=connector.connect_signing,
            query_connector=connector.connect_query,
        )
        await connect(session)
        await session.delegate(VALIDATOR, "1")

        _, (_, _, amount, fee, _) = signer.calls[0]
        assert amount == Coin(amount="1", denom="stake")
        assert fee == Fee(amount=[Coin(amount="10", denom="stake")], gas_limit=300000)


# =============================================================================
# Governance Operations
# =============================================================================


class TestGovernance:
    """Tests for proposal submission and voting."""

    @pytest.mark.asyncio
    async def test_submit_proposal(
        self, session: WalletSession, signer: MockSigningTransport
    ) -> None:
        await connect(session)
        await session.submit_proposal(
            "Upgrade", "Signal support", [{"amount": "10000000", "denom": "uatom"}]
        )

        name, (proposal, fee, memo) = signer.calls[0]
        assert name == "submit_proposal"
        assert proposal == TextProposal(
            title="Upgrade",
            description="Signal support",
            initial_deposit=[Coin(amount="10000000", denom="uatom")],
            proposer=TEST_ADDRESS,
        )
        assert fee.gas_limit == 250000

    @pytest.mark.asyncio
    async def test_submit_proposal_accepts_coin_models(
        self, session: WalletSession, signer: MockSigningTransport
    ) -> None:
        await connect(session)
        deposit = [Coin(amount="1", denom="uatom")]
        await session.submit_proposal("t", "d", deposit)

        assert signer.calls[0][1][0].initial_deposit == deposit

    @pytest.mark.asyncio
    @pytest.mark.parametrize("option", ["Yes", "No", "NoWithVeto", "Abstain"])
    async def test_vote_options(
        self, session: WalletSession, signer: MockSigningTransport, option: str
    ) -> None:
        await connect(session)
        await session.vote(7, option)

        name, (voter, proposal_id, vote_option, fee, _) = signer.calls[0]
        assert name == "vote"
        assert voter == TEST_ADDRESS
        assert proposal_id == 7
        assert vote_option == VoteOption(option)
        assert fee.gas_limit == 200000

    @pytest.mark.asyncio
    async def test_vote_accepts_enum(
        self, session: WalletSession, signer: MockSigningTransport
    ) -> None:
        await connect(session)
        await session.vote(1, VoteOption.NO_WITH_VETO)

        assert signer.calls[0][1][2] is VoteOption.NO_WITH_VETO

    @pytest.mark.asyncio
    @pytest.mark.parametrize("option", ["Maybe", "yes", "VOTE_OPTION_YES", ""])
    async def test_vote_rejects_unknown_option(
        self, session: WalletSession, signer: MockSigningTransport, option: str
    ) -> None:
        await connect(session)

        with pytest.raises(InvalidVoteOptionError) as exc_info:
            await session.vote(1, option)

        assert isinstance(exc_info.value, ValueError)
        assert signer.calls == []

    @pytest.mark.asyncio
    async def test_vote_option_checked_before_state(self, session: WalletSession) -> None:
        with pytest.raises(InvalidVoteOptionError):
            await session.vote(1, "Maybe")


# =============================================================================
# Queries
# =============================================================================


class TestQueries:
    """Tests for validator, proposal and reward queries."""

    @pytest.mark.asyncio
    async def test_get_validators_bonded_only(
        self, session: WalletSession, query: MockQueryTransport
    ) -> None:
        await connect(session)
        validators = await session.get_validators()

        assert query.requested_status == BondStatus.BONDED
        assert [v.operator_address for v in validators] == [VALIDATOR]
        assert all(v.status == BondStatus.BONDED for v in validators)

    @pytest.mark.asyncio
    async def test_get_proposals_unfiltered(
        self, session: WalletSession, query: MockQueryTransport
    ) -> None:
        await connect(session)
        proposals = await session.get_proposals()

        assert [p.proposal_id for p in proposals] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_get_pending_rewards_defaults_to_own_address(
        self, session: WalletSession, query: MockQueryTransport
    ) -> None:
        await connect(session)
        rewards = await session.get_pending_rewards()

        assert query.reward_requests == [TEST_ADDRESS]
        assert rewards[0].reward[0].amount == "12.5"

    @pytest.mark.asyncio
    async def test_query_failure_wrapped(self, settings: Settings) -> None:
        connector = Connector(
            MockSigningTransport(), MockQueryTransport(error=TimeoutError("deadline exceeded"))
        )
        session = WalletSession(
            settings=settings,
            signing_connector=connector.connect_signing,
            query_connector=connector.connect_query,
        )
        await connect(session)

        with pytest.raises(QueryError) as exc_info:
            await session.get_validators()
        assert exc_info.value.operation == Operation.GET_VALIDATORS
        assert str(exc_info.value) == "Failed to get validators: deadline exceeded"

        with pytest.raises(QueryError, match="^Failed to get proposals"):
            await session.get_proposals()
