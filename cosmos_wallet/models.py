"""Domain models for the cosmos-wallet session layer."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class SessionState(str, Enum):
    """Lifecycle state of a wallet session."""

    KEYLESS = "KEYLESS"
    KEYED = "KEYED"
    CONNECTED = "CONNECTED"


class Operation(str, Enum):
    """Session operations, used to tag upstream failures."""

    CREATE_WALLET = "create_wallet"
    CONNECT = "connect_to_chain"
    GET_BALANCE = "get_balance"
    GET_ALL_BALANCES = "get_all_balances"
    SEND_TOKENS = "send_tokens"
    DELEGATE = "delegate"
    UNDELEGATE = "undelegate"
    REDELEGATE = "redelegate"
    GET_REWARDS = "get_rewards"
    GET_PENDING_REWARDS = "get_pending_rewards"
    SUBMIT_PROPOSAL = "submit_proposal"
    VOTE = "vote"
    GET_VALIDATORS = "get_validators"
    GET_PROPOSALS = "get_proposals"

    @property
    def action(self) -> str:
        """Human-readable verb phrase used in error messages."""
        return _ACTIONS[self]


_ACTIONS: dict[Operation, str] = {
    Operation.CREATE_WALLET: "create wallet",
    Operation.CONNECT: "connect to chain",
    Operation.GET_BALANCE: "get balance",
    Operation.GET_ALL_BALANCES: "get all balances",
    Operation.SEND_TOKENS: "send tokens",
    Operation.DELEGATE: "delegate tokens",
    Operation.UNDELEGATE: "undelegate tokens",
    Operation.REDELEGATE: "redelegate tokens",
    Operation.GET_REWARDS: "get rewards",
    Operation.GET_PENDING_REWARDS: "get pending rewards",
    Operation.SUBMIT_PROPOSAL: "submit proposal",
    Operation.VOTE: "vote",
    Operation.GET_VALIDATORS: "get validators",
    Operation.GET_PROPOSALS: "get proposals",
}


class VoteOption(str, Enum):
    """Governance vote options accepted by the session."""

    YES = "Yes"
    NO = "No"
    NO_WITH_VETO = "NoWithVeto"
    ABSTAIN = "Abstain"


class BondStatus(str, Enum):
    """Validator bonding status as reported by the staking module."""

    UNSPECIFIED = "BOND_STATUS_UNSPECIFIED"
    UNBONDED = "BOND_STATUS_UNBONDED"
    UNBONDING = "BOND_STATUS_UNBONDING"
    BONDED = "BOND_STATUS_BONDED"


# =============================================================================
# Value Models
# =============================================================================


class Coin(BaseModel):
    """An integer quantity of a single denomination."""

    model_config = {"frozen": True}

    amount: str = Field(..., pattern=r"^\d+$", description="Decimal string amount")
    denom: str = Field(..., min_length=1, description="Denomination, e.g. uatom")


class DecCoin(BaseModel):
    """A decimal quantity of a single denomination (rewards, commissions)."""

    model_config = {"frozen": True}

    amount: str = Field(..., description="Decimal amount as reported by the chain")
    denom: str = Field(..., min_length=1)


class Fee(BaseModel):
    """Fixed transaction fee and gas limit."""

    model_config = {"frozen": True}

    amount: list[Coin] = Field(..., description="Fee coins")
    gas_limit: int = Field(..., gt=0, description="Maximum gas for the transaction")

    def as_string(self) -> str:
        """Render fee coins in the SDK's compact form (e.g. 5000uatom)."""
        return ",".join(f"{coin.amount}{coin.denom}" for coin in self.amount)


class TextProposal(BaseModel):
    """Text governance proposal with its initial deposit."""

    model_config = {"frozen": True}

    title: str = Field(..., min_length=1)
    description: str
    initial_deposit: list[Coin] = Field(default_factory=list)
    proposer: str = Field(..., description="Bech32 address of the proposer")


# =============================================================================
# Result Models
# =============================================================================


class WalletInfo(BaseModel):
    """Primary account of a created or imported wallet."""

    model_config = {"frozen": True}

    address: str = Field(..., description="Bech32 account address")
    mnemonic: str = Field(..., repr=False, description="Phrase that restores the key")
    public_key: str = Field(..., description="Compressed secp256k1 public key, hex")


class Balance(BaseModel):
    """Balance of one denomination held by an account."""

    model_config = {"frozen": True}

    amount: int = Field(..., ge=0)
    denom: str


class TxReceipt(BaseModel):
    """Outcome of a broadcast transaction."""

    model_config = {"frozen": True}

    tx_hash: str = Field(..., description="Transaction hash (hex)")
    code: int = Field(default=0, description="ABCI result code, 0 on success")
    height: int | None = Field(default=None, description="Block height of inclusion")
    gas_wanted: int | None = None
    gas_used: int | None = None
    raw_log: str = ""

    @property
    def is_successful(self) -> bool:
        return self.code == 0


class Validator(BaseModel):
    """Staking validator summary."""

    model_config = {"frozen": True}

    operator_address: str
    moniker: str = ""
    tokens: int = Field(default=0, ge=0)
    status: BondStatus = BondStatus.UNSPECIFIED
    jailed: bool = False


class Proposal(BaseModel):
    """Governance proposal summary."""

    model_config = {"frozen": True}

    proposal_id: int = Field(..., ge=0)
    status: str = Field(..., description="Proposal status name, e.g. PROPOSAL_STATUS_PASSED")
    content_type: str = ""
    title: str = ""
    description: str = ""
    submit_time: datetime | None = None
    voting_end_time: datetime | None = None
    total_deposit: list[Coin] = Field(default_factory=list)


class DelegationReward(BaseModel):
    """Outstanding rewards accrued with a single validator."""

    model_config = {"frozen": True}

    validator_address: str
    reward: list[DecCoin] = Field(default_factory=list)
