"""Signing and query transports backed by cosmpy.

cosmpy's LedgerClient is synchronous, so every call runs through
asyncio.to_thread and the session's event loop is never blocked.
"""

import asyncio
from urllib.parse import urlsplit
from collections.abc import Callable, Iterable
from typing import Any

import grpc
from cosmpy.aerial.client import LedgerClient, NetworkConfig
from cosmpy.aerial.tx import SigningCfg, Transaction
from cosmpy.aerial.urls import Protocol, parse_url
from cosmpy.aerial.wallet import LocalWallet
from cosmpy.common.rest_client import RestClient
from cosmpy.crypto.address import Address
from cosmpy.crypto.keypairs import PrivateKey
from cosmpy.distribution.rest_client import DistributionRestClient
from cosmpy.gov.rest_client import GovRestClient
from cosmpy.protos.cosmos.bank.v1beta1.tx_pb2 import MsgSend
from cosmpy.protos.cosmos.base.query.v1beta1.pagination_pb2 import PageRequest
from cosmpy.protos.cosmos.base.v1beta1.coin_pb2 import Coin as ProtoCoin
from cosmpy.protos.cosmos.distribution.v1beta1.query_pb2 import (
    QueryDelegationTotalRewardsRequest,
)
from cosmpy.protos.cosmos.distribution.v1beta1.query_pb2_grpc import (
    QueryStub as DistributionGrpcClient,
)
from cosmpy.protos.cosmos.distribution.v1beta1.tx_pb2 import MsgWithdrawDelegatorReward
from cosmpy.protos.cosmos.gov.v1beta1 import gov_pb2
from cosmpy.protos.cosmos.gov.v1beta1.query_pb2 import QueryProposalsRequest
from cosmpy.protos.cosmos.gov.v1beta1.query_pb2_grpc import QueryStub as GovGrpcClient
from cosmpy.protos.cosmos.gov.v1beta1.tx_pb2 import MsgSubmitProposal, MsgVote
from cosmpy.protos.cosmos.staking.v1beta1 import staking_pb2
from cosmpy.protos.cosmos.staking.v1beta1.query_pb2 import QueryValidatorsRequest
from cosmpy.protos.cosmos.staking.v1beta1.query_pb2_grpc import (
    QueryStub as StakingGrpcClient,
)
from cosmpy.protos.cosmos.staking.v1beta1.tx_pb2 import (
    MsgBeginRedelegate,
    MsgDelegate,
    MsgUndelegate,
)
from cosmpy.staking.rest_client import StakingRestClient
from google.protobuf.any_pb2 import Any as ProtoAny
from loguru import logger

from cosmos_wallet.config import Settings
from cosmos_wallet.interfaces.transport import QueryTransport, SigningTransport
from cosmos_wallet.models import (
    Balance,
    BondStatus,
    Coin,
    DecCoin,
    DelegationReward,
    Fee,
    Proposal,
    TextProposal,
    TxReceipt,
    Validator,
    VoteOption,
)
from cosmos_wallet.wallet.keys import KeyMaterial

_VOTE_OPTIONS = {
    VoteOption.YES: gov_pb2.VOTE_OPTION_YES,
    VoteOption.NO: gov_pb2.VOTE_OPTION_NO,
    VoteOption.NO_WITH_VETO: gov_pb2.VOTE_OPTION_NO_WITH_VETO,
    VoteOption.ABSTAIN: gov_pb2.VOTE_OPTION_ABSTAIN,
}

_TEXT_PROPOSAL_TYPE = "/cosmos.gov.v1beta1.TextProposal"


def normalize_endpoint(endpoint: str) -> str:
    """Convert an endpoint to cosmpy's URL form.

    "grpc+" and "rest+" URLs are kept; bare http(s) URLs are treated as REST.

    Raises:
        ValueError: If the scheme is not recognised or the URL has a path.
    """
    if endpoint.startswith(("http://", "https://")):
        endpoint = f"rest+{endpoint}"
    elif not endpoint.startswith(("grpc+", "rest+")):
        raise ValueError(f"Unsupported endpoint scheme: {endpoint}")

    # cosmpy keeps only host and port, a path would silently be dropped
    if urlsplit(endpoint.split("+", 1)[1]).path not in ("", "/"):
        raise ValueError(f"Endpoint paths are not supported: {endpoint}")
    return endpoint


def network_config(endpoint: str, settings: Settings) -> NetworkConfig:
    """Build cosmpy network configuration from session settings."""
    chain = settings.chain
    return NetworkConfig(
        chain_id=chain.chain_id,
        url=normalize_endpoint(endpoint),
        fee_minimum_gas_price=chain.min_gas_price,
        fee_denomination=chain.denom,
        staking_denomination=chain.denom,
    )


def _proto_coin(coin: Coin) -> ProtoCoin:
    return ProtoCoin(amount=coin.amount, denom=coin.denom)


def _paginate(fetch: Callable[[PageRequest], Any], field: str) -> list[Any]:
    """Collect a repeated field across every page of a paginated query."""
    items: list[Any] = []
    key = b""
    while True:
        response = fetch(PageRequest(key=key))
        items.extend(getattr(response, field))
        key = response.pagination.next_key
        if not key:
            return items


class CosmpySigningTransport(SigningTransport):
    """Signing transport around a cosmpy LedgerClient and LocalWallet.

    Transactions are sealed with the caller's fixed fee and gas limit
    (no simulation), signed in direct mode and broadcast; the receipt is
    returned once the transaction is included in a block.
    """

    def __init__(self, client: LedgerClient, wallet: LocalWallet, chain_id: str) -> None:
        self._client = client
        self._wallet = wallet
        self._chain_id = chain_id

    async def get_balance(self, address: str, denom: str) -> Balance:
        amount = await asyncio.to_thread(
            self._client.query_bank_balance, Address(address), denom
        )
        return Balance(amount=int(amount), denom=denom)

    async def get_all_balances(self, address: str) -> list[Balance]:
        coins = await asyncio.to_thread(
            self._client.query_bank_all_balances, Address(address)
        )
        return [Balance(amount=int(c.amount), denom=c.denom) for c in coins]

    async def send_tokens(
        self,
        sender: str,
        recipient: str,
        amount: list[Coin],
        fee: Fee,
        memo: str = "",
    ) -> TxReceipt:
        msg = MsgSend(
            from_address=sender,
            to_address=recipient,
            amount=[_proto_coin(c) for c in amount],
        )
        return await self._broadcast([msg], fee, memo)

    async def delegate(
        self, delegator: str, validator: str, amount: Coin, fee: Fee, memo: str = ""
    ) -> TxReceipt:
        msg = MsgDelegate(
            delegator_address=delegator,
            validator_address=validator,
            amount=_proto_coin(amount),
        )
        return await self._broadcast([msg], fee, memo)

    async def undelegate(
        self, delegator: str, validator: str, amount: Coin, fee: Fee, memo: str = ""
    ) -> TxReceipt:
        msg = MsgUndelegate(
            delegator_address=delegator,
            validator_address=validator,
            amount=_proto_coin(amount),
        )
        return await self._broadcast([msg], fee, memo)

    async def redelegate(
        self,
        delegator: str,
        source_validator: str,
        destination_validator: str,
        amount: Coin,
        fee: Fee,
        memo: str = "",
    ) -> TxReceipt:
        msg = MsgBeginRedelegate(
            delegator_address=delegator,
            validator_src_address=source_validator,
            validator_dst_address=destination_validator,
            amount=_proto_coin(amount),
        )
        return await self._broadcast([msg], fee, memo)

    async def withdraw_rewards(
        self, delegator: str, validator: str, fee: Fee, memo: str = ""
    ) -> TxReceipt:
        if validator:
            validators = [validator]
        else:
            validators = await asyncio.to_thread(self._delegated_validators, delegator)
            if not validators:
                raise ValueError(f"No delegations to withdraw rewards from for {delegator}")

        msgs = [
            MsgWithdrawDelegatorReward(delegator_address=delegator, validator_address=v)
            for v in validators
        ]
        return await self._broadcast(msgs, fee, memo)

    async def submit_proposal(
        self, proposal: TextProposal, fee: Fee, memo: str = ""
    ) -> TxReceipt:
        content = ProtoAny()
        content.Pack(
            gov_pb2.TextProposal(title=proposal.title, description=proposal.description),
            type_url_prefix="/",
        )
        msg = MsgSubmitProposal(
            content=content,
            initial_deposit=[_proto_coin(c) for c in proposal.initial_deposit],
            proposer=proposal.proposer,
        )
        return await self._broadcast([msg], fee, memo)

    async def vote(
        self, voter: str, proposal_id: int, option: VoteOption, fee: Fee, memo: str = ""
    ) -> TxReceipt:
        msg = MsgVote(proposal_id=proposal_id, voter=voter, option=_VOTE_OPTIONS[option])
        return await self._broadcast([msg], fee, memo)

    def _delegated_validators(self, delegator: str) -> list[str]:
        summary = self._client.query_staking_summary(Address(delegator))
        return [str(position.validator) for position in summary.current_positions]

    async def _broadcast(self, msgs: Iterable[Any], fee: Fee, memo: str) -> TxReceipt:
        return await asyncio.to_thread(self._sign_and_broadcast, list(msgs), fee, memo)

    def _sign_and_broadcast(self, msgs: list[Any], fee: Fee, memo: str) -> TxReceipt:
        account = self._client.query_account(self._wallet.address())

        tx = Transaction()
        for msg in msgs:
            tx.add_message(msg)
        tx.seal(
            SigningCfg.direct(self._wallet.public_key(), account.sequence),
            fee=fee.as_string(),
            gas_limit=fee.gas_limit,
            memo=memo,
        )
        tx.sign(self._wallet.signer(), self._chain_id, account.number)
        tx.complete()

        submitted = self._client.broadcast_tx(tx)
        logger.debug("Broadcast tx | tx_hash={} messages={}", submitted.tx_hash, len(msgs))
        submitted.wait_to_complete()
        response = submitted.response

        return TxReceipt(
            tx_hash=submitted.tx_hash,
            code=response.code,
            height=response.height,
            gas_wanted=response.gas_wanted,
            gas_used=response.gas_used,
            raw_log=response.raw_log or "",
        )


class CosmpyQueryTransport(QueryTransport):
    """Read-only transport over the staking, gov and distribution query services.

    The three clients may be gRPC stubs or cosmpy REST clients; both expose
    the same protobuf service methods.
    """

    def __init__(self, staking: Any, gov: Any, distribution: Any) -> None:
        self._staking = staking
        self._gov = gov
        self._distribution = distribution

    async def validators(self, status: BondStatus) -> list[Validator]:
        return await asyncio.to_thread(self._validators, status)

    async def proposals(self) -> list[Proposal]:
        return await asyncio.to_thread(self._proposals)

    async def delegation_rewards(self, delegator: str) -> list[DelegationReward]:
        response = await asyncio.to_thread(
            self._distribution.DelegationTotalRewards,
            QueryDelegationTotalRewardsRequest(delegator_address=delegator),
        )
        return [
            DelegationReward(
                validator_address=r.validator_address,
                reward=[DecCoin(amount=c.amount, denom=c.denom) for c in r.reward],
            )
            for r in response.rewards
        ]

    def _validators(self, status: BondStatus) -> list[Validator]:
        raw = _paginate(
            lambda page: self._staking.Validators(
                QueryValidatorsRequest(status=status.value, pagination=page)
            ),
            "validators",
        )
        return [self._validator_model(v) for v in raw]

    def _proposals(self) -> list[Proposal]:
        raw = _paginate(
            lambda page: self._gov.Proposals(QueryProposalsRequest(pagination=page)),
            "proposals",
        )
        return [self._proposal_model(p) for p in raw]

    @staticmethod
    def _validator_model(validator: Any) -> Validator:
        return Validator(
            operator_address=validator.operator_address,
            moniker=validator.description.moniker,
            tokens=int(validator.tokens or 0),
            status=BondStatus(staking_pb2.BondStatus.Name(validator.status)),
            jailed=validator.jailed,
        )

    @staticmethod
    def _proposal_model(proposal: Any) -> Proposal:
        title = description = ""
        if proposal.content.type_url == _TEXT_PROPOSAL_TYPE:
            text = gov_pb2.TextProposal()
            proposal.content.Unpack(text)
            title, description = text.title, text.description

        return Proposal(
            proposal_id=proposal.proposal_id,
            status=gov_pb2.ProposalStatus.Name(proposal.status),
            content_type=proposal.content.type_url,
            title=title,
            description=description,
            submit_time=(
                proposal.submit_time.ToDatetime()
                if proposal.HasField("submit_time")
                else None
            ),
            voting_end_time=(
                proposal.voting_end_time.ToDatetime()
                if proposal.HasField("voting_end_time")
                else None
            ),
            total_deposit=[
                Coin(amount=c.amount, denom=c.denom) for c in proposal.total_deposit
            ],
        )


async def connect_signing(
    endpoint: str, key: KeyMaterial, settings: Settings
) -> CosmpySigningTransport:
    """Connect a signing transport and verify the node answers.

    Raises:
        ValueError: If the endpoint scheme is not supported.
        Exception: Whatever cosmpy raises when the node is unreachable.
    """
    config = network_config(endpoint, settings)
    client = await asyncio.to_thread(LedgerClient, config)
    height = await asyncio.to_thread(client.query_height)

    wallet = LocalWallet(PrivateKey(key.private_key), prefix=key.prefix)
    logger.debug(
        "Signing client ready | chain_id={} height={} url={}",
        config.chain_id,
        height,
        config.url,
    )
    return CosmpySigningTransport(client, wallet, config.chain_id)


async def connect_query(endpoint: str, settings: Settings) -> CosmpyQueryTransport:
    """Connect a read-only query transport with staking, gov and distribution."""
    parsed = parse_url(normalize_endpoint(endpoint))

    if parsed.protocol == Protocol.GRPC:
        if parsed.secure:
            channel = grpc.secure_channel(parsed.host_and_port, grpc.ssl_channel_credentials())
        else:
            channel = grpc.insecure_channel(parsed.host_and_port)
        transport = CosmpyQueryTransport(
            staking=StakingGrpcClient(channel),
            gov=GovGrpcClient(channel),
            distribution=DistributionGrpcClient(channel),
        )
    else:
        rest = RestClient(parsed.rest_url)
        transport = CosmpyQueryTransport(
            staking=StakingRestClient(rest),
            gov=GovRestClient(rest),
            distribution=DistributionRestClient(rest),
        )

    logger.debug("Query client ready | protocol={} host={}", parsed.protocol.name, parsed.hostname)
    return transport
