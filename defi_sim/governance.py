"""Token-weighted governance voting.

Holders of the governance token open proposals, vote for or against them
during a fixed voting window, and queue the ones that pass. A proposal
passes when the total vote reaches the quorum and votes for outnumber votes
against; a queued proposal becomes executable ``execution_delay`` seconds
later. Executing it is outside this module.

Token balances are not tracked here: callers pass the holder's current
balance with each operation, along with an explicit unix timestamp. Voting
power is that balance plus any power delegated to the holder, minus any power
the holder has delegated away. Vote totals are checked u64 math.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

import structlog

from defi_sim.amm.errors import InvalidInput
from defi_sim.safe_int import S

logger = structlog.get_logger()


class ProposalType(str, Enum):
    PARAMETER_CHANGE = "parameter_change"
    TREASURY_SPEND = "treasury_spend"
    UPGRADE_CONTRACT = "upgrade_contract"
    ADD_FARM = "add_farm"


class ProposalStatus(str, Enum):
    ACTIVE = "active"
    QUEUED = "queued"


class VoteType(str, Enum):
    FOR = "for"
    AGAINST = "against"


class GovernanceError(Exception):
    """Base error for governance operations."""

    pass


class ProposalNotFound(GovernanceError):
    def __init__(self, proposal_id: int) -> None:
        super().__init__(f"Proposal {proposal_id} not found")
        self.proposal_id = proposal_id


class InsufficientTokens(GovernanceError):
    """Balance below the proposal threshold or the amount being delegated."""

    pass


class InsufficientVotingPower(GovernanceError):
    pass


class ProposalNotActive(GovernanceError):
    pass


class VotingPeriodEnded(GovernanceError):
    pass


class VotingPeriodNotEnded(GovernanceError):
    pass


class AlreadyVoted(GovernanceError):
    pass


class QuorumNotMet(GovernanceError):
    pass


class ProposalFailed(GovernanceError):
    """Quorum reached, but votes against are at least votes for."""

    pass


@dataclass
class Proposal:
    id: int
    proposer: str
    title: str
    description: str
    proposal_type: ProposalType
    created_at: int
    voting_ends_at: int
    votes_for: int = 0
    votes_against: int = 0
    status: ProposalStatus = ProposalStatus.ACTIVE
    # Set when queued
    execution_eta: int = 0

    @property
    def total_votes(self) -> int:
        return self.votes_for + self.votes_against


@dataclass(frozen=True)
class VoteRecord:
    voter: str
    proposal_id: int
    vote: VoteType
    voting_power: int


@dataclass(frozen=True)
class Delegation:
    delegator: str
    delegate: str
    amount: int
    created_at: int


class Governance:
    """In-memory governance for one governance token.

    Args:
        voting_period: Seconds a proposal stays open for voting
        execution_delay: Seconds between queueing and the execution ETA
        proposal_threshold: Token balance needed to open a proposal
        quorum_threshold: Total votes (for + against) a proposal needs to pass
    """

    def __init__(
        self,
        voting_period: int,
        execution_delay: int,
        proposal_threshold: int,
        quorum_threshold: int,
    ) -> None:
        if voting_period <= 0:
            raise InvalidInput(f"voting_period must be positive, got {voting_period}")
        if execution_delay < 0:
            raise InvalidInput(f"execution_delay must be non-negative, got {execution_delay}")
        if proposal_threshold < 0 or quorum_threshold < 0:
            raise InvalidInput("proposal and quorum thresholds must be non-negative")
        self.voting_period = voting_period
        self.execution_delay = execution_delay
        self.proposal_threshold = proposal_threshold
        self.quorum_threshold = quorum_threshold
        self._proposals: list[Proposal] = []
        self._votes: dict[tuple[int, str], VoteRecord] = {}
        self._delegations: dict[str, Delegation] = {}

    @property
    def proposal_count(self) -> int:
        return len(self._proposals)

    def _get(self, proposal_id: int) -> Proposal:
        if not 0 <= proposal_id < len(self._proposals):
            raise ProposalNotFound(proposal_id)
        return self._proposals[proposal_id]

    def get_proposal(self, proposal_id: int) -> Proposal:
        """Copy of a proposal.

        Raises:
            ProposalNotFound: If no proposal has this id
        """
        return replace(self._get(proposal_id))

    def list_proposals(self, status: ProposalStatus | None = None) -> list[Proposal]:
        return [
            replace(proposal)
            for proposal in self._proposals
            if status is None or proposal.status == status
        ]

    def get_vote(self, proposal_id: int, voter: str) -> VoteRecord | None:
        return self._votes.get((proposal_id, voter))

    def get_delegation(self, delegator: str) -> Delegation | None:
        return self._delegations.get(delegator)

    def voting_power(self, holder: str, token_balance: int) -> int:
        """Own balance, less power delegated away, plus power delegated in."""
        delegated_in = sum(
            d.amount for d in self._delegations.values() if d.delegate == holder
        )
        own = self._delegations.get(holder)
        delegated_out = own.amount if own else 0
        # Balance may have dropped below the delegated amount since delegating
        remaining = max(token_balance - delegated_out, 0)
        return (S(remaining) + S(delegated_in)).to_u64()

    def create_proposal(
        self,
        proposer: str,
        title: str,
        description: str,
        proposal_type: ProposalType,
        token_balance: int,
        now: int,
    ) -> Proposal:
        """Open a proposal for voting until ``now + voting_period``.

        Raises:
            InvalidInput: If the title is empty
            InsufficientTokens: If token_balance is below the proposal threshold
        """
        if not title.strip():
            raise InvalidInput("proposal title must not be empty")
        if token_balance < self.proposal_threshold:
            raise InsufficientTokens(
                f"{proposer} holds {token_balance}, "
                f"{self.proposal_threshold} needed to create a proposal"
            )

        proposal = Proposal(
            id=len(self._proposals),
            proposer=proposer,
            title=title,
            description=description,
            proposal_type=ProposalType(proposal_type),
            created_at=now,
            voting_ends_at=now + self.voting_period,
        )
        self._proposals.append(proposal)

        logger.info(
            "proposal_created",
            proposal_id=proposal.id,
            proposer=proposer,
            proposal_type=proposal.proposal_type.value,
        )
        return replace(proposal)

    def cast_vote(
        self,
        proposal_id: int,
        voter: str,
        vote: VoteType,
        voting_power: int,
        token_balance: int,
        now: int,
    ) -> VoteRecord:
        """Record a single vote of ``voting_power`` on an active proposal.

        Raises:
            ProposalNotFound: If no proposal has this id
            InvalidInput: If voting_power is not positive
            ProposalNotActive: If the proposal is no longer active
            VotingPeriodEnded: If now is past the voting window
            InsufficientVotingPower: If voting_power exceeds the voter's power
            AlreadyVoted: If the voter has already voted on this proposal
        """
        proposal = self._get(proposal_id)
        if voting_power <= 0:
            raise InvalidInput(f"voting_power must be positive, got {voting_power}")
        if proposal.status != ProposalStatus.ACTIVE:
            raise ProposalNotActive(f"Proposal {proposal_id} is {proposal.status.value}")
        if now > proposal.voting_ends_at:
            raise VotingPeriodEnded(
                f"Voting on proposal {proposal_id} ended at {proposal.voting_ends_at}"
            )
        available = self.voting_power(voter, token_balance)
        if voting_power > available:
            raise InsufficientVotingPower(
                f"{voter} has {available} voting power, cannot cast {voting_power}"
            )
        if (proposal_id, voter) in self._votes:
            raise AlreadyVoted(f"{voter} already voted on proposal {proposal_id}")

        vote = VoteType(vote)
        if vote == VoteType.FOR:
            proposal.votes_for = (S(proposal.votes_for) + S(voting_power)).to_u64()
        else:
            proposal.votes_against = (S(proposal.votes_against) + S(voting_power)).to_u64()
        record = VoteRecord(
            voter=voter, proposal_id=proposal_id, vote=vote, voting_power=voting_power
        )
        self._votes[(proposal_id, voter)] = record

        logger.info(
            "vote_cast",
            proposal_id=proposal_id,
            voter=voter,
            vote=vote.value,
            voting_power=voting_power,
        )
        return record

    def queue_proposal(self, proposal_id: int, now: int) -> Proposal:
        """Queue a passed proposal once voting has ended.

        Raises:
            ProposalNotFound: If no proposal has this id
            ProposalNotActive: If the proposal is not active
            VotingPeriodNotEnded: If now is still within the voting window
            QuorumNotMet: If total votes are below the quorum
            ProposalFailed: If votes for do not exceed votes against
        """
        proposal = self._get(proposal_id)
        if proposal.status != ProposalStatus.ACTIVE:
            raise ProposalNotActive(f"Proposal {proposal_id} is {proposal.status.value}")
        if now <= proposal.voting_ends_at:
            raise VotingPeriodNotEnded(
                f"Voting on proposal {proposal_id} runs until {proposal.voting_ends_at}"
            )
        if proposal.total_votes < self.quorum_threshold:
            raise QuorumNotMet(
                f"Proposal {proposal_id} has {proposal.total_votes} votes, "
                f"quorum is {self.quorum_threshold}"
            )
        if proposal.votes_for <= proposal.votes_against:
            raise ProposalFailed(
                f"Proposal {proposal_id} failed: "
                f"{proposal.votes_for} for, {proposal.votes_against} against"
            )

        proposal.status = ProposalStatus.QUEUED
        proposal.execution_eta = now + self.execution_delay

        logger.info(
            "proposal_queued",
            proposal_id=proposal_id,
            execution_eta=proposal.execution_eta,
        )
        return replace(proposal)

    def delegate_voting_power(
        self,
        delegator: str,
        delegate: str,
        amount: int,
        token_balance: int,
        now: int,
    ) -> Delegation:
        """Delegate ``amount`` of the delegator's tokens to another holder.

        A delegator has at most one delegation; delegating again replaces it.

        Raises:
            InvalidInput: If amount is not positive or delegate is the delegator
            InsufficientTokens: If amount exceeds token_balance
        """
        if amount <= 0:
            raise InvalidInput(f"delegation amount must be positive, got {amount}")
        if delegate == delegator:
            raise InvalidInput("cannot delegate voting power to yourself")
        if token_balance < amount:
            raise InsufficientTokens(
                f"{delegator} holds {token_balance}, cannot delegate {amount}"
            )

        delegation = Delegation(
            delegator=delegator, delegate=delegate, amount=amount, created_at=now
        )
        self._delegations[delegator] = delegation

        logger.info(
            "voting_power_delegated",
            delegator=delegator,
            delegate=delegate,
            amount=amount,
        )
        return delegation


__all__ = [
    "Governance",
    "Proposal",
    "ProposalType",
    "ProposalStatus",
    "VoteType",
    "VoteRecord",
    "Delegation",
    "GovernanceError",
    "ProposalNotFound",
    "InsufficientTokens",
    "InsufficientVotingPower",
    "ProposalNotActive",
    "VotingPeriodEnded",
    "VotingPeriodNotEnded",
    "AlreadyVoted",
    "QuorumNotMet",
    "ProposalFailed",
]
