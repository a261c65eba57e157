"""Foundation spend proposals approved by a threshold of council members.

The ledger only records proposals and their approvals; moving funds is left
to whatever acts on the ``Executed`` signal.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable, Container, Dict, Hashable, List, Optional, Union

from orogen.frame import DispatchError, Origin, System, ensure_signed
from orogen.weights import U64_MAX, DbWeight, Weight

MAX_COUNCIL = 32
"""Maximum number of approvals a single proposal can hold."""


class ProposalState(enum.Enum):
    PENDING = "pending"
    EXECUTED = "executed"
    REJECTED = "rejected"


@dataclass
class Proposal:
    proposer: Hashable
    beneficiary: Hashable
    amount: int
    state: ProposalState
    created_at: int
    approvals: List[Hashable] = field(default_factory=list)


class TreasuryError(DispatchError):
    """Base class for treasury errors."""


class UnknownProposal(TreasuryError):
    pass


class BadState(TreasuryError):
    pass


class BelowThreshold(TreasuryError):
    pass


class NotCouncilMember(TreasuryError):
    pass


class AlreadyApproved(TreasuryError):
    pass


class TooManyApprovals(TreasuryError):
    pass


class ThresholdNotSet(TreasuryError):
    pass


@dataclass(frozen=True)
class Proposed:
    proposal_id: int
    proposer: Hashable
    beneficiary: Hashable
    amount: int


@dataclass(frozen=True)
class Approved:
    proposal_id: int
    approver: Hashable
    approvals: int


@dataclass(frozen=True)
class Executed:
    proposal_id: int


@dataclass(frozen=True)
class TreasuryWeightInfo:
    """Call weights; database access costs are added when ``db`` is given."""

    db: Optional[DbWeight] = None

    def _with_db(self, base: Weight, reads: int, writes: int) -> Weight:
        if self.db is None:
            return base
        return base.saturating_add(self.db.reads(reads)).saturating_add(self.db.writes(writes))

    def propose_spend(self) -> Weight:
        return self._with_db(Weight(40_000_000, 4096), 1, 2)

    def execute_spend(self) -> Weight:
        return self._with_db(Weight(40_000_000, 4096), 2, 1)


Council = Union[Container[Hashable], Callable[[Hashable], bool]]


class Treasury:
    """Proposal log gated on council membership and an approval threshold."""

    def __init__(
        self,
        system: System,
        council: Council = frozenset(),
        threshold: int = 0,
        weight_info: Optional[TreasuryWeightInfo] = None,
    ) -> None:
        self.system = system
        self.council = council
        self.threshold = threshold
        self.weight_info = weight_info or TreasuryWeightInfo()
        self.next_proposal_id = 0
        self._proposals: Dict[int, Proposal] = {}

    def _is_member(self, who: Hashable) -> bool:
        if callable(self.council):
            return bool(self.council(who))
        return who in self.council

    def _ensure_member(self, origin: Origin) -> Hashable:
        who = ensure_signed(origin)
        if not self._is_member(who):
            raise NotCouncilMember(who)
        return who

    def propose_spend(self, origin: Origin, beneficiary: Hashable, amount: int) -> int:
        """Record a pending spend proposal and return its id."""
        who = self._ensure_member(origin)
        proposal_id = self.next_proposal_id
        self.next_proposal_id = min(proposal_id + 1, U64_MAX)
        self._proposals[proposal_id] = Proposal(
            proposer=who,
            beneficiary=beneficiary,
            amount=amount,
            state=ProposalState.PENDING,
            created_at=self.system.block_number,
        )
        self.system.deposit_event(Proposed(proposal_id, who, beneficiary, amount))
        return proposal_id

    def execute_spend(self, origin: Origin, proposal_id: int) -> None:
        """Add the caller's approval; mark the proposal executed at the threshold."""
        who = self._ensure_member(origin)
        if self.threshold <= 0:
            raise ThresholdNotSet()
        proposal = self._proposals.get(proposal_id)
        if proposal is None:
            raise UnknownProposal(proposal_id)
        if proposal.state is not ProposalState.PENDING:
            raise BadState(proposal.state)
        if who in proposal.approvals:
            raise AlreadyApproved(who)
        if len(proposal.approvals) >= MAX_COUNCIL:
            raise TooManyApprovals(proposal_id)
        proposal.approvals.append(who)
        count = len(proposal.approvals)
        self.system.deposit_event(Approved(proposal_id, who, count))
        if count >= self.threshold:
            proposal.state = ProposalState.EXECUTED
            self.system.deposit_event(Executed(proposal_id))

    def proposal(self, proposal_id: int) -> Optional[Proposal]:
        return self._proposals.get(proposal_id)