"""Slashing state machine: evidence, dispute, arbitration, ratification, finalisation.

A slash moves ``Pending -> (Disputed -> Arbitrated -> Ratified) | Finalized``.
Privileged transitions require the root origin; the economic effect is
delegated to an :class:`OperatorSlash` hook.
"""

from __future__ import annotations

import enum
from collections import Counter
from dataclasses import dataclass, replace
from typing import Dict, Hashable, List, Optional, Set, Tuple

from orogen.frame import DispatchError, Origin, System, ensure_root, ensure_signed
from orogen.weights import U64_MAX, DbWeight, Weight

MAX_PANEL_SIZE = 64
"""Upper bound on the number of recorded panel votes per slash."""

HASH_LENGTH = 32


class FaultCode(enum.IntEnum):
    """Fault categories; the integer value is the on-chain fault code."""

    WRONG_MODEL = 0
    WRONG_RESPONSE = 1
    LOG_PROB_DRIFT = 2
    CACHE_REPLAY = 3
    QUANTIZATION_SWAP = 4
    KERNEL_PACK_MISMATCH = 5
    DEVICE_CERT_COLLISION = 6
    HEARTBEAT_MISS = 7
    ATTESTATION_STALE = 8
    SANCTIONS_HIT = 9
    VALIDATOR_COLLUSION = 10
    FAKE_BURN = 11
    BATCH_OVERCOMMIT = 12

    def base_severity_bps(self) -> int:
        """Base severity of this fault in basis points of stake."""
        return _BASE_SEVERITY_BPS[self]


_BASE_SEVERITY_BPS: Dict[FaultCode, int] = {
    FaultCode.WRONG_MODEL: 1000,
    FaultCode.QUANTIZATION_SWAP: 1000,
    FaultCode.VALIDATOR_COLLUSION: 1000,
    FaultCode.BATCH_OVERCOMMIT: 1000,
    FaultCode.WRONG_RESPONSE: 500,
    FaultCode.CACHE_REPLAY: 500,
    FaultCode.LOG_PROB_DRIFT: 200,
    FaultCode.ATTESTATION_STALE: 200,
    FaultCode.KERNEL_PACK_MISMATCH: 50,
    FaultCode.DEVICE_CERT_COLLISION: 10_000,
    FaultCode.SANCTIONS_HIT: 10_000,
    FaultCode.FAKE_BURN: 5000,
    FaultCode.HEARTBEAT_MISS: 0,
}


class SlashState(enum.Enum):
    PENDING = "pending"
    DISPUTED = "disputed"
    ARBITRATED = "arbitrated"
    RATIFIED = "ratified"
    FINALIZED = "finalized"


class ArbitrationVote(enum.Enum):
    UPHOLD = "uphold"
    OVERTURN = "overturn"
    INSUFFICIENT = "insufficient"


class MultisigDecision(enum.Enum):
    UPHOLD = "uphold"
    OVERTURN = "overturn"


@dataclass
class SlashEvent:
    operator: Hashable
    fault_code: FaultCode
    severity_bps: int
    evidence_hash: bytes
    state: SlashState
    created_at: int


class OperatorSlash:
    """Economic hook applied to an operator's stake.

    The base implementation keeps an in-memory ledger of frozen operators and
    applied slashes; subclasses backed by real stake override these methods
    and raise :class:`DispatchError` on failure.
    """

    def __init__(self) -> None:
        self.frozen: Set[Hashable] = set()
        self.applied: List[Tuple[Hashable, int, FaultCode]] = []

    def freeze_pending(self, operator: Hashable) -> None:
        self.frozen.add(operator)

    def release_pending(self, operator: Hashable) -> None:
        self.frozen.discard(operator)

    def apply_slash(self, operator: Hashable, severity_bps: int, fault_code: FaultCode) -> None:
        self.applied.append((operator, severity_bps, FaultCode(fault_code)))
        self.frozen.discard(operator)


class NullOperatorSlash(OperatorSlash):
    """Hook that accepts every request without touching any stake; it only tallies calls."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: Counter = Counter()

    def freeze_pending(self, operator: Hashable) -> None:
        self.calls["freeze_pending"] += 1

    def release_pending(self, operator: Hashable) -> None:
        self.calls["release_pending"] += 1

    def apply_slash(self, operator: Hashable, severity_bps: int, fault_code: FaultCode) -> None:
        self.calls["apply_slash"] += 1


class SlashingError(DispatchError):
    """Base class for slashing errors."""


class UnknownSlash(SlashingError):
    pass


class BadState(SlashingError):
    pass


class PanelFull(SlashingError):
    pass


class NotSlashOperator(SlashingError):
    pass


class DisputeWindowOpen(SlashingError):
    pass


@dataclass(frozen=True)
class SlashSubmitted:
    slash_id: int
    operator: Hashable
    fault_code: FaultCode


@dataclass(frozen=True)
class SlashDisputed:
    slash_id: int


@dataclass(frozen=True)
class SlashArbitrated:
    slash_id: int
    vote: ArbitrationVote


@dataclass(frozen=True)
class SlashRatified:
    slash_id: int
    decision: MultisigDecision


@dataclass(frozen=True)
class SlashFinalized:
    slash_id: int


@dataclass(frozen=True)
class SlashingWeightInfo:
    """Call weights; database access costs are added when ``db`` is given."""

    db: Optional[DbWeight] = None

    def _with_db(self, base: Weight, reads: int, writes: int) -> Weight:
        if self.db is None:
            return base
        return base.saturating_add(self.db.reads(reads)).saturating_add(self.db.writes(writes))

    def submit_slashing_evidence(self) -> Weight:
        return self._with_db(Weight(40_000_000, 4096), 1, 2)

    def dispute_slashing(self) -> Weight:
        return self._with_db(Weight(30_000_000, 2048), 1, 1)

    def arbitrate_dispute(self) -> Weight:
        return self._with_db(Weight(30_000_000, 2048), 1, 1)

    def ratify_dispute(self) -> Weight:
        return self._with_db(Weight(30_000_000, 2048), 1, 1)

    def finalize_slash(self) -> Weight:
        return self._with_db(Weight(30_000_000, 2048), 1, 1)


class Slashing:
    """Slash registry driving each slash through its dispute state machine."""

    def __init__(
        self,
        system: System,
        operator_slash: Optional[OperatorSlash] = None,
        dispute_window: int = 0,
        weight_info: Optional[SlashingWeightInfo] = None,
    ) -> None:
        if dispute_window < 0:
            raise ValueError("dispute window cannot be negative")
        self.system = system
        self.operator_slash = operator_slash if operator_slash is not None else NullOperatorSlash()
        self.dispute_window = dispute_window
        self.weight_info = weight_info or SlashingWeightInfo()
        self.next_slash_id = 0
        self._slashes: Dict[int, SlashEvent] = {}

    def _get(self, slash_id: int) -> SlashEvent:
        event = self._slashes.get(slash_id)
        if event is None:
            raise UnknownSlash(slash_id)
        return event

    def submit_slashing_evidence(
        self, origin: Origin, operator: Hashable, fault_code: FaultCode, evidence_hash: bytes
    ) -> int:
        """Open a pending slash against ``operator`` and freeze its exposure."""
        ensure_root(origin)
        fault_code = FaultCode(fault_code)
        evidence_hash = bytes(evidence_hash)
        if len(evidence_hash) != HASH_LENGTH:
            raise ValueError(f"evidence hash must be {HASH_LENGTH} bytes")
        self.operator_slash.freeze_pending(operator)
        slash_id = self.next_slash_id
        self.next_slash_id = min(slash_id + 1, U64_MAX)
        self._slashes[slash_id] = SlashEvent(
            operator=operator,
            fault_code=fault_code,
            severity_bps=fault_code.base_severity_bps(),
            evidence_hash=evidence_hash,
            state=SlashState.PENDING,
            created_at=self.system.block_number,
        )
        self.system.deposit_event(SlashSubmitted(slash_id, operator, fault_code))
        return slash_id

    def dispute_slashing(self, origin: Origin, slash_id: int, counter_evidence_hash: bytes) -> None:
        """Dispute a pending slash; only the slashed operator may do so."""
        who = ensure_signed(origin)
        event = self._get(slash_id)
        if event.state is not SlashState.PENDING:
            raise BadState(event.state)
        if event.operator != who:
            raise NotSlashOperator(who)
        event.state = SlashState.DISPUTED
        self.system.deposit_event(SlashDisputed(slash_id))

    def arbitrate_dispute(self, origin: Origin, slash_id: int, vote: ArbitrationVote) -> None:
        """Record the panel's vote and move a disputed slash to arbitrated."""
        ensure_root(origin)
        event = self._get(slash_id)
        if event.state is not SlashState.DISPUTED:
            raise BadState(event.state)
        event.state = SlashState.ARBITRATED
        self.system.deposit_event(SlashArbitrated(slash_id, vote))

    def ratify_dispute(self, origin: Origin, slash_id: int, decision: MultisigDecision) -> None:
        """Ratify an arbitrated slash; an overturn finalises it and releases the freeze."""
        ensure_root(origin)
        event = self._get(slash_id)
        if event.state is not SlashState.ARBITRATED:
            raise BadState(event.state)
        if decision is MultisigDecision.OVERTURN:
            self.operator_slash.release_pending(event.operator)
            event.state = SlashState.FINALIZED
        else:
            event.state = SlashState.RATIFIED
        self.system.deposit_event(SlashRatified(slash_id, decision))

    def finalize_slash(self, origin: Origin, slash_id: int) -> None:
        """Apply a ratified slash, or a pending one whose dispute window has passed."""
        ensure_root(origin)
        event = self._get(slash_id)
        if event.state not in (SlashState.PENDING, SlashState.RATIFIED):
            raise BadState(event.state)
        if event.state is SlashState.PENDING:
            deadline = event.created_at + self.dispute_window
            if self.system.block_number < deadline:
                raise DisputeWindowOpen(deadline)
        self.operator_slash.apply_slash(event.operator, event.severity_bps, event.fault_code)
        event.state = SlashState.FINALIZED
        self.system.deposit_event(SlashFinalized(slash_id))

    def slash(self, slash_id: int) -> Optional[SlashEvent]:
        """Return a snapshot of the slash record, or None if unknown."""
        event = self._slashes.get(slash_id)
        return None if event is None else replace(event)