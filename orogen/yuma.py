"""Stake-weighted Yuma scoring of operators by a governed validator set.

In each epoch, permitted validators submit weight vectors that score
operators (0..=65535). When the epoch is computed, every score is clipped to
the median score for its operator and weighted by the validator's stake
snapshot. The result is a per-operator incentive share in basis points.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Set, Tuple

from orogen.frame import Origin, System, ensure_root, ensure_signed
from orogen.yuma_registry import (
    INCENTIVE_BPS,
    U16_MAX,
    U128_MAX,
    U32_MAX,
    EpochAlreadyComputed,
    EpochAlreadyStarted,
    UnauthorizedValidator,
    ValidatorInfo,
    ValidatorRegistry,
    WeightVectorTooLarge,
    YumaConfig,
)
from orogen.yuma_weights import YumaWeightInfo


@dataclass(frozen=True)
class WeightSubmission:
    """A validator's score vector for an epoch together with its stake snapshot."""

    stake_weight: int
    vector: Tuple[Tuple[Hashable, int], ...]


@dataclass(frozen=True)
class ValidatorAdded:
    validator: Hashable
    stake_weight: int
    entity_id: int


@dataclass(frozen=True)
class ValidatorRemoved:
    validator: Hashable


@dataclass(frozen=True)
class WeightsSubmitted:
    validator: Hashable
    epoch: int
    vector_len: int


@dataclass(frozen=True)
class EpochComputed:
    epoch: int
    operator_count: int


@dataclass(frozen=True)
class ValidatorStakeUpdated:
    validator: Hashable
    stake_weight: int
    entity_id: int


@dataclass(frozen=True)
class PermitsRotated:
    permitted_count: int


def operator_medians(
    submissions: Iterable[WeightSubmission], encode: Callable[[Hashable], bytes]
) -> List[Tuple[bytes, int]]:
    """Lower median score per operator, as (encoded operator, score) sorted by key."""
    scores = sorted(
        (encode(op), score) for submission in submissions for op, score in submission.vector
    )
    medians: List[Tuple[bytes, int]] = []
    start = 0
    while start < len(scores):
        key = scores[start][0]
        end = start + 1
        while end < len(scores) and scores[end][0] == key:
            end += 1
        medians.append((key, scores[start + (end - start - 1) // 2][1]))
        start = end
    return medians


def _median_score(medians: Sequence[Tuple[bytes, int]], key: bytes) -> int:
    keys = [candidate for candidate, _ in medians]
    index = bisect.bisect_left(keys, key)
    if index < len(keys) and keys[index] == key:
        return medians[index][1]
    return 0


class YumaConsensus:
    """Validator membership, epoch permits, weight submissions and incentive computation."""

    def __init__(
        self,
        system: System,
        config: Optional[YumaConfig] = None,
        weight_info: Optional[YumaWeightInfo] = None,
    ) -> None:
        self.system = system
        self.config = config or YumaConfig()
        self.weight_info = weight_info or YumaWeightInfo()
        self.validators = ValidatorRegistry(self.config)
        self.permitted: Set[Hashable] = set()
        self.permit_count = 0
        self.computed: Set[int] = set()
        self._weights: Dict[int, Dict[Hashable, WeightSubmission]] = {}
        self._epoch_permits: Dict[int, Dict[Hashable, ValidatorInfo]] = {}
        self._epoch_permit_counts: Dict[int, int] = {}
        self._incentives: Dict[int, Dict[Hashable, int]] = {}
        self._score_totals: Dict[int, Dict[Hashable, int]] = {}

    def submit_weights(
        self, origin: Origin, epoch: int, vector: Iterable[Tuple[Hashable, int]]
    ) -> None:
        """Record the caller's score vector for ``epoch``, replacing any earlier one."""
        who = ensure_signed(origin)
        info = self._epoch_permits.get(epoch, {}).get(who)
        if info is None:
            raise UnauthorizedValidator(who)
        if epoch in self.computed:
            raise EpochAlreadyComputed(epoch)
        entries = tuple((op, score) for op, score in vector)
        if len(entries) > self.config.max_weight_vector_len:
            raise WeightVectorTooLarge(len(entries))
        for _, score in entries:
            if not 0 <= score <= U16_MAX:
                raise ValueError("scores must fit in an unsigned 16-bit integer")
        self._weights.setdefault(epoch, {})[who] = WeightSubmission(info.stake_weight, entries)
        self.system.deposit_event(WeightsSubmitted(who, epoch, len(entries)))

    def compute_epoch_incentives(self, origin: Origin, epoch: int) -> int:
        """Aggregate the epoch's submissions into incentive shares; return the operator count."""
        ensure_root(origin)
        if epoch in self.computed:
            raise EpochAlreadyComputed(epoch)
        self.computed.add(epoch)
        submissions = list(self._weights.get(epoch, {}).values())[: self.config.max_validators]
        encode = self.config.encode
        medians = operator_medians(submissions, encode)
        totals = self._score_totals.setdefault(epoch, {})
        total_weighted = 0
        for submission in submissions:
            for op, score in submission.vector:
                clipped = min(score, _median_score(medians, encode(op)))
                weighted = min(submission.stake_weight * clipped, U128_MAX)
                if weighted == 0:
                    continue
                totals[op] = min(totals.get(op, 0) + weighted, U128_MAX)
                total_weighted = min(total_weighted + weighted, U128_MAX)
        operator_count = 0
        if total_weighted:
            incentives = self._incentives.setdefault(epoch, {})
            for op, weighted_score in totals.items():
                share = min(weighted_score * INCENTIVE_BPS, U128_MAX) // total_weighted
                incentives[op] = min(share, U32_MAX)
                operator_count += 1
        self.system.deposit_event(EpochComputed(epoch, operator_count))
        return operator_count

    def add_validator(
        self, origin: Origin, validator: Hashable, stake_weight: int, entity_id: int
    ) -> None:
        ensure_root(origin)
        self.validators.add(validator, stake_weight, entity_id)
        self.system.deposit_event(ValidatorAdded(validator, stake_weight, entity_id))

    def remove_validator(self, origin: Origin, validator: Hashable) -> None:
        ensure_root(origin)
        self.validators.remove(validator)
        if validator in self.permitted:
            self.permitted.discard(validator)
            self.permit_count = max(self.permit_count - 1, 0)
        self.system.deposit_event(ValidatorRemoved(validator))

    def update_validator_stake(
        self, origin: Origin, validator: Hashable, stake_weight: int, entity_id: int
    ) -> None:
        ensure_root(origin)
        self.validators.update_stake(validator, stake_weight, entity_id)
        self.system.deposit_event(ValidatorStakeUpdated(validator, stake_weight, entity_id))

    def rotate_permits(self, origin: Origin, epoch: int) -> int:
        """Grant submission permits for ``epoch`` to the top-staked validators."""
        ensure_root(origin)
        if epoch in self.computed:
            raise EpochAlreadyComputed(epoch)
        if self._weights.get(epoch):
            raise EpochAlreadyStarted(epoch)
        ranked = self.validators.ranked()
        limit = min(self.config.max_permitted_validators, self.config.max_validators)
        chosen = ranked[:limit]
        self.permitted = {account for account, _ in chosen}
        self._epoch_permits[epoch] = dict(chosen)
        self.permit_count = len(chosen)
        self._epoch_permit_counts[epoch] = len(chosen)
        self.system.deposit_event(PermitsRotated(len(chosen)))
        return len(chosen)

    def contains(self, account: Hashable) -> bool:
        """Whether ``account`` currently holds a submission permit."""
        return account in self.permitted

    def epoch_permit_count(self, epoch: int) -> int:
        return self._epoch_permit_counts.get(epoch, 0)

    def submission(self, epoch: int, validator: Hashable) -> Optional[WeightSubmission]:
        return self._weights.get(epoch, {}).get(validator)

    def epoch_incentive(self, epoch: int, operator: Hashable) -> int:
        return self._incentives.get(epoch, {}).get(operator, 0)

    def epoch_score_total(self, epoch: int, operator: Hashable) -> int:
        return self._score_totals.get(epoch, {}).get(operator, 0)