"""Call weights for the Yuma consensus calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from orogen.weights import U64_MAX, DbWeight, Weight

U32_MAX = 2**32 - 1


def _add(*values: int) -> int:
    return min(sum(values), U64_MAX)


def _mul(a: int, b: int) -> int:
    return min(a * b, U64_MAX)


def _check_u32(name: str, value: int) -> int:
    if not 0 <= value <= U32_MAX:
        raise ValueError(f"{name} must fit in an unsigned 32-bit integer")
    return value


@dataclass(frozen=True)
class YumaWeightInfo:
    """Call weights; database access costs are added when ``db`` is given."""

    db: Optional[DbWeight] = None

    def _with_db(self, base: Weight, reads: int, writes: int) -> Weight:
        if self.db is None:
            return base
        return base.saturating_add(self.db.reads(reads)).saturating_add(self.db.writes(writes))

    def submit_weights(self) -> Weight:
        return self._with_db(Weight(80_000_000, 16_384), 3, 1)

    def compute_epoch_incentives(self, max_validators: int, max_vector_len: int) -> Weight:
        _check_u32("max_validators", max_validators)
        _check_u32("max_vector_len", max_vector_len)
        inner_ops = _mul(max_validators, max_vector_len)
        base = Weight(_add(500_000_000, _mul(inner_ops, 200_000)), 65_536)
        # Computed flag, bounded submissions, one read-modify-write per score,
        # then a second pass writing incentives.
        reads = _add(1, max_validators, inner_ops, inner_ops)
        writes = _add(1, inner_ops, inner_ops)
        return self._with_db(base, reads, writes)

    def add_validator(self, max_validators: int) -> Weight:
        _check_u32("max_validators", max_validators)
        base = Weight(_add(50_000_000, _mul(max_validators, 25_000)), 4096)
        return self._with_db(base, _add(12, max_validators), 6)

    def remove_validator(self) -> Weight:
        return self._with_db(Weight(50_000_000, 4096), 8, 7)

    def update_validator_stake(self, max_validators: int) -> Weight:
        _check_u32("max_validators", max_validators)
        base = Weight(_add(60_000_000, _mul(max_validators, 25_000)), 4096)
        return self._with_db(base, _add(16, max_validators), 8)

    def rotate_permits(self, max_validators: int) -> Weight:
        _check_u32("max_validators", max_validators)
        base = Weight(_add(80_000_000, _mul(max_validators, 75_000)), 8192)
        reads = _add(_mul(max_validators, 3), 2)
        writes = _add(_mul(max_validators, 4), 2)
        return self._with_db(base, reads, writes)