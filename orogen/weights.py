"""Two-dimensional dispatch weights and database access costs."""

from __future__ import annotations

from dataclasses import dataclass

U64_MAX = 2**64 - 1


def _sat_add(a: int, b: int) -> int:
    return min(a + b, U64_MAX)


def _sat_mul(a: int, b: int) -> int:
    return min(a * b, U64_MAX)


@dataclass(frozen=True)
class Weight:
    """Execution cost: reference time and proof size, each a saturating u64."""

    ref_time: int = 0
    proof_size: int = 0

    def __post_init__(self) -> None:
        for value in (self.ref_time, self.proof_size):
            if not 0 <= value <= U64_MAX:
                raise ValueError("weight components must fit in an unsigned 64-bit integer")

    def saturating_add(self, other: "Weight") -> "Weight":
        return Weight(
            _sat_add(self.ref_time, other.ref_time),
            _sat_add(self.proof_size, other.proof_size),
        )


@dataclass(frozen=True)
class DbWeight:
    """Reference-time cost of a single storage read and write."""

    read: int = 0
    write: int = 0

    def reads(self, count: int) -> Weight:
        return Weight(_sat_mul(self.read, count), 0)

    def writes(self, count: int) -> Weight:
        return Weight(_sat_mul(self.write, count), 0)

    def reads_writes(self, reads: int, writes: int) -> Weight:
        return Weight(_sat_add(_sat_mul(self.read, reads), _sat_mul(self.write, writes)), 0)