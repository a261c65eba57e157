"""Runtime primitives shared by the pallets: origins, dispatch errors and system state."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Hashable, List, Optional


class DispatchError(Exception):
    """Base class for every error a dispatchable call can raise."""


class BadOrigin(DispatchError):
    """The call was made from an origin it does not accept."""


class _OriginKind(enum.Enum):
    ROOT = "root"
    SIGNED = "signed"


@dataclass(frozen=True)
class Origin:
    """Who is dispatching a call: the root authority or a signed account."""

    kind: _OriginKind
    account: Optional[Hashable] = None

    @classmethod
    def root(cls) -> "Origin":
        return cls(_OriginKind.ROOT)

    @classmethod
    def signed(cls, account: Hashable) -> "Origin":
        return cls(_OriginKind.SIGNED, account)

    @property
    def is_root(self) -> bool:
        return self.kind is _OriginKind.ROOT

    @property
    def is_signed(self) -> bool:
        return self.kind is _OriginKind.SIGNED


def ensure_signed(origin: Origin) -> Hashable:
    """Return the signing account, or raise BadOrigin for any other origin."""
    if not origin.is_signed:
        raise BadOrigin("expected a signed origin")
    return origin.account


def ensure_root(origin: Origin) -> None:
    """Raise BadOrigin unless the origin is root."""
    if not origin.is_root:
        raise BadOrigin("expected the root origin")


@dataclass
class System:
    """Chain-level state: the current block number and the event log."""

    block_number: int = 0
    events: List[Any] = field(default_factory=list)

    def set_block_number(self, number: int) -> None:
        if number < 0:
            raise ValueError("block number cannot be negative")
        self.block_number = number

    def deposit_event(self, event: Any) -> None:
        self.events.append(event)