"""Governed validator membership with stake weights and entity concentration caps."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Iterator, List, Optional, Tuple

from orogen.frame import DispatchError

INCENTIVE_BPS = 10_000
U128_MAX = 2**128 - 1
U64_MAX = 2**64 - 1
U32_MAX = 2**32 - 1
U16_MAX = 2**16 - 1


def _sat_add(a: int, b: int) -> int:
    return min(a + b, U128_MAX)


def _sat_sub(a: int, b: int) -> int:
    return max(a - b, 0)


def _sat_mul(a: int, b: int) -> int:
    return min(a * b, U128_MAX)


def _encode_account(account: Hashable) -> bytes:
    """Canonical byte encoding of an account id, used for deterministic ordering."""
    if isinstance(account, bool):
        raise TypeError("account id cannot be a bool")
    if isinstance(account, int):
        if not 0 <= account <= U64_MAX:
            raise ValueError("integer account ids must fit in an unsigned 64-bit integer")
        return account.to_bytes(8, "little")
    if isinstance(account, (bytes, bytearray)):
        return bytes(account)
    if isinstance(account, str):
        return account.encode("utf-8")
    raise TypeError(f"cannot encode account id of type {type(account).__name__}")


@dataclass(frozen=True)
class YumaConfig:
    """Bounds of the Yuma validator set and scoring."""

    max_validators: int = 64
    max_permitted_validators: int = 64
    max_weight_vector_len: int = 256
    max_entity_stake_bps: int = 2_000
    encode: Callable[[Hashable], bytes] = _encode_account

    def __post_init__(self) -> None:
        for name in ("max_validators", "max_permitted_validators", "max_weight_vector_len"):
            if not 0 <= getattr(self, name) <= U32_MAX:
                raise ValueError(f"{name} must fit in an unsigned 32-bit integer")
        if not 0 <= self.max_entity_stake_bps <= U16_MAX:
            raise ValueError("max_entity_stake_bps must fit in an unsigned 16-bit integer")


@dataclass(frozen=True)
class ValidatorInfo:
    stake_weight: int
    entity_id: int


class YumaError(DispatchError):
    """Base class for Yuma consensus errors."""


class WeightVectorTooLarge(YumaError):
    pass


class EpochAlreadyComputed(YumaError):
    pass


class UnauthorizedValidator(YumaError):
    pass


class ValidatorAlreadyExists(YumaError):
    pass


class ValidatorNotFound(YumaError):
    pass


class TooManyValidators(YumaError):
    pass


class InvalidValidatorStake(YumaError):
    pass


class EntityStakeCapExceeded(YumaError):
    pass


class EpochAlreadyStarted(YumaError):
    pass


class ValidatorRegistry:
    """Active validator set with total and per-entity stake bookkeeping."""

    def __init__(self, config: Optional[YumaConfig] = None) -> None:
        self.config = config or YumaConfig()
        self.total_stake = 0
        self.entity_count = 0
        self.entity_stakes: Dict[int, int] = {}
        self._validators: Dict[Hashable, ValidatorInfo] = {}

    def __len__(self) -> int:
        return len(self._validators)

    def __contains__(self, validator: object) -> bool:
        return validator in self._validators

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._validators)

    def get(self, validator: Hashable) -> Optional[ValidatorInfo]:
        return self._validators.get(validator)

    def min_entities_for_cap(self) -> int:
        """Number of active entities below which the concentration cap is not enforced."""
        cap = max(self.config.max_entity_stake_bps, 1)
        return (INCENTIVE_BPS + cap - 1) // cap

    def add(self, validator: Hashable, stake_weight: int, entity_id: int) -> ValidatorInfo:
        """Admit a validator with a governed stake weight and entity id."""
        if stake_weight <= 0:
            raise InvalidValidatorStake(stake_weight)
        if validator in self._validators:
            raise ValidatorAlreadyExists(validator)
        if len(self._validators) + 1 > self.config.max_validators:
            raise TooManyValidators(validator)
        new_entity = self.entity_stakes.get(entity_id, 0) == 0
        active_entities = self.entity_count + int(new_entity)
        self._ensure_entity_caps(entity_id, None, 0, stake_weight, active_entities)
        info = ValidatorInfo(stake_weight, entity_id)
        self._validators[validator] = info
        self.total_stake = _sat_add(self.total_stake, stake_weight)
        self._add_entity_stake(entity_id, stake_weight)
        return info

    def remove(self, validator: Hashable) -> ValidatorInfo:
        """Remove a validator and return the record it had."""
        info = self._validators.pop(validator, None)
        if info is None:
            raise ValidatorNotFound(validator)
        self.total_stake = _sat_sub(self.total_stake, info.stake_weight)
        self._sub_entity_stake(info.entity_id, info.stake_weight)
        return info

    def update_stake(self, validator: Hashable, stake_weight: int, entity_id: int) -> ValidatorInfo:
        """Change a validator's stake weight and entity, respecting the entity cap."""
        if stake_weight <= 0:
            raise InvalidValidatorStake(stake_weight)
        old = self._validators.get(validator)
        if old is None:
            raise ValidatorNotFound(validator)
        active_entities = self._active_entities_after_update(
            old.entity_id, entity_id, old.stake_weight, stake_weight
        )
        self._ensure_entity_caps(
            entity_id, old.entity_id, old.stake_weight, stake_weight, active_entities
        )
        info = ValidatorInfo(stake_weight, entity_id)
        self._validators[validator] = info
        self.total_stake = _sat_add(_sat_sub(self.total_stake, old.stake_weight), stake_weight)
        self._sub_entity_stake(old.entity_id, old.stake_weight)
        self._add_entity_stake(entity_id, stake_weight)
        return info

    def ranked(self) -> List[Tuple[Hashable, ValidatorInfo]]:
        """Validators by descending stake, ties broken by ascending encoded account id."""
        encode = self.config.encode
        return sorted(
            self._validators.items(),
            key=lambda item: (-item[1].stake_weight, encode(item[0])),
        )

    def _ensure_entity_caps(
        self,
        entity_id: int,
        old_entity_id: Optional[int],
        old_stake: int,
        new_stake: int,
        active_entities_after: int,
    ) -> None:
        if active_entities_after < self.min_entities_for_cap():
            return
        total = _sat_add(_sat_sub(self.total_stake, old_stake), new_stake)
        if total == 0:
            return
        limit = _sat_mul(total, self.config.max_entity_stake_bps)
        for entity, stake in self.entity_stakes.items():
            if entity == old_entity_id:
                stake = _sat_sub(stake, old_stake)
            if entity == entity_id:
                stake = _sat_add(stake, new_stake)
            if _sat_mul(stake, INCENTIVE_BPS) > limit:
                raise EntityStakeCapExceeded(entity)
        if self.entity_stakes.get(entity_id, 0) == 0:
            if _sat_mul(new_stake, INCENTIVE_BPS) > limit:
                raise EntityStakeCapExceeded(entity_id)

    def _add_entity_stake(self, entity_id: int, amount: int) -> None:
        current = self.entity_stakes.get(entity_id, 0)
        updated = _sat_add(current, amount)
        if updated:
            self.entity_stakes[entity_id] = updated
        if current == 0 and amount != 0:
            self.entity_count = min(self.entity_count + 1, U32_MAX)

    def _sub_entity_stake(self, entity_id: int, amount: int) -> None:
        remaining = _sat_sub(self.entity_stakes.get(entity_id, 0), amount)
        if remaining:
            self.entity_stakes[entity_id] = remaining
        else:
            self.entity_stakes.pop(entity_id, None)
            self.entity_count = max(self.entity_count - 1, 0)

    def _active_entities_after_update(
        self, old_entity_id: int, new_entity_id: int, old_stake: int, new_stake: int
    ) -> int:
        count = self.entity_count
        if old_entity_id != new_entity_id:
            if self.entity_stakes.get(new_entity_id, 0) == 0 and new_stake != 0:
                count = min(count + 1, U32_MAX)
            if self.entity_stakes.get(old_entity_id, 0) <= old_stake:
                count = max(count - 1, 0)
        return count