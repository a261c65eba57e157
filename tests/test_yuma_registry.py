import pytest

from orogen.yuma_registry import (
    EntityStakeCapExceeded,
    InvalidValidatorStake,
    TooManyValidators,
    ValidatorAlreadyExists,
    ValidatorInfo,
    ValidatorNotFound,
    ValidatorRegistry,
    YumaConfig,
)


@pytest.fixture
def registry():
    return ValidatorRegistry(
        YumaConfig(
            max_validators=3,
            max_permitted_validators=2,
            max_weight_vector_len=4,
            max_entity_stake_bps=6_000,
        )
    )


def test_add_records_validator(registry):
    registry.add(1, 100, 1)
    assert len(registry) == 1
    assert 1 in registry
    assert registry.get(1) == ValidatorInfo(100, 1)
    assert registry.total_stake == 100
    assert registry.entity_count == 1


def test_membership_respects_bound(registry):
    registry.add(1, 100, 1)
    with pytest.raises(ValidatorAlreadyExists):
        registry.add(1, 100, 1)
    registry.add(2, 100, 2)
    registry.add(3, 100, 3)
    with pytest.raises(TooManyValidators):
        registry.add(4, 100, 4)
    with pytest.raises(ValidatorNotFound):
        registry.remove(4)
    assert len(registry) == 3


def test_remove_returns_info_and_updates_totals(registry):
    registry.add(1, 100, 1)
    info = registry.remove(1)
    assert info == ValidatorInfo(100, 1)
    assert len(registry) == 0
    assert registry.total_stake == 0
    assert registry.entity_count == 0
    assert registry.entity_stakes == {}
    assert registry.get(1) is None


def test_entity_cap_is_enforced_on_updates(registry):
    registry.add(1, 100, 1)
    registry.add(2, 100, 2)
    assert registry.update_stake(1, 150, 1) == ValidatorInfo(150, 1)
    with pytest.raises(EntityStakeCapExceeded):
        registry.update_stake(1, 200, 1)
    with pytest.raises(InvalidValidatorStake):
        registry.update_stake(1, 0, 1)
    assert registry.get(1) == ValidatorInfo(150, 1)
    assert registry.total_stake == 250


def test_entity_cap_is_checked_globally_after_bootstrap(registry):
    registry.add(1, 100, 1)
    with pytest.raises(EntityStakeCapExceeded):
        registry.add(2, 1, 2)
    assert len(registry) == 1
    assert registry.total_stake == 100


def test_zero_stake_rejected(registry):
    with pytest.raises(InvalidValidatorStake):
        registry.add(1, 0, 1)


def test_update_unknown_validator(registry):
    with pytest.raises(ValidatorNotFound):
        registry.update_stake(9, 100, 1)


def test_min_entities_for_cap(registry):
    assert registry.min_entities_for_cap() == 2


def test_ranked_orders_by_stake(registry):
    registry.add(1, 100, 1)
    registry.add(2, 150, 2)
    registry.add(3, 125, 3)
    assert [account for account, _ in registry.ranked()] == [2, 3, 1]


def test_ranked_ties_use_encoded_account(registry):
    registry.add(1, 100, 1)
    registry.add(256, 100, 2)
    # Little-endian encoding puts 256 (00 01 ...) before 1 (01 00 ...).
    assert [account for account, _ in registry.ranked()] == [256, 1]


def test_moving_validator_to_new_entity_keeps_entity_count(registry):
    registry.add(1, 100, 1)
    registry.add(2, 100, 2)
    registry.update_stake(1, 100, 3)
    assert registry.entity_count == 2
    assert set(registry.entity_stakes) == {2, 3}
    assert sum(registry.entity_stakes.values()) == registry.total_stake


def test_config_rejects_out_of_range_bps():
    with pytest.raises(ValueError):
        YumaConfig(max_entity_stake_bps=70_000)