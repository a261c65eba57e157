import pytest

from orogen.weights import U64_MAX, DbWeight, Weight
from orogen.yuma_weights import YumaWeightInfo


def test_submit_weights_base_value():
    assert YumaWeightInfo().submit_weights() == Weight(80_000_000, 16_384)


def test_compute_with_no_work_is_base():
    assert YumaWeightInfo().compute_epoch_incentives(0, 0) == Weight(500_000_000, 65_536)


def test_remove_validator_base_value():
    assert YumaWeightInfo().remove_validator() == Weight(50_000_000, 4096)


def test_zero_cost_db_matches_plain_weights():
    plain = YumaWeightInfo()
    zero_db = YumaWeightInfo(DbWeight(0, 0))
    assert plain.submit_weights() == zero_db.submit_weights()
    assert plain.compute_epoch_incentives(64, 256) == zero_db.compute_epoch_incentives(64, 256)
    assert plain.add_validator(64) == zero_db.add_validator(64)
    assert plain.remove_validator() == zero_db.remove_validator()
    assert plain.update_validator_stake(64) == zero_db.update_validator_stake(64)
    assert plain.rotate_permits(64) == zero_db.rotate_permits(64)


def test_db_reads_are_added_to_remove_validator():
    plain = YumaWeightInfo().remove_validator()
    with_reads = YumaWeightInfo(DbWeight(read=1, write=0)).remove_validator()
    with_writes = YumaWeightInfo(DbWeight(read=0, write=1)).remove_validator()
    assert with_reads.ref_time - plain.ref_time == 8
    assert with_writes.ref_time - plain.ref_time == 7
    assert with_reads.proof_size == plain.proof_size


@pytest.mark.parametrize("method", ["add_validator", "update_validator_stake", "rotate_permits"])
def test_weight_grows_with_validator_bound(method):
    info = YumaWeightInfo()
    small = getattr(info, method)(1)
    large = getattr(info, method)(64)
    assert large.ref_time > small.ref_time
    assert large.proof_size == small.proof_size


def test_compute_weight_grows_with_vector_length():
    info = YumaWeightInfo()
    assert info.compute_epoch_incentives(3, 10).ref_time > info.compute_epoch_incentives(3, 4).ref_time


def test_compute_weight_saturates():
    big = 2**32 - 1
    weight = YumaWeightInfo(DbWeight(10, 10)).compute_epoch_incentives(big, big)
    assert weight.ref_time == U64_MAX


@pytest.mark.parametrize("value", [-1, 2**32])
def test_bounds_must_be_u32(value):
    with pytest.raises(ValueError):
        YumaWeightInfo().add_validator(value)