import pytest

from orogen.weights import U64_MAX, DbWeight, Weight


def test_saturating_add_sums_components():
    total = Weight(40_000_000, 4096).saturating_add(Weight(30_000_000, 2048))
    assert total == Weight(70_000_000, 6144)


def test_saturating_add_clamps_at_max():
    total = Weight(U64_MAX, U64_MAX).saturating_add(Weight(1, 1))
    assert total == Weight(U64_MAX, U64_MAX)


def test_weight_rejects_out_of_range():
    with pytest.raises(ValueError):
        Weight(-1, 0)
    with pytest.raises(ValueError):
        Weight(0, U64_MAX + 1)


def test_default_db_weight_is_free():
    db = DbWeight()
    assert db.reads(10) == Weight()
    assert db.writes(10) == Weight()


def test_reads_writes_matches_separate_costs():
    db = DbWeight(read=25, write=100)
    combined = db.reads_writes(3, 4)
    assert combined == db.reads(3).saturating_add(db.writes(4))
    assert combined.proof_size == 0


def test_db_weight_saturates():
    db = DbWeight(read=U64_MAX, write=U64_MAX)
    assert db.reads(2).ref_time == U64_MAX
    assert db.reads_writes(2, 2).ref_time == U64_MAX