import pytest

from orogen.frame import (
    BadOrigin,
    DispatchError,
    Origin,
    System,
    ensure_root,
    ensure_signed,
)


def test_ensure_signed_returns_account():
    assert ensure_signed(Origin.signed(42)) == 42


def test_ensure_signed_rejects_root():
    with pytest.raises(BadOrigin):
        ensure_signed(Origin.root())


def test_ensure_root_accepts_root_and_rejects_signed():
    assert ensure_root(Origin.root()) is None
    with pytest.raises(BadOrigin):
        ensure_root(Origin.signed(1))


def test_bad_origin_is_dispatch_error():
    with pytest.raises(DispatchError):
        ensure_root(Origin.signed(7))


def test_origins_compare_by_value():
    assert Origin.signed(3) == Origin.signed(3)
    assert Origin.root() == Origin.root()
    assert Origin.signed(3) != Origin.root()


def test_system_block_number():
    system = System()
    system.set_block_number(11)
    assert system.block_number == 11
    with pytest.raises(ValueError):
        system.set_block_number(-1)


def test_system_events_keep_order():
    system = System()
    system.deposit_event("first")
    system.deposit_event("second")
    assert system.events == ["first", "second"]