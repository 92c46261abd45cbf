"""Reference ledger, clock, caller identity and event sinks."""

from __future__ import annotations

import logging

import pytest

from escrow_spec.config import MAX_AMOUNT
from escrow_spec.events import LoggingEventSink, RecordingEventSink
from escrow_spec.ledger import InMemoryLedger
from escrow_spec.runtime import ManualClock, StaticCaller
from escrow_spec.test_accounts import ARBITRATOR, CLIENT, FREELANCER
from escrow_spec.types import EventName


def test_ledger_transfer() -> None:
    ledger = InMemoryLedger({CLIENT: 100})
    assert ledger.transfer(40, CLIENT, FREELANCER)
    assert ledger.balance_of(CLIENT) == 60
    assert ledger.balance_of(FREELANCER) == 40


def test_ledger_rejects_overdraft_without_side_effects() -> None:
    ledger = InMemoryLedger({CLIENT: 10})
    assert not ledger.transfer(11, CLIENT, FREELANCER)
    assert not ledger.transfer(-1, CLIENT, FREELANCER)
    assert ledger.balances() == {CLIENT: 10}


def test_ledger_atomic_reverts_on_error() -> None:
    ledger = InMemoryLedger({CLIENT: 100})
    with pytest.raises(RuntimeError):
        with ledger.atomic():
            ledger.transfer(30, CLIENT, FREELANCER)
            ledger.transfer(20, CLIENT, ARBITRATOR)
            raise RuntimeError("abort")
    assert ledger.balance_of(CLIENT) == 100
    assert ledger.balance_of(FREELANCER) == 0
    assert ledger.balance_of(ARBITRATOR) == 0


def test_ledger_atomic_keeps_successful_scope() -> None:
    ledger = InMemoryLedger({CLIENT: 100})
    with ledger.atomic():
        ledger.transfer(30, CLIENT, FREELANCER)
    assert ledger.balance_of(FREELANCER) == 30


def test_ledger_nested_atomic_scopes() -> None:
    ledger = InMemoryLedger({CLIENT: 100})
    with ledger.atomic():
        ledger.transfer(10, CLIENT, FREELANCER)
        with pytest.raises(ConnectionError):
            with ledger.atomic():
                ledger.transfer(50, CLIENT, ARBITRATOR)
                raise ConnectionError("ledger offline")
        assert ledger.balance_of(ARBITRATOR) == 0
    assert ledger.balances() == {CLIENT: 90, FREELANCER: 10}


def test_ledger_credit_bounds() -> None:
    ledger = InMemoryLedger()
    ledger.credit(CLIENT, 0)
    ledger.credit(CLIENT, 7)
    assert ledger.balance_of(CLIENT) == 7
    with pytest.raises(ValueError):
        ledger.credit(CLIENT, -1)
    with pytest.raises(ValueError):
        ledger.credit(CLIENT, MAX_AMOUNT + 1)
    assert ledger.balance_of(CLIENT) == 7


def test_manual_clock_is_monotonic() -> None:
    clock = ManualClock(5)
    assert clock.advance(3) == 8
    clock.set(10)
    assert clock.current_height() == 10
    with pytest.raises(ValueError):
        clock.set(9)
    with pytest.raises(ValueError):
        clock.advance(-1)


def test_static_caller_scopes() -> None:
    caller = StaticCaller()
    with pytest.raises(LookupError):
        caller.current()
    caller.set(CLIENT)
    with caller.acting_as(FREELANCER):
        assert caller.current() == FREELANCER
    assert caller.current() == CLIENT


def test_recording_sink() -> None:
    sink = RecordingEventSink()
    fields = {"escrow_id": 1}
    sink.emit(EventName.ESCROW_FUNDED, fields)
    fields["escrow_id"] = 2
    assert sink.names() == ["escrow-funded"]
    assert sink.last().fields == {"escrow_id": 1}
    with pytest.raises(LookupError):
        sink.last(EventName.DISPUTE_RESOLVED)
    sink.clear()
    assert sink.events == []


def test_logging_sink(caplog) -> None:
    sink = LoggingEventSink()
    with caplog.at_level(logging.INFO, logger="escrow_spec.events"):
        sink.emit(EventName.WORK_SUBMITTED, {"escrow_id": 3, "freelancer": b"\x01\x02"})
    assert "work-submitted escrow_id=3 freelancer=0102" in caplog.text
