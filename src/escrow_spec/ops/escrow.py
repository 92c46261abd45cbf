"""Escrow lifecycle call specs: create, fund, submit work, approve."""

from __future__ import annotations

from copy import deepcopy

from ..config import MAX_AMOUNT, MAX_DESCRIPTION_LEN
from ..errors import ErrorCode, SpecError
from ..fee import split_payout
from ..types import (
    Call,
    CallType,
    EngineState,
    Escrow,
    EscrowStatus,
    Event,
    EventName,
    Outcome,
    Transfer,
)
from .common import int_field, load_escrow, require_dict, text_field

_ESCROW_TYPES = frozenset({
    CallType.CREATE_ESCROW,
    CallType.FUND_ESCROW,
    CallType.SUBMIT_WORK,
    CallType.APPROVE_AND_RELEASE,
})


def verify(state: EngineState, call: Call, height: int) -> None:
    p = require_dict(call)
    ct = call.call_type
    if ct == CallType.CREATE_ESCROW:
        _verify_create(state, call, p, height)
    elif ct == CallType.FUND_ESCROW:
        _verify_fund(state, call, p)
    elif ct == CallType.SUBMIT_WORK:
        _verify_submit(state, call, p, height)
    elif ct == CallType.APPROVE_AND_RELEASE:
        _verify_approve(state, call, p)
    else:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported escrow call type: {ct}")


def apply(state: EngineState, call: Call, height: int) -> Outcome:
    p = call.payload
    ct = call.call_type
    if ct == CallType.CREATE_ESCROW:
        return _apply_create(state, call, p, height)
    elif ct == CallType.FUND_ESCROW:
        return _apply_fund(state, call, p)
    elif ct == CallType.SUBMIT_WORK:
        return _apply_submit(state, call, p)
    elif ct == CallType.APPROVE_AND_RELEASE:
        return _apply_approve(state, call, p)
    raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported escrow call type: {ct}")


def handles(call_type: CallType) -> bool:
    return call_type in _ESCROW_TYPES


def _require_client(escrow: Escrow, call: Call) -> None:
    if call.caller != escrow.client:
        raise SpecError(ErrorCode.UNAUTHORIZED, "caller is not the escrow client")


def _require_status(escrow: Escrow, expected: EscrowStatus) -> None:
    if escrow.status != expected:
        raise SpecError(
            ErrorCode.INVALID_STATUS,
            f"escrow {escrow.id} is {escrow.status.name}, expected {expected.name}",
        )


# --- CREATE_ESCROW ---

def _verify_create(state: EngineState, call: Call, p: dict, height: int) -> None:
    amount = int_field(p, "amount")
    if amount <= 0:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "escrow amount must be > 0")
    if amount > MAX_AMOUNT:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "escrow amount exceeds u128 max")

    if p.get("freelancer") is None:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "freelancer required")
    text_field(p, "description", MAX_DESCRIPTION_LEN)

    deadline = int_field(p, "deadline")
    if deadline <= height:
        raise SpecError(ErrorCode.EXPIRED, "deadline must be in the future")

    if state.escrows.contains(state.next_escrow_id):
        raise SpecError(ErrorCode.ALREADY_EXISTS, f"escrow {state.next_escrow_id} already exists")


def _apply_create(state: EngineState, call: Call, p: dict, height: int) -> Outcome:
    ns = deepcopy(state)
    escrow = Escrow(
        id=ns.next_escrow_id,
        client=call.caller,
        freelancer=p["freelancer"],
        amount=p["amount"],
        deadline=p["deadline"],
        status=EscrowStatus.CREATED,
        description=p.get("description", ""),
        created_at=height,
    )
    ns.escrows.create(escrow)
    ns.next_escrow_id += 1

    event = Event(
        EventName.ESCROW_CREATED,
        {
            "escrow_id": escrow.id,
            "client": escrow.client,
            "freelancer": escrow.freelancer,
            "amount": escrow.amount,
            "deadline": escrow.deadline,
        },
    )
    return Outcome(state=ns, events=[event])


# --- FUND_ESCROW ---

def _verify_fund(state: EngineState, call: Call, p: dict) -> None:
    escrow = load_escrow(state, p)
    _require_client(escrow, call)
    _require_status(escrow, EscrowStatus.CREATED)


def _apply_fund(state: EngineState, call: Call, p: dict) -> Outcome:
    ns = deepcopy(state)
    escrow = ns.escrows.get(p["escrow_id"])
    escrow.status = EscrowStatus.FUNDED
    ns.escrows.update(escrow.id, escrow)

    transfer = Transfer(amount=escrow.amount, source=call.caller, destination=ns.custody)
    event = Event(
        EventName.ESCROW_FUNDED,
        {"escrow_id": escrow.id, "client": escrow.client, "amount": escrow.amount},
    )
    return Outcome(state=ns, transfers=[transfer], events=[event])


# --- SUBMIT_WORK ---

def _verify_submit(state: EngineState, call: Call, p: dict, height: int) -> None:
    escrow = load_escrow(state, p)
    if call.caller != escrow.freelancer:
        raise SpecError(ErrorCode.UNAUTHORIZED, "caller is not the escrow freelancer")
    _require_status(escrow, EscrowStatus.FUNDED)
    if height > escrow.deadline:
        raise SpecError(ErrorCode.EXPIRED, "deadline has passed")


def _apply_submit(state: EngineState, call: Call, p: dict) -> Outcome:
    ns = deepcopy(state)
    escrow = ns.escrows.get(p["escrow_id"])
    escrow.status = EscrowStatus.WORK_SUBMITTED
    ns.escrows.update(escrow.id, escrow)

    event = Event(
        EventName.WORK_SUBMITTED,
        {"escrow_id": escrow.id, "freelancer": escrow.freelancer},
    )
    return Outcome(state=ns, events=[event])


# --- APPROVE_AND_RELEASE ---

def _verify_approve(state: EngineState, call: Call, p: dict) -> None:
    escrow = load_escrow(state, p)
    _require_client(escrow, call)
    _require_status(escrow, EscrowStatus.WORK_SUBMITTED)


def _apply_approve(state: EngineState, call: Call, p: dict) -> Outcome:
    ns = deepcopy(state)
    escrow = ns.escrows.get(p["escrow_id"])
    payout, fee = split_payout(escrow.amount, ns.fee_basis_points)

    transfers = []
    if payout > 0:
        transfers.append(Transfer(amount=payout, source=ns.custody, destination=escrow.freelancer))
    if fee > 0:
        transfers.append(Transfer(amount=fee, source=ns.custody, destination=ns.arbitrator))

    ns.total_fees_collected += fee
    escrow.status = EscrowStatus.COMPLETED
    ns.escrows.update(escrow.id, escrow)

    event = Event(
        EventName.PAYMENT_RELEASED,
        {
            "escrow_id": escrow.id,
            "freelancer": escrow.freelancer,
            "payout": payout,
            "fee": fee,
        },
    )
    return Outcome(state=ns, transfers=transfers, events=[event])
