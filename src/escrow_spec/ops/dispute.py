"""Dispute call specs: initiate and resolve with distribution."""

from __future__ import annotations

from copy import deepcopy

from ..config import MAX_REASON_LEN, MAX_RESOLUTION_LEN
from ..errors import ErrorCode, SpecError
from ..fee import compute_distribution
from ..types import (
    Call,
    CallType,
    Dispute,
    EngineState,
    EscrowStatus,
    Event,
    EventName,
    Outcome,
    Transfer,
)
from .common import int_field, load_escrow, require_dict, text_field

_DISPUTE_TYPES = frozenset({
    CallType.INITIATE_DISPUTE,
    CallType.RESOLVE_DISPUTE,
})

_DISPUTABLE = frozenset({EscrowStatus.FUNDED, EscrowStatus.WORK_SUBMITTED})


def verify(state: EngineState, call: Call, height: int) -> None:
    p = require_dict(call)
    ct = call.call_type
    if ct == CallType.INITIATE_DISPUTE:
        _verify_initiate(state, call, p)
    elif ct == CallType.RESOLVE_DISPUTE:
        _verify_resolve(state, call, p)
    else:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported dispute call type: {ct}")


def apply(state: EngineState, call: Call, height: int) -> Outcome:
    p = call.payload
    ct = call.call_type
    if ct == CallType.INITIATE_DISPUTE:
        return _apply_initiate(state, call, p)
    elif ct == CallType.RESOLVE_DISPUTE:
        return _apply_resolve(state, call, p)
    raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported dispute call type: {ct}")


def handles(call_type: CallType) -> bool:
    return call_type in _DISPUTE_TYPES


# --- INITIATE_DISPUTE ---

def _verify_initiate(state: EngineState, call: Call, p: dict) -> None:
    escrow = load_escrow(state, p)
    if not state.escrows.is_participant(escrow.id, call.caller):
        raise SpecError(ErrorCode.UNAUTHORIZED, "caller is not a party to the escrow")
    if escrow.status not in _DISPUTABLE:
        raise SpecError(
            ErrorCode.INVALID_STATUS,
            f"escrow {escrow.id} is {escrow.status.name}, cannot be disputed",
        )
    text_field(p, "reason", MAX_REASON_LEN)
    if state.disputes.contains(escrow.id):
        raise SpecError(ErrorCode.ALREADY_EXISTS, f"dispute for escrow {escrow.id} already exists")


def _apply_initiate(state: EngineState, call: Call, p: dict) -> Outcome:
    ns = deepcopy(state)
    escrow = ns.escrows.get(p["escrow_id"])
    escrow.status = EscrowStatus.DISPUTED
    ns.escrows.update(escrow.id, escrow)

    dispute = Dispute(
        escrow_id=escrow.id,
        initiated_by=call.caller,
        reason=p.get("reason", ""),
    )
    ns.disputes.create(escrow.id, dispute)

    event = Event(
        EventName.DISPUTE_INITIATED,
        {"escrow_id": escrow.id, "initiated_by": call.caller, "reason": dispute.reason},
    )
    return Outcome(state=ns, events=[event])


# --- RESOLVE_DISPUTE ---

def _verify_resolve(state: EngineState, call: Call, p: dict) -> None:
    if call.caller != state.arbitrator:
        raise SpecError(ErrorCode.OWNER_ONLY, "only the arbitrator can resolve disputes")

    escrow = load_escrow(state, p)
    if escrow.status != EscrowStatus.DISPUTED:
        raise SpecError(ErrorCode.INVALID_STATUS, f"escrow {escrow.id} is not disputed")

    dispute = state.disputes.get(escrow.id)
    if dispute.resolved:
        raise SpecError(ErrorCode.INVALID_STATUS, f"dispute for escrow {escrow.id} already resolved")

    compute_distribution(
        escrow.amount,
        int_field(p, "client_pct"),
        int_field(p, "freelancer_pct"),
        int_field(p, "penalty"),
        state.fee_basis_points,
    )
    text_field(p, "resolution", MAX_RESOLUTION_LEN)


def _apply_resolve(state: EngineState, call: Call, p: dict) -> Outcome:
    ns = deepcopy(state)
    escrow = ns.escrows.get(p["escrow_id"])
    dist = compute_distribution(
        escrow.amount,
        p.get("client_pct", 0),
        p.get("freelancer_pct", 0),
        p.get("penalty", 0),
        ns.fee_basis_points,
    )

    transfers = []
    if dist.client_share > 0:
        transfers.append(Transfer(dist.client_share, ns.custody, escrow.client))
    if dist.freelancer_share > 0:
        transfers.append(Transfer(dist.freelancer_share, ns.custody, escrow.freelancer))
    if dist.arbitrator_share > 0:
        transfers.append(Transfer(dist.arbitrator_share, ns.custody, ns.arbitrator))

    ns.total_fees_collected += dist.fee

    dispute = ns.disputes.get(escrow.id)
    dispute.resolution = p.get("resolution", "")
    dispute.resolved = True
    ns.disputes.update(escrow.id, dispute)

    escrow.status = EscrowStatus.COMPLETED
    ns.escrows.update(escrow.id, escrow)

    event = Event(
        EventName.DISPUTE_RESOLVED,
        {
            "escrow_id": escrow.id,
            "resolution": dispute.resolution,
            "client_share": dist.client_share,
            "freelancer_share": dist.freelancer_share,
            "fee": dist.fee,
            "penalty": dist.penalty,
            "dust": dist.dust,
        },
    )
    return Outcome(state=ns, transfers=transfers, events=[event])
