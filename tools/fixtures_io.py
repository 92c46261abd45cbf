"""Helpers to serialize/deserialize escrow engine fixtures."""

from __future__ import annotations

from typing import Any, Hashable

from escrow_spec.store import DisputeStore, EscrowStore
from escrow_spec.types import (
    Call,
    CallType,
    Dispute,
    EngineState,
    Escrow,
    EscrowStatus,
    Event,
    Transfer,
)

# Payload keys holding identities (hex-encoded in fixtures).
_IDENTITY_KEYS = frozenset({"freelancer"})
_EVENT_IDENTITY_KEYS = frozenset({"client", "freelancer", "initiated_by"})


def _hex_to_bytes(v: str) -> bytes:
    return bytes.fromhex(v)


def _bytes_to_hex(v: Hashable) -> str:
    if not isinstance(v, bytes):
        raise TypeError(f"fixture identities must be bytes, got {type(v).__name__}")
    return v.hex()


def state_to_json(state: EngineState) -> dict[str, Any]:
    return {
        "arbitrator": _bytes_to_hex(state.arbitrator),
        "custody": _bytes_to_hex(state.custody),
        "next_escrow_id": state.next_escrow_id,
        "fee_basis_points": state.fee_basis_points,
        "total_fees_collected": state.total_fees_collected,
        "escrows": [
            {
                "id": e.id,
                "client": _bytes_to_hex(e.client),
                "freelancer": _bytes_to_hex(e.freelancer),
                "amount": e.amount,
                "deadline": e.deadline,
                "status": int(e.status),
                "description": e.description,
                "created_at": e.created_at,
            }
            for e in state.escrows
        ],
        "disputes": [
            {
                "escrow_id": d.escrow_id,
                "initiated_by": _bytes_to_hex(d.initiated_by),
                "reason": d.reason,
                "resolution": d.resolution,
                "resolved": d.resolved,
            }
            for d in state.disputes
        ],
    }


def state_from_json(data: dict[str, Any]) -> EngineState:
    escrows = EscrowStore()
    for e in data.get("escrows", []):
        escrows.create(
            Escrow(
                id=e["id"],
                client=_hex_to_bytes(e["client"]),
                freelancer=_hex_to_bytes(e["freelancer"]),
                amount=e["amount"],
                deadline=e["deadline"],
                status=EscrowStatus(e.get("status", 0)),
                description=e.get("description", ""),
                created_at=e.get("created_at", 0),
            )
        )

    disputes = DisputeStore()
    for d in data.get("disputes", []):
        disputes.create(
            d["escrow_id"],
            Dispute(
                escrow_id=d["escrow_id"],
                initiated_by=_hex_to_bytes(d["initiated_by"]),
                reason=d.get("reason", ""),
                resolution=d.get("resolution", ""),
                resolved=d.get("resolved", False),
            ),
        )

    return EngineState(
        arbitrator=_hex_to_bytes(data["arbitrator"]),
        custody=_hex_to_bytes(data["custody"]),
        escrows=escrows,
        disputes=disputes,
        next_escrow_id=data.get("next_escrow_id", 1),
        fee_basis_points=data.get("fee_basis_points", 250),
        total_fees_collected=data.get("total_fees_collected", 0),
    )


def call_to_json(call: Call) -> dict[str, Any]:
    payload = {
        k: _bytes_to_hex(v) if k in _IDENTITY_KEYS else v
        for k, v in call.payload.items()
    }
    return {
        "caller": _bytes_to_hex(call.caller),
        "call_type": call.call_type.value,
        "payload": payload,
    }


def call_from_json(data: dict[str, Any]) -> Call:
    payload = {
        k: _hex_to_bytes(v) if k in _IDENTITY_KEYS and isinstance(v, str) else v
        for k, v in data.get("payload", {}).items()
    }
    return Call(
        caller=_hex_to_bytes(data["caller"]),
        call_type=CallType(data["call_type"]),
        payload=payload,
    )


def transfers_to_json(transfers: list[Transfer]) -> list[dict[str, Any]]:
    return [
        {
            "amount": t.amount,
            "from": _bytes_to_hex(t.source),
            "to": _bytes_to_hex(t.destination),
        }
        for t in transfers
    ]


def transfers_from_json(data: list[dict[str, Any]]) -> list[Transfer]:
    return [
        Transfer(
            amount=t["amount"],
            source=_hex_to_bytes(t["from"]),
            destination=_hex_to_bytes(t["to"]),
        )
        for t in data
    ]


def events_to_json(events: list[Event]) -> list[dict[str, Any]]:
    return [
        {
            "name": e.name.value,
            "fields": {
                k: _bytes_to_hex(v) if k in _EVENT_IDENTITY_KEYS else v
                for k, v in e.fields.items()
            },
        }
        for e in events
    ]
