"""Canonical engine state digest (v1)."""
from __future__ import annotations

from typing import Any

from blake3 import blake3


def _hex_to_bytes(value: str | None) -> bytes:
    if value is None:
        return b""
    if not isinstance(value, str):
        raise TypeError("hex value must be string")
    v = value[2:] if value.startswith(("0x", "0X")) else value
    if v == "":
        return b""
    return bytes.fromhex(v)


def _u128_be(value: int) -> bytes:
    if value < 0:
        raise ValueError("u128 must be non-negative")
    return int(value).to_bytes(16, "big", signed=False)


def _text(value: str) -> bytes:
    data = value.encode("utf-8")
    return _u128_be(len(data)) + data


def _identity(value: str) -> bytes:
    data = _hex_to_bytes(value)
    return _u128_be(len(data)) + data


def compute_state_digest(state: dict[str, Any]) -> str:
    """Compute state digest v1 from an exported engine state.

    Counters first, then escrows and disputes sorted by id, each field in a
    fixed order; the result is the BLAKE3-256 hex digest.
    """
    buf = bytearray()
    buf += _identity(state.get("arbitrator", ""))
    buf += _identity(state.get("custody", ""))
    for field in ("next_escrow_id", "fee_basis_points", "total_fees_collected"):
        buf += _u128_be(int(state.get(field, 0)))

    escrows = sorted(state.get("escrows", []), key=lambda e: int(e["id"]))
    buf += _u128_be(len(escrows))
    for e in escrows:
        buf += _u128_be(int(e["id"]))
        buf += _identity(e["client"])
        buf += _identity(e["freelancer"])
        for field in ("amount", "deadline", "status", "created_at"):
            buf += _u128_be(int(e.get(field, 0)))
        buf += _text(e.get("description", ""))

    disputes = sorted(state.get("disputes", []), key=lambda d: int(d["escrow_id"]))
    buf += _u128_be(len(disputes))
    for d in disputes:
        buf += _u128_be(int(d["escrow_id"]))
        buf += _identity(d["initiated_by"])
        buf += _text(d.get("reason", ""))
        buf += _text(d.get("resolution", ""))
        buf += b"\x01" if d.get("resolved") else b"\x00"

    return blake3(bytes(buf)).hexdigest()
