"""Payload helpers shared by the escrow and dispute call specs."""

from __future__ import annotations

from typing import Any

from ..errors import ErrorCode, SpecError
from ..types import Call, EngineState, Escrow


def require_dict(call: Call) -> dict[str, Any]:
    if not isinstance(call.payload, dict):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "call payload must be dict")
    return call.payload


def int_field(p: dict[str, Any], key: str, default: int = 0) -> int:
    value = p.get(key, default)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, f"{key} must be an integer")
    return value


def text_field(p: dict[str, Any], key: str, limit: int) -> str:
    value = p.get(key, "")
    if not isinstance(value, str):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, f"{key} must be a string")
    if len(value) > limit:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, f"{key} too long")
    return value


def load_escrow(state: EngineState, p: dict[str, Any]) -> Escrow:
    return state.escrows.get(int_field(p, "escrow_id"))
