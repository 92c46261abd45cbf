"""State transition entrypoints for the escrow engine specs.

These functions never touch a ledger or event sink. ``apply_call`` returns the
transfers and events a call would produce; the engine performs them.
"""

from __future__ import annotations

from typing import Optional

from .errors import ErrorCode, SpecError
from .ops import dispute as op_dispute
from .ops import escrow as op_escrow
from .types import Call, CallType, EngineState, Outcome


class TransitionResult:
    """Thin wrapper for verify/apply results."""

    def __init__(self, ok: bool, error: Optional[SpecError] = None):
        self.ok = ok
        self.error = error

    @classmethod
    def success(cls) -> "TransitionResult":
        return cls(True, None)

    @classmethod
    def failure(cls, error: SpecError) -> "TransitionResult":
        return cls(False, error)


def _dispatch_verify(state: EngineState, call: Call, height: int) -> None:
    if not isinstance(call.call_type, CallType):
        raise SpecError(ErrorCode.INVALID_TYPE, f"unknown call type: {call.call_type!r}")
    if op_escrow.handles(call.call_type):
        return op_escrow.verify(state, call, height)
    if op_dispute.handles(call.call_type):
        return op_dispute.verify(state, call, height)

    raise SpecError(ErrorCode.INVALID_TYPE, f"verify not implemented for {call.call_type}")


def _dispatch_apply(state: EngineState, call: Call, height: int) -> Outcome:
    if op_escrow.handles(call.call_type):
        return op_escrow.apply(state, call, height)
    if op_dispute.handles(call.call_type):
        return op_dispute.apply(state, call, height)

    raise SpecError(ErrorCode.INVALID_TYPE, f"apply not implemented for {call.call_type}")


def verify_call(state: EngineState, call: Call, height: int) -> TransitionResult:
    """Check every precondition of a call without mutating state."""
    try:
        _dispatch_verify(state, call, height)
        return TransitionResult.success()
    except SpecError as exc:
        return TransitionResult.failure(exc)


def apply_call(
    state: EngineState, call: Call, height: int
) -> tuple[Outcome, TransitionResult]:
    """Verify and stage a call.

    On failure the returned outcome holds the untouched input state and no
    transfers or events. On success it holds a fresh state; the input state
    is never mutated.
    """
    try:
        _dispatch_verify(state, call, height)
        outcome = _dispatch_apply(state, call, height)
    except SpecError as exc:
        return Outcome(state=state), TransitionResult.failure(exc)
    return outcome, TransitionResult.success()


def apply_calls(
    state: EngineState, calls: list[tuple[Call, int]]
) -> tuple[Outcome, TransitionResult]:
    """Apply a sequence of (call, height) pairs all-or-nothing.

    Transfers and events of every call are concatenated in order. If any call
    fails the whole sequence is rejected and the input state is returned.
    """
    combined = Outcome(state=state)
    for call, height in calls:
        outcome, result = apply_call(combined.state, call, height)
        if not result.ok:
            return Outcome(state=state), result
        combined = Outcome(
            state=outcome.state,
            transfers=combined.transfers + outcome.transfers,
            events=combined.events + outcome.events,
        )
    return combined, TransitionResult.success()
