"""Escrow engine: composes the state transition core with its collaborators.

Each public operation runs under one engine-wide lock:

1. resolve the caller and the current height,
2. stage the call with ``apply_call`` on a copy of the state,
3. perform the staged transfers inside ``Ledger.atomic()``,
4. swap the staged state in and emit the staged events.

A failure at step 2 or 3 leaves the state, the counters and the ledger
balances exactly as they were, and nothing is emitted.
"""

from __future__ import annotations

import logging
import threading
from copy import deepcopy
from typing import Any, Hashable, Optional

from .config import CUSTODY_ACCOUNT, FEE_BASIS_POINTS, MAX_BPS
from .errors import ErrorCode, SpecError
from .events import EventSink
from .fee import compute_fee
from .ledger import Ledger
from .runtime import CallerIdentity, Clock
from .state_transition import apply_call
from .types import Call, CallType, Dispute, EngineState, Escrow, EventName, Outcome

logger = logging.getLogger(__name__)


class EscrowEngine:
    def __init__(
        self,
        ledger: Ledger,
        clock: Clock,
        caller: CallerIdentity,
        events: EventSink,
        arbitrator: Hashable,
        custody: Hashable = CUSTODY_ACCOUNT,
        fee_basis_points: int = FEE_BASIS_POINTS,
        state: Optional[EngineState] = None,
    ):
        if fee_basis_points < 0 or fee_basis_points > MAX_BPS:
            raise ValueError("fee_basis_points out of range")
        if custody == arbitrator:
            raise ValueError("custody account must differ from the arbitrator")
        self._ledger = ledger
        self._clock = clock
        self._caller = caller
        self._events = events
        self._lock = threading.RLock()
        if state is None:
            state = EngineState(
                arbitrator=arbitrator,
                custody=custody,
                fee_basis_points=fee_basis_points,
            )
        self._state = state

    # --- operations ---

    def create_escrow(
        self, freelancer: Hashable, amount: int, deadline: int, description: str = ""
    ) -> int:
        outcome = self._execute(
            CallType.CREATE_ESCROW,
            {
                "freelancer": freelancer,
                "amount": amount,
                "deadline": deadline,
                "description": description,
            },
        )
        return outcome.events[0].fields["escrow_id"]

    def fund_escrow(self, escrow_id: int) -> None:
        self._execute(CallType.FUND_ESCROW, {"escrow_id": escrow_id})

    def submit_work(self, escrow_id: int) -> None:
        self._execute(CallType.SUBMIT_WORK, {"escrow_id": escrow_id})

    def approve_and_release(self, escrow_id: int) -> int:
        """Release to the freelancer; returns the payout after fees."""
        outcome = self._execute(CallType.APPROVE_AND_RELEASE, {"escrow_id": escrow_id})
        return outcome.events[0].fields["payout"]

    def initiate_dispute(self, escrow_id: int, reason: str) -> None:
        self._execute(
            CallType.INITIATE_DISPUTE, {"escrow_id": escrow_id, "reason": reason}
        )

    def resolve_dispute_with_distribution(
        self,
        escrow_id: int,
        resolution: str,
        client_pct: int,
        freelancer_pct: int,
        penalty: int,
    ) -> dict[str, Any]:
        """Split a disputed escrow; returns the ``dispute-resolved`` event fields."""
        outcome = self._execute(
            CallType.RESOLVE_DISPUTE,
            {
                "escrow_id": escrow_id,
                "resolution": resolution,
                "client_pct": client_pct,
                "freelancer_pct": freelancer_pct,
                "penalty": penalty,
            },
        )
        return dict(outcome.events[0].fields)

    # --- read-only queries ---

    def get_escrow(self, escrow_id: int) -> Escrow:
        with self._lock:
            return deepcopy(self._state.escrows.get(escrow_id))

    def get_dispute(self, escrow_id: int) -> Dispute:
        with self._lock:
            return deepcopy(self._state.disputes.get(escrow_id))

    def is_participant(self, escrow_id: int, identity: Hashable) -> bool:
        with self._lock:
            return self._state.escrows.is_participant(escrow_id, identity)

    def calculate_fee(self, amount: int) -> int:
        with self._lock:
            return compute_fee(amount, self._state.fee_basis_points)

    def get_total_fees_collected(self) -> int:
        with self._lock:
            return self._state.total_fees_collected

    def get_next_escrow_id(self) -> int:
        with self._lock:
            return self._state.next_escrow_id

    def get_fee_basis_points(self) -> int:
        with self._lock:
            return self._state.fee_basis_points

    @property
    def arbitrator(self) -> Hashable:
        return self._state.arbitrator

    @property
    def custody(self) -> Hashable:
        return self._state.custody

    def snapshot(self) -> EngineState:
        with self._lock:
            return deepcopy(self._state)

    # --- execution ---

    def _execute(self, call_type: CallType, payload: dict[str, Any]) -> Outcome:
        with self._lock:
            call = Call(caller=self._caller.current(), call_type=call_type, payload=payload)
            height = self._clock.current_height()

            outcome, result = apply_call(self._state, call, height)
            if not result.ok:
                logger.warning("%s rejected: %s", call_type.value, result.error)
                raise result.error

            try:
                with self._ledger.atomic():
                    for t in outcome.transfers:
                        if not self._ledger.transfer(t.amount, t.source, t.destination):
                            raise SpecError(
                                ErrorCode.TRANSFER_FAILED,
                                f"ledger rejected transfer of {t.amount}",
                            )
            except Exception as exc:
                logger.warning("%s aborted: %r", call_type.value, exc)
                raise

            self._state = outcome.state
            logger.info(
                "%s committed at height %d (%d transfers)",
                call_type.value,
                height,
                len(outcome.transfers),
            )

            for event in outcome.events:
                self._emit(event.name, event.fields)
        return outcome

    def _emit(self, name: EventName, fields: dict[str, Any]) -> None:
        try:
            self._events.emit(name, fields)
        except Exception:
            # Delivery is fire-and-forget; the operation has already committed.
            logger.exception("event sink failed for %s", name.value)
