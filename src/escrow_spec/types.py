"""Core types for the escrow engine specs.

Identities are opaque hashable values. The fixtures and test accounts use
32-byte addresses, but nothing below depends on that.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Hashable

from .config import FEE_BASIS_POINTS, FIRST_ESCROW_ID
from .store import DisputeStore, EscrowStore

Identity = Hashable


class EscrowStatus(IntEnum):
    CREATED = 0
    FUNDED = 1
    WORK_SUBMITTED = 2
    COMPLETED = 3
    DISPUTED = 4
    # Reserved: no operation transitions into it.
    CANCELLED = 5


class CallType(Enum):
    CREATE_ESCROW = "create_escrow"
    FUND_ESCROW = "fund_escrow"
    SUBMIT_WORK = "submit_work"
    APPROVE_AND_RELEASE = "approve_and_release"
    INITIATE_DISPUTE = "initiate_dispute"
    RESOLVE_DISPUTE = "resolve_dispute_with_distribution"


class EventName(str, Enum):
    ESCROW_CREATED = "escrow-created"
    ESCROW_FUNDED = "escrow-funded"
    WORK_SUBMITTED = "work-submitted"
    PAYMENT_RELEASED = "payment-released"
    DISPUTE_INITIATED = "dispute-initiated"
    DISPUTE_RESOLVED = "dispute-resolved"


@dataclass
class Escrow:
    id: int
    client: Identity
    freelancer: Identity
    amount: int
    deadline: int
    status: EscrowStatus = EscrowStatus.CREATED
    description: str = ""
    created_at: int = 0


@dataclass
class Dispute:
    escrow_id: int
    initiated_by: Identity
    reason: str = ""
    resolution: str = ""
    resolved: bool = False


@dataclass
class Call:
    caller: Identity
    call_type: CallType
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Transfer:
    amount: int
    source: Identity
    destination: Identity


@dataclass(frozen=True)
class Event:
    name: EventName
    fields: dict[str, Any]


@dataclass
class EngineState:
    arbitrator: Identity
    custody: Identity
    escrows: EscrowStore = field(default_factory=EscrowStore)
    disputes: DisputeStore = field(default_factory=DisputeStore)
    next_escrow_id: int = FIRST_ESCROW_ID
    fee_basis_points: int = FEE_BASIS_POINTS
    total_fees_collected: int = 0


@dataclass
class Outcome:
    """Staged result of a call: new state plus the side effects to perform."""

    state: EngineState
    transfers: list[Transfer] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)
