"""Entity stores for escrow and dispute records.

Both stores hand out the stored record objects themselves. Callers that want
to mutate a record read it, change the copy they hold on a working state and
write the whole record back with ``update``; the engine only ever does this on
a deep copy of the live state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Hashable, Iterator

from .errors import ErrorCode, SpecError

if TYPE_CHECKING:
    from .types import Dispute, Escrow


class EscrowStore:
    def __init__(self) -> None:
        self._records: dict[int, Escrow] = {}

    def create(self, record: Escrow) -> int:
        if record.id in self._records:
            raise SpecError(ErrorCode.ALREADY_EXISTS, f"escrow {record.id} already exists")
        self._records[record.id] = record
        return record.id

    def get(self, escrow_id: int) -> Escrow:
        record = self._records.get(escrow_id)
        if record is None:
            raise SpecError(ErrorCode.NOT_FOUND, f"escrow {escrow_id} not found")
        return record

    def update(self, escrow_id: int, record: Escrow) -> None:
        if escrow_id not in self._records:
            raise SpecError(ErrorCode.NOT_FOUND, f"escrow {escrow_id} not found")
        if record.id != escrow_id:
            raise SpecError(ErrorCode.INVALID_PAYLOAD, "escrow id mismatch on update")
        self._records[escrow_id] = record

    def is_participant(self, escrow_id: int, identity: Hashable) -> bool:
        record = self._records.get(escrow_id)
        if record is None:
            return False
        return identity == record.client or identity == record.freelancer

    def contains(self, escrow_id: int) -> bool:
        return escrow_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Escrow]:
        for escrow_id in sorted(self._records):
            yield self._records[escrow_id]


class DisputeStore:
    def __init__(self) -> None:
        self._records: dict[int, Dispute] = {}

    def create(self, escrow_id: int, record: Dispute) -> None:
        if escrow_id in self._records:
            raise SpecError(ErrorCode.ALREADY_EXISTS, f"dispute for escrow {escrow_id} already exists")
        self._records[escrow_id] = record

    def get(self, escrow_id: int) -> Dispute:
        record = self._records.get(escrow_id)
        if record is None:
            raise SpecError(ErrorCode.NOT_FOUND, f"dispute for escrow {escrow_id} not found")
        return record

    def update(self, escrow_id: int, record: Dispute) -> None:
        if escrow_id not in self._records:
            raise SpecError(ErrorCode.NOT_FOUND, f"dispute for escrow {escrow_id} not found")
        self._records[escrow_id] = record

    def contains(self, escrow_id: int) -> bool:
        return escrow_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Dispute]:
        for escrow_id in sorted(self._records):
            yield self._records[escrow_id]
