"""Clock and caller identity collaborators."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Hashable, Iterator, Optional, Protocol


class Clock(Protocol):
    def current_height(self) -> int:
        ...


class CallerIdentity(Protocol):
    def current(self) -> Hashable:
        ...


class ManualClock:
    """Height counter driven by the caller; never moves backwards."""

    def __init__(self, height: int = 0) -> None:
        if height < 0:
            raise ValueError("height must be non-negative")
        self._height = height

    def current_height(self) -> int:
        return self._height

    def advance(self, blocks: int = 1) -> int:
        if blocks < 0:
            raise ValueError("clock cannot move backwards")
        self._height += blocks
        return self._height

    def set(self, height: int) -> None:
        if height < self._height:
            raise ValueError("clock cannot move backwards")
        self._height = height


class StaticCaller:
    """Caller identity that is whatever was last set."""

    def __init__(self, identity: Optional[Hashable] = None) -> None:
        self._identity = identity

    def current(self) -> Hashable:
        if self._identity is None:
            raise LookupError("no caller identity set")
        return self._identity

    def set(self, identity: Hashable) -> None:
        self._identity = identity

    @contextmanager
    def acting_as(self, identity: Hashable) -> Iterator[None]:
        previous = self._identity
        self._identity = identity
        try:
            yield
        finally:
            self._identity = previous
