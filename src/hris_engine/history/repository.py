from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence, TypeVar

from .model import HistoryEntry

E = TypeVar("E", bound=HistoryEntry)


class HistoryRepository(Protocol[E]):
    def list_for_employee(self, employee_id: int) -> Sequence[E]:
        raise NotImplementedError

    def create(self, entry: E) -> int:
        raise NotImplementedError

    def close(self, *, entry_id: int, end_date: date) -> bool:
        """Set ``end_date`` on a row that is still current."""
        raise NotImplementedError
