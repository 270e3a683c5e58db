from __future__ import annotations

from typing import Protocol, Sequence

from .model import Holiday


class HolidayRepository(Protocol):
    def list_active(self) -> Sequence[Holiday]:
        """All non-deleted holidays with ``is_active`` set."""
        raise NotImplementedError

    def create(self, holiday: Holiday) -> int:
        raise NotImplementedError

    def set_active(self, holiday_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError
