from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import LeaveBalance


class LeaveBalanceRepository(Protocol):
    def get(self, *, employee_id: int, year: int) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def create(self, balance: LeaveBalance) -> int:
        raise NotImplementedError

    def update_if_unchanged(self, balance: LeaveBalance, *, previous: LeaveBalance) -> bool:
        """Persist ``balance`` only if the stored row still matches ``previous``."""
        raise NotImplementedError

    def list_expired_carry(self, *, today: date) -> Sequence[LeaveBalance]:
        """Balances with carried-forward days whose expiry date is before ``today``."""
        raise NotImplementedError
