from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

ZERO_DAYS = Decimal("0")


@dataclass(frozen=True)
class LeaveBalance:
    """Annual leave of one employee for one year (days, halves allowed).

    ``balance`` is what is left of this year's grant; carried-forward days
    from the previous year live beside it until they expire.
    """

    balance_id: Optional[int]
    employee_id: int
    year: int
    annual_quota: Decimal
    balance: Decimal
    used: Decimal = ZERO_DAYS
    carried_forward: Decimal = ZERO_DAYS
    carried_forward_expiry_date: Optional[date] = None
    expired_balance: Decimal = ZERO_DAYS
    notes: Optional[str] = None

    @property
    def total_available(self) -> Decimal:
        return self.balance + self.carried_forward

    @property
    def utilisation_percentage(self) -> Decimal:
        if self.annual_quota <= 0:
            return ZERO_DAYS
        return (self.used / self.annual_quota * 100).quantize(Decimal("0.01"))

    def carry_expired_on(self, today: date) -> bool:
        return (
            self.carried_forward > 0
            and self.carried_forward_expiry_date is not None
            and self.carried_forward_expiry_date < today
        )


@dataclass(frozen=True)
class LeaveBalanceStats:
    annual_quota: Decimal
    balance: Decimal
    used: Decimal
    carried_forward: Decimal
    expired: Decimal
    total_available: Decimal
    utilisation_percentage: Decimal
