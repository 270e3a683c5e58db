from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Union

from ..common.datetime_utils import Clock, add_months, now_local
from ..common.validators import require_non_empty
from ..core.constants import CARRY_FORWARD_EXPIRY_MONTHS, DEFAULT_ANNUAL_QUOTA
from ..core.exceptions import InsufficientBalanceError, InvalidTransitionError, NotFoundError, ValidationError
from .model import ZERO_DAYS, LeaveBalance, LeaveBalanceStats
from .repository import LeaveBalanceRepository

logger = logging.getLogger(__name__)

Days = Union[Decimal, int, str]


def _days(value: Days) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


class LeaveBalanceEngine:
    """Yearly leave balance lifecycle.

    Deduction only succeeds while ``balance >= days``. Rollover carries at
    most half the quota into the next year, and carried days expire after
    ``expiry_months``.
    """

    def __init__(
        self,
        balances: LeaveBalanceRepository,
        *,
        default_quota: int = DEFAULT_ANNUAL_QUOTA,
        expiry_months: int = CARRY_FORWARD_EXPIRY_MONTHS,
        clock: Clock = now_local,
    ):
        self._balances = balances
        self._default_quota = _days(default_quota)
        self._expiry_months = int(expiry_months)
        self._clock = clock

    def ensure_year(self, employee_id: int, year: int, *, quota: Days | None = None) -> LeaveBalance:
        existing = self._balances.get(employee_id=employee_id, year=year)
        if existing is not None:
            return existing

        annual_quota = self._default_quota if quota is None else _days(quota)
        balance = LeaveBalance(
            balance_id=None,
            employee_id=employee_id,
            year=year,
            annual_quota=annual_quota,
            balance=annual_quota,
        )
        balance_id = self._balances.create(balance)
        logger.info("Leave balance %s created for employee %s year %s (quota=%s)", balance_id, employee_id, year, annual_quota)
        return replace(balance, balance_id=balance_id)

    def get_balance(self, employee_id: int, year: int) -> LeaveBalance:
        balance = self._balances.get(employee_id=employee_id, year=year)
        if balance is None:
            raise NotFoundError(f"No leave balance for employee {employee_id} in {year}")
        return balance

    def _save(self, updated: LeaveBalance, previous: LeaveBalance) -> LeaveBalance:
        if not self._balances.update_if_unchanged(updated, previous=previous):
            raise InvalidTransitionError(
                f"Leave balance of employee {previous.employee_id} for {previous.year} was changed concurrently"
            )
        return updated

    def has_sufficient(self, employee_id: int, year: int, days: Days) -> bool:
        return self.get_balance(employee_id, year).balance >= _days(days)

    def deduct(self, employee_id: int, year: int, days: Days) -> LeaveBalance:
        days = _days(days)
        if days <= 0:
            raise ValidationError("Days to deduct must be positive")

        current = self.get_balance(employee_id, year)
        if current.balance < days:
            raise InsufficientBalanceError(
                f"Insufficient leave balance for employee {employee_id}: {current.balance} left, {days} requested"
            )

        updated = self._save(replace(current, balance=current.balance - days, used=current.used + days), current)
        logger.info("Deducted %s day(s) for employee %s year %s, balance now %s", days, employee_id, year, updated.balance)
        return updated

    def reimburse(self, employee_id: int, year: int, days: Days) -> LeaveBalance:
        days = _days(days)
        if days <= 0:
            raise ValidationError("Days to reimburse must be positive")

        current = self.get_balance(employee_id, year)
        updated = self._save(
            replace(current, balance=current.balance + days, used=max(ZERO_DAYS, current.used - days)),
            current,
        )
        logger.info("Reimbursed %s day(s) for employee %s year %s, balance now %s", days, employee_id, year, updated.balance)
        return updated

    def adjust(self, employee_id: int, year: int, delta: Days, reason: str) -> LeaveBalance:
        """Manual HR correction; the balance never goes below zero."""
        delta = _days(delta)
        reason = require_non_empty(reason, "reason")

        current = self.get_balance(employee_id, year)
        new_balance = current.balance + delta
        if new_balance < 0:
            raise ValidationError(f"Adjustment of {delta} would make the balance negative")

        entry = f"{self._clock().date().isoformat()} {delta:+}: {reason}"
        notes = entry if not current.notes else f"{current.notes}; {entry}"
        updated = self._save(replace(current, balance=new_balance, notes=notes), current)
        logger.info("Adjusted leave balance of employee %s year %s by %s (%s)", employee_id, year, delta, reason)
        return updated

    def rollover_to_next_year(self, employee_id: int, from_year: int) -> LeaveBalance:
        """Open ``from_year + 1`` with the carry-forward of ``from_year``.

        unused = balance - used; carry = min(unused, quota / 2); anything above
        the cap is recorded as expired right away.
        """
        previous = self._balances.get(employee_id=employee_id, year=from_year)
        next_year = from_year + 1
        if previous is None:
            return self.ensure_year(employee_id, next_year)

        unused = max(ZERO_DAYS, previous.balance - previous.used)
        max_carry = previous.annual_quota / 2
        carry = min(unused, max_carry)
        expired = max(ZERO_DAYS, unused - max_carry)
        expiry_date = add_months(self._clock().date(), self._expiry_months)

        existing = self._balances.get(employee_id=employee_id, year=next_year)
        if existing is not None:
            # Keep usage already booked against the new year
            result = self._save(
                replace(
                    existing,
                    carried_forward=carry,
                    carried_forward_expiry_date=expiry_date,
                    expired_balance=expired,
                ),
                existing,
            )
        else:
            fresh = LeaveBalance(
                balance_id=None,
                employee_id=employee_id,
                year=next_year,
                annual_quota=previous.annual_quota,
                balance=previous.annual_quota,
                used=ZERO_DAYS,
                carried_forward=carry,
                carried_forward_expiry_date=expiry_date,
                expired_balance=expired,
            )
            result = replace(fresh, balance_id=self._balances.create(fresh))

        logger.info(
            "Rolled over leave for employee %s %s->%s: carried %s (expires %s), expired %s",
            employee_id,
            from_year,
            next_year,
            carry,
            expiry_date,
            expired,
        )
        return result

    def expire_carried_forward(self) -> int:
        """Move overdue carried-forward days into ``expired_balance``.

        Running it again after expiry changes nothing.
        """
        today = self._clock().date()
        changed = 0
        for balance in self._balances.list_expired_carry(today=today):
            if not balance.carry_expired_on(today):
                continue
            updated = replace(
                balance,
                expired_balance=balance.expired_balance + balance.carried_forward,
                carried_forward=ZERO_DAYS,
            )
            if self._balances.update_if_unchanged(updated, previous=balance):
                changed += 1
                logger.info(
                    "Expired %s carried-forward day(s) for employee %s year %s",
                    balance.carried_forward,
                    balance.employee_id,
                    balance.year,
                )
            else:
                logger.warning("Leave balance %s changed during expiry sweep, skipped", balance.balance_id)
        return changed

    def stats(self, employee_id: int, year: int) -> LeaveBalanceStats:
        b = self.get_balance(employee_id, year)
        return LeaveBalanceStats(
            annual_quota=b.annual_quota,
            balance=b.balance,
            used=b.used,
            carried_forward=b.carried_forward,
            expired=b.expired_balance,
            total_available=b.total_available,
            utilisation_percentage=b.utilisation_percentage,
        )
