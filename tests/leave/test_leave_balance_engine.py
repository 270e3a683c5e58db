from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from hris_engine.core.exceptions import InsufficientBalanceError, NotFoundError, ValidationError
from hris_engine.leave.model import LeaveBalance
from hris_engine.leave.service import LeaveBalanceEngine


class InMemoryBalances:
    def __init__(self):
        self.rows: dict[int, LeaveBalance] = {}
        self._id = 0

    def get(self, *, employee_id: int, year: int):
        return next((b for b in self.rows.values() if b.employee_id == employee_id and b.year == year), None)

    def create(self, balance: LeaveBalance) -> int:
        self._id += 1
        self.rows[self._id] = replace(balance, balance_id=self._id)
        return self._id

    def update_if_unchanged(self, balance: LeaveBalance, *, previous: LeaveBalance) -> bool:
        if self.rows.get(previous.balance_id) != previous:
            return False
        self.rows[previous.balance_id] = balance
        return True

    def list_expired_carry(self, *, today: date):
        return [b for b in self.rows.values() if b.carry_expired_on(today)]


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _engine(repo=None, clock=None) -> LeaveBalanceEngine:
    return LeaveBalanceEngine(
        repo or InMemoryBalances(),
        default_quota=12,
        expiry_months=6,
        clock=clock or FakeClock(datetime(2026, 1, 5, 8, 0)),
    )


def _seed(repo: InMemoryBalances, *, year: int = 2025, quota="12", balance="12", used="0") -> LeaveBalance:
    row = LeaveBalance(
        balance_id=None,
        employee_id=1,
        year=year,
        annual_quota=Decimal(quota),
        balance=Decimal(balance),
        used=Decimal(used),
    )
    return replace(row, balance_id=repo.create(row))


def test_ensure_year_creates_default_quota_once():
    repo = InMemoryBalances()
    engine = _engine(repo)

    first = engine.ensure_year(1, 2026)
    second = engine.ensure_year(1, 2026)

    assert first.balance == Decimal("12")
    assert first.balance_id == second.balance_id
    assert len(repo.rows) == 1


def test_deduct_whole_balance_succeeds():
    repo = InMemoryBalances()
    _seed(repo, balance="5")

    updated = _engine(repo).deduct(1, 2025, 5)

    assert updated.balance == Decimal("0")
    assert updated.used == Decimal("5")


def test_deduct_more_than_balance_leaves_it_untouched():
    repo = InMemoryBalances()
    before = _seed(repo, balance="5")

    with pytest.raises(InsufficientBalanceError):
        _engine(repo).deduct(1, 2025, 6)

    assert repo.rows[before.balance_id] == before


def test_half_days_are_supported():
    repo = InMemoryBalances()
    _seed(repo, balance="2")
    engine = _engine(repo)

    engine.deduct(1, 2025, Decimal("0.5"))

    assert engine.get_balance(1, 2025).balance == Decimal("1.5")
    assert engine.has_sufficient(1, 2025, "1.5")
    assert not engine.has_sufficient(1, 2025, 2)


def test_reimburse_credits_days_back():
    repo = InMemoryBalances()
    _seed(repo, balance="9", used="3")

    updated = _engine(repo).reimburse(1, 2025, 2)

    assert updated.balance == Decimal("11")
    assert updated.used == Decimal("1")


def test_missing_balance_raises():
    with pytest.raises(NotFoundError):
        _engine().deduct(1, 2030, 1)


def test_adjust_appends_an_audit_note():
    repo = InMemoryBalances()
    _seed(repo, balance="4")
    engine = _engine(repo)

    engine.adjust(1, 2025, 2, "Overtime compensation")
    updated = engine.adjust(1, 2025, -1, "Correction")

    assert updated.balance == Decimal("5")
    assert updated.notes == "2026-01-05 +2: Overtime compensation; 2026-01-05 -1: Correction"

    with pytest.raises(ValidationError):
        engine.adjust(1, 2025, -10, "Too much")
    with pytest.raises(ValidationError):
        engine.adjust(1, 2025, 1, "  ")


def test_rollover_carries_unused_days():
    repo = InMemoryBalances()
    _seed(repo, quota="12", balance="12", used="9")

    nxt = _engine(repo).rollover_to_next_year(1, 2025)

    assert nxt.year == 2026
    assert nxt.balance == Decimal("12")
    assert nxt.used == Decimal("0")
    assert nxt.carried_forward == Decimal("3")
    assert nxt.expired_balance == Decimal("0")
    assert nxt.carried_forward_expiry_date == date(2026, 7, 5)
    assert nxt.total_available == Decimal("15")


def test_rollover_caps_carry_at_half_the_quota():
    repo = InMemoryBalances()
    _seed(repo, quota="12", balance="12", used="0")

    nxt = _engine(repo).rollover_to_next_year(1, 2025)

    assert nxt.carried_forward == Decimal("6")
    assert nxt.expired_balance == Decimal("6")


def test_rollover_keeps_usage_already_booked_next_year():
    repo = InMemoryBalances()
    _seed(repo, quota="12", balance="12", used="10")
    _seed(repo, year=2026, quota="12", balance="8", used="4")

    nxt = _engine(repo).rollover_to_next_year(1, 2025)

    assert nxt.balance == Decimal("8")
    assert nxt.used == Decimal("4")
    assert nxt.carried_forward == Decimal("2")
    assert len(repo.rows) == 2


def test_expiry_sweep_is_idempotent():
    repo = InMemoryBalances()
    _seed(repo, quota="12", balance="12", used="9")
    clock = FakeClock(datetime(2026, 1, 5, 8, 0))
    engine = _engine(repo, clock)
    engine.rollover_to_next_year(1, 2025)

    assert engine.expire_carried_forward() == 0

    clock.now = datetime(2026, 7, 6, 0, 0)
    assert engine.expire_carried_forward() == 1
    assert engine.expire_carried_forward() == 0

    expired = engine.get_balance(1, 2026)
    assert expired.carried_forward == Decimal("0")
    assert expired.expired_balance == Decimal("3")


def test_stats_reports_utilisation():
    repo = InMemoryBalances()
    _seed(repo, quota="12", balance="9", used="3")

    stats = _engine(repo).stats(1, 2025)

    assert stats.used == Decimal("3")
    assert stats.utilisation_percentage == Decimal("25.00")
