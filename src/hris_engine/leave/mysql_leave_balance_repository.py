from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import ACTIVE_ROW, as_date, as_decimal, db_cursor, fetchall, fetchone
from .model import LeaveBalance
from .repository import LeaveBalanceRepository

_COLUMNS = (
    "balance_id, employee_id, year, annual_quota, balance, used, carried_forward, "
    "carried_forward_expiry_date, expired_balance, notes"
)


def _row_to_balance(r: Dict[str, Any]) -> LeaveBalance:
    return LeaveBalance(
        balance_id=int(r["balance_id"]),
        employee_id=int(r["employee_id"]),
        year=int(r["year"]),
        annual_quota=as_decimal(r["annual_quota"]),
        balance=as_decimal(r["balance"]),
        used=as_decimal(r.get("used")),
        carried_forward=as_decimal(r.get("carried_forward")),
        carried_forward_expiry_date=as_date(r.get("carried_forward_expiry_date")),
        expired_balance=as_decimal(r.get("expired_balance")),
        notes=r.get("notes"),
    )


class MySQLLeaveBalanceRepository(LeaveBalanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, employee_id: int, year: int) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_balances WHERE employee_id=%s AND year=%s AND {ACTIVE_ROW}",
                (employee_id, year),
            )
            r = fetchone(cur)
            return _row_to_balance(r) if r else None

    def create(self, balance: LeaveBalance) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_balances(
                    employee_id, year, annual_quota, balance, used, carried_forward,
                    carried_forward_expiry_date, expired_balance, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    balance.employee_id,
                    balance.year,
                    balance.annual_quota,
                    balance.balance,
                    balance.used,
                    balance.carried_forward,
                    balance.carried_forward_expiry_date,
                    balance.expired_balance,
                    balance.notes,
                ),
            )
            return int(cur.lastrowid)

    def update_if_unchanged(self, balance: LeaveBalance, *, previous: LeaveBalance) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE leave_balances
                SET balance=%s, used=%s, carried_forward=%s, carried_forward_expiry_date=%s,
                    expired_balance=%s, notes=%s
                WHERE balance_id=%s AND balance=%s AND used=%s AND carried_forward=%s AND {ACTIVE_ROW}
                """,
                (
                    balance.balance,
                    balance.used,
                    balance.carried_forward,
                    balance.carried_forward_expiry_date,
                    balance.expired_balance,
                    balance.notes,
                    previous.balance_id,
                    previous.balance,
                    previous.used,
                    previous.carried_forward,
                ),
            )
            return cur.rowcount > 0

    def list_expired_carry(self, *, today: date) -> Sequence[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM leave_balances
                WHERE carried_forward > 0 AND carried_forward_expiry_date < %s AND {ACTIVE_ROW}
                ORDER BY balance_id
                """,
                (today,),
            )
            return [_row_to_balance(r) for r in fetchall(cur)]
