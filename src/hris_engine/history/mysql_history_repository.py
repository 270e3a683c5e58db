from __future__ import annotations

from datetime import date
from typing import Any, Dict, Generic, Sequence, Tuple, TypeVar

from ..core.enums import EmployeeStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import ACTIVE_ROW, as_date, as_decimal, as_optional_int, db_cursor, fetchall
from .model import ContractHistory, HistoryEntry, JobHistory, SalaryHistory
from .repository import HistoryRepository

E = TypeVar("E", bound=HistoryEntry)

_BASE_COLUMNS = ("employee_id", "start_date", "end_date", "change_type", "reason")


def _base_kwargs(r: Dict[str, Any]) -> Dict[str, Any]:
    return dict(
        entry_id=int(r["entry_id"]),
        employee_id=int(r["employee_id"]),
        start_date=as_date(r["start_date"]),
        end_date=as_date(r.get("end_date")),
        change_type=r.get("change_type"),
        reason=r.get("reason"),
    )


class _MySQLHistoryRepository(Generic[E]):
    table: str = ""
    extra_columns: Tuple[str, ...] = ()

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _to_entity(self, r: Dict[str, Any]) -> E:
        raise NotImplementedError

    def _extra_values(self, entry: E) -> Tuple:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int) -> Sequence[E]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT * FROM {self.table} WHERE employee_id=%s AND {ACTIVE_ROW} ORDER BY start_date",
                (employee_id,),
            )
            return [self._to_entity(r) for r in fetchall(cur)]

    def create(self, entry: E) -> int:
        columns = _BASE_COLUMNS + self.extra_columns
        values = (entry.employee_id, entry.start_date, entry.end_date, entry.change_type, entry.reason)
        values += self._extra_values(entry)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO {self.table}({', '.join(columns)}) VALUES({','.join(['%s'] * len(values))})",
                values,
            )
            return int(cur.lastrowid)

    def close(self, *, entry_id: int, end_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE {self.table} SET end_date=%s WHERE entry_id=%s AND end_date IS NULL AND {ACTIVE_ROW}",
                (end_date, entry_id),
            )
            return cur.rowcount > 0


class MySQLContractHistoryRepository(_MySQLHistoryRepository[ContractHistory], HistoryRepository[ContractHistory]):
    table = "contract_history"
    extra_columns = ("contract_number", "old_status", "new_status")

    def _to_entity(self, r: Dict[str, Any]) -> ContractHistory:
        return ContractHistory(
            **_base_kwargs(r),
            contract_number=r.get("contract_number"),
            old_status=EmployeeStatus(r["old_status"]) if r.get("old_status") else None,
            new_status=EmployeeStatus(r["new_status"]) if r.get("new_status") else None,
        )

    def _extra_values(self, entry: ContractHistory) -> Tuple:
        return (
            entry.contract_number,
            entry.old_status.value if entry.old_status else None,
            entry.new_status.value if entry.new_status else None,
        )


class MySQLJobHistoryRepository(_MySQLHistoryRepository[JobHistory], HistoryRepository[JobHistory]):
    table = "job_history"
    extra_columns = ("department_id", "position_id", "title")

    def _to_entity(self, r: Dict[str, Any]) -> JobHistory:
        return JobHistory(
            **_base_kwargs(r),
            department_id=as_optional_int(r.get("department_id")),
            position_id=as_optional_int(r.get("position_id")),
            title=r.get("title"),
        )

    def _extra_values(self, entry: JobHistory) -> Tuple:
        return (entry.department_id, entry.position_id, entry.title)


class MySQLSalaryHistoryRepository(_MySQLHistoryRepository[SalaryHistory], HistoryRepository[SalaryHistory]):
    table = "salary_history"
    extra_columns = ("old_salary", "new_salary", "salary_difference", "change_percentage")

    def _to_entity(self, r: Dict[str, Any]) -> SalaryHistory:
        return SalaryHistory(
            **_base_kwargs(r),
            old_salary=as_decimal(r["old_salary"]) if r.get("old_salary") is not None else None,
            new_salary=as_decimal(r.get("new_salary")),
            salary_difference=as_decimal(r.get("salary_difference")),
            change_percentage=as_decimal(r["change_percentage"]) if r.get("change_percentage") is not None else None,
        )

    def _extra_values(self, entry: SalaryHistory) -> Tuple:
        return (entry.old_salary, entry.new_salary, entry.salary_difference, entry.change_percentage)
