from __future__ import annotations

import json
from datetime import date
from typing import Any, Dict, Generic, Optional, Sequence, Tuple, TypeVar

from ..core.enums import LeaveRequestStatus, LeaveType, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    ACTIVE_ROW,
    as_date,
    as_optional_int,
    db_cursor,
    fetchall,
    fetchone,
    normalize_mysql_time,
    soft_delete,
)
from .model import LeaveRequest, OvertimeRequest, TwoLevelRequest, WfhRequest
from .repository import LeaveRequestRepository, TwoLevelRequestRepository

R = TypeVar("R", bound=TwoLevelRequest)

_LIVE_STATUSES = (
    RequestStatus.PENDING_SUPERVISOR.value,
    RequestStatus.PENDING_HR.value,
    RequestStatus.APPROVED.value,
)

_BASE_COLUMNS = (
    "employee_id",
    "request_date",
    "reason",
    "status",
    "created_at",
    "supervisor_id",
    "supervisor_action_at",
    "supervisor_note",
    "hr_id",
    "hr_action_at",
    "hr_note",
)


def _base_kwargs(r: Dict[str, Any]) -> Dict[str, Any]:
    return dict(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        request_date=as_date(r["request_date"]),
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        supervisor_id=as_optional_int(r.get("supervisor_id")),
        supervisor_action_at=r.get("supervisor_action_at"),
        supervisor_note=r.get("supervisor_note"),
        hr_id=as_optional_int(r.get("hr_id")),
        hr_action_at=r.get("hr_action_at"),
        hr_note=r.get("hr_note"),
    )


def _base_values(request: TwoLevelRequest) -> Tuple:
    return (
        request.employee_id,
        request.request_date,
        request.reason,
        request.status.value,
        request.created_at,
        request.supervisor_id,
        request.supervisor_action_at,
        request.supervisor_note,
        request.hr_id,
        request.hr_action_at,
        request.hr_note,
    )


class _MySQLTwoLevelRequestRepository(Generic[R]):
    """Shared SQL for the WFH and overtime tables."""

    table: str = ""
    extra_columns: Tuple[str, ...] = ()

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _to_entity(self, r: Dict[str, Any]) -> R:
        raise NotImplementedError

    def _extra_values(self, request: R) -> Tuple:
        raise NotImplementedError

    def _select(self, where: str, params: Tuple, *, one: bool = False):
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT * FROM {self.table} WHERE {where} AND {ACTIVE_ROW} ORDER BY request_date, request_id", params)
            if one:
                r = fetchone(cur)
                return self._to_entity(r) if r else None
            return [self._to_entity(r) for r in fetchall(cur)]

    def get_by_id(self, request_id: int) -> Optional[R]:
        return self._select("request_id=%s", (request_id,), one=True)

    def find_live_for_date(self, *, employee_id: int, request_date: date) -> Optional[R]:
        placeholders = ",".join(["%s"] * len(_LIVE_STATUSES))
        return self._select(
            f"employee_id=%s AND request_date=%s AND status IN ({placeholders})",
            (employee_id, request_date) + _LIVE_STATUSES,
            one=True,
        )

    def create(self, request: R) -> int:
        columns = _BASE_COLUMNS + self.extra_columns
        values = _base_values(request) + self._extra_values(request)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO {self.table}({', '.join(columns)}) VALUES({','.join(['%s'] * len(values))})",
                values,
            )
            return int(cur.lastrowid)

    def update_if_status(self, request: R, *, expected: RequestStatus) -> bool:
        columns = _BASE_COLUMNS[3:] + self.extra_columns
        values = _base_values(request)[3:] + self._extra_values(request)
        assignments = ", ".join(f"{col}=%s" for col in columns)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE {self.table} SET {assignments} WHERE request_id=%s AND status=%s AND {ACTIVE_ROW}",
                values + (request.request_id, expected.value),
            )
            return cur.rowcount > 0

    def list_by_status(self, status: RequestStatus, *, supervisor_id: Optional[int] = None) -> Sequence[R]:
        if supervisor_id is None:
            return self._select("status=%s", (status.value,))
        return self._select("status=%s AND supervisor_id=%s", (status.value, supervisor_id))

    def list_for_employee(self, employee_id: int) -> Sequence[R]:
        return self._select("employee_id=%s", (employee_id,))


class MySQLWfhRequestRepository(_MySQLTwoLevelRequestRepository[WfhRequest], TwoLevelRequestRepository[WfhRequest]):
    table = "wfh_requests"
    extra_columns = ("work_location",)

    def _to_entity(self, r: Dict[str, Any]) -> WfhRequest:
        return WfhRequest(**_base_kwargs(r), work_location=r.get("work_location"))

    def _extra_values(self, request: WfhRequest) -> Tuple:
        return (request.work_location,)


class MySQLOvertimeRequestRepository(
    _MySQLTwoLevelRequestRepository[OvertimeRequest], TwoLevelRequestRepository[OvertimeRequest]
):
    table = "overtime_requests"
    extra_columns = ("start_time", "end_time", "planned_minutes", "actual_duration_minutes")

    def _to_entity(self, r: Dict[str, Any]) -> OvertimeRequest:
        return OvertimeRequest(
            **_base_kwargs(r),
            start_time=normalize_mysql_time(r.get("start_time")),
            end_time=normalize_mysql_time(r.get("end_time")),
            planned_minutes=int(r.get("planned_minutes") or 0),
            actual_duration_minutes=as_optional_int(r.get("actual_duration_minutes")),
        )

    def _extra_values(self, request: OvertimeRequest) -> Tuple:
        return (request.start_time, request.end_time, request.planned_minutes, request.actual_duration_minutes)


def _row_to_leave(r: Dict[str, Any]) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=as_date(r["start_date"]),
        end_date=as_date(r["end_date"]),
        total_days=int(r["total_days"]),
        reason=r["reason"],
        status=LeaveRequestStatus(r["status"]),
        created_at=r["created_at"],
        approval_chain=tuple(json.loads(r.get("approval_chain") or "[]")),
        current_approver_id=as_optional_int(r.get("current_approver_id")),
        approved_by=as_optional_int(r.get("approved_by")),
        approved_at=r.get("approved_at"),
        rejected_by=as_optional_int(r.get("rejected_by")),
        rejected_at=r.get("rejected_at"),
        rejection_reason=r.get("rejection_reason"),
    )


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _fetch(self, where: str, params: Tuple) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT * FROM leave_requests WHERE {where} AND {ACTIVE_ROW} ORDER BY start_date, request_id",
                params,
            )
            return [_row_to_leave(r) for r in fetchall(cur)]

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        rows = self._fetch("request_id=%s", (request_id,))
        return rows[0] if rows else None

    def create(self, request: LeaveRequest) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, leave_type, start_date, end_date, total_days, reason,
                    status, created_at, approval_chain, current_approver_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    request.employee_id,
                    request.leave_type.value,
                    request.start_date,
                    request.end_date,
                    request.total_days,
                    request.reason,
                    request.status.value,
                    request.created_at,
                    json.dumps(list(request.approval_chain)),
                    request.current_approver_id,
                ),
            )
            return int(cur.lastrowid)

    def update_if_state(
        self,
        request: LeaveRequest,
        *,
        expected_status: LeaveRequestStatus,
        expected_approver_id: Optional[int],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE leave_requests
                SET status=%s, current_approver_id=%s, approved_by=%s, approved_at=%s,
                    rejected_by=%s, rejected_at=%s, rejection_reason=%s
                WHERE request_id=%s AND status=%s AND current_approver_id <=> %s AND {ACTIVE_ROW}
                """,
                (
                    request.status.value,
                    request.current_approver_id,
                    request.approved_by,
                    request.approved_at,
                    request.rejected_by,
                    request.rejected_at,
                    request.rejection_reason,
                    request.request_id,
                    expected_status.value,
                    expected_approver_id,
                ),
            )
            return cur.rowcount > 0

    def find_overlapping(self, *, employee_id: int, start: date, end: date) -> Sequence[LeaveRequest]:
        return self._fetch(
            "employee_id=%s AND status IN (%s, %s) AND start_date <= %s AND end_date >= %s",
            (employee_id, LeaveRequestStatus.PENDING.value, LeaveRequestStatus.APPROVED.value, end, start),
        )

    def list_pending_for_approver(self, approver_id: int) -> Sequence[LeaveRequest]:
        return self._fetch(
            "status=%s AND current_approver_id=%s",
            (LeaveRequestStatus.PENDING.value, approver_id),
        )

    def list_for_employee(self, employee_id: int, *, year: Optional[int] = None) -> Sequence[LeaveRequest]:
        if year is None:
            return self._fetch("employee_id=%s", (employee_id,))
        return self._fetch("employee_id=%s AND YEAR(start_date)=%s", (employee_id, year))

    def delete(self, request_id: int) -> bool:
        return soft_delete(self._conn_factory, "leave_requests", "request_id", request_id)
