from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional, Tuple

from ..core.enums import LeaveRequestStatus, LeaveType, RequestStatus


@dataclass(frozen=True)
class TwoLevelRequest:
    """Fields shared by WFH and overtime requests (supervisor -> HR)."""

    request_id: Optional[int]
    employee_id: int
    request_date: date
    reason: str
    status: RequestStatus
    created_at: datetime
    supervisor_id: Optional[int] = None
    supervisor_action_at: Optional[datetime] = None
    supervisor_note: Optional[str] = None
    hr_id: Optional[int] = None
    hr_action_at: Optional[datetime] = None
    hr_note: Optional[str] = None


@dataclass(frozen=True)
class WfhRequest(TwoLevelRequest):
    work_location: Optional[str] = None


@dataclass(frozen=True)
class OvertimeRequest(TwoLevelRequest):
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    planned_minutes: int = 0
    # Filled from the attendance record at clock-out once approved
    actual_duration_minutes: Optional[int] = None


@dataclass(frozen=True)
class LeaveRequest:
    """Leave request walking a snapshot of the approval chain.

    ``current_approver_id`` points into ``approval_chain`` while PENDING.
    """

    request_id: Optional[int]
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: int
    reason: str
    status: LeaveRequestStatus
    created_at: datetime
    approval_chain: Tuple[int, ...] = ()
    current_approver_id: Optional[int] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[int] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    @property
    def year(self) -> int:
        return self.start_date.year

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date
