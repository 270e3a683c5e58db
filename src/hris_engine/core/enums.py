from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used for authorization checks."""

    ADMIN = "admin"
    HR = "hr"
    STAFF = "staff"


class EmployeeStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    RESIGNED = "RESIGNED"
    FIRED = "FIRED"


class AttendanceStatus(str, Enum):
    """Normalized attendance status stored with each record."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    LEAVE = "LEAVE"
    SICK = "SICK"
    ABSENT = "ABSENT"
    EARLY_LEAVE = "EARLY_LEAVE"
    WFH = "WFH"


class HolidayType(str, Enum):
    NATIONAL = "NATIONAL"
    COMPANY = "COMPANY"
    COLLECTIVE_LEAVE = "COLLECTIVE_LEAVE"


class ShiftSource(str, Enum):
    """Where a resolved shift came from."""

    SCHEDULE = "SCHEDULE"
    SETTING = "SETTING"
    NONE = "NONE"


class RequestStatus(str, Enum):
    """Two-level approval status shared by WFH and overtime requests."""

    PENDING_SUPERVISOR = "PENDING_SUPERVISOR"
    PENDING_HR = "PENDING_HR"
    APPROVED = "APPROVED"
    REJECTED_BY_SUPERVISOR = "REJECTED_BY_SUPERVISOR"
    REJECTED_BY_HR = "REJECTED_BY_HR"

    @property
    def is_pending(self) -> bool:
        return self in (RequestStatus.PENDING_SUPERVISOR, RequestStatus.PENDING_HR)

    @property
    def is_rejected(self) -> bool:
        return self in (RequestStatus.REJECTED_BY_SUPERVISOR, RequestStatus.REJECTED_BY_HR)

    @property
    def is_terminal(self) -> bool:
        return not self.is_pending


class LeaveRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LeaveType(str, Enum):
    ANNUAL = "ANNUAL"
    SICK = "SICK"
    MATERNITY = "MATERNITY"
    MARRIAGE = "MARRIAGE"
    SPECIAL = "SPECIAL"
    UNPAID = "UNPAID"

    @property
    def deducts_from_balance(self) -> bool:
        return self is LeaveType.ANNUAL


class AssignmentFailure(str, Enum):
    """Typed reasons for a failed bulk shift assignment item."""

    EMPLOYEE_NOT_FOUND = "EMPLOYEE_NOT_FOUND"
    INACTIVE = "INACTIVE"
    OVERLAP = "OVERLAP"
    UNKNOWN = "UNKNOWN"


class HistoryKind(str, Enum):
    CONTRACT = "CONTRACT"
    SALARY = "SALARY"
    JOB = "JOB"
