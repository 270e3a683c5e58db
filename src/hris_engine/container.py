from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Optional

from .approvals.chain import ApprovalChainResolver
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .common.locks import KeyedLock
from .core.constants import CARRY_FORWARD_EXPIRY_MONTHS, DEFAULT_ANNUAL_QUOTA, MAX_CHAIN_DEPTH
from .database.connection import DBConfig, DatabaseConnection
from .history.mysql_history_repository import (
    MySQLContractHistoryRepository,
    MySQLJobHistoryRepository,
    MySQLSalaryHistoryRepository,
)
from .history.service import HistoryLedger, SalaryLedger
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.service import HolidayCalendar
from .leave.mysql_leave_balance_repository import MySQLLeaveBalanceRepository
from .leave.service import LeaveBalanceEngine
from .requests.leave_service import LeaveRequestService
from .requests.mysql_request_repository import (
    MySQLLeaveRequestRepository,
    MySQLOvertimeRequestRepository,
    MySQLWfhRequestRepository,
)
from .requests.service import DEFAULT_HR_ROLES, OvertimeRequestService, WfhRequestService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleService
from .shifts.mysql_shift_repository import MySQLShiftAssignmentRepository, MySQLShiftCatalogRepository
from .shifts.resolver import ShiftResolver
from .shifts.service import ShiftAssignmentService
from .users.mysql_user_repository import MySQLDepartmentRepository, MySQLEmployeeRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    departments_repo: MySQLDepartmentRepository
    holidays_repo: MySQLHolidayRepository
    shift_catalog_repo: MySQLShiftCatalogRepository
    shift_assignments_repo: MySQLShiftAssignmentRepository
    schedules_repo: MySQLScheduleRepository
    attendance_repo: MySQLAttendanceRepository
    wfh_repo: MySQLWfhRequestRepository
    overtime_repo: MySQLOvertimeRequestRepository
    leave_requests_repo: MySQLLeaveRequestRepository
    leave_balances_repo: MySQLLeaveBalanceRepository

    holiday_calendar: HolidayCalendar
    shift_resolver: ShiftResolver
    shift_assignment_service: ShiftAssignmentService
    schedule_service: ScheduleService
    approval_chain: ApprovalChainResolver
    wfh_service: WfhRequestService
    overtime_service: OvertimeRequestService
    leave_balance_engine: LeaveBalanceEngine
    leave_service: LeaveRequestService
    attendance_service: AttendanceService
    contract_history: HistoryLedger
    job_history: HistoryLedger
    salary_history: SalaryLedger


def build_container(*, db_config: dict, settings: Optional[ModuleType] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    hr_roles = getattr(settings, "HR_ROLES", DEFAULT_HR_ROLES)
    exclude_holidays = bool(getattr(settings, "LEAVE_EXCLUDE_HOLIDAYS", False))
    annual_quota = int(getattr(settings, "DEFAULT_ANNUAL_QUOTA", DEFAULT_ANNUAL_QUOTA))
    expiry_months = int(getattr(settings, "CARRY_FORWARD_EXPIRY_MONTHS", CARRY_FORWARD_EXPIRY_MONTHS))
    max_depth = int(getattr(settings, "MAX_CHAIN_DEPTH", MAX_CHAIN_DEPTH))

    employees_repo = MySQLEmployeeRepository(conn)
    departments_repo = MySQLDepartmentRepository(conn)
    holidays_repo = MySQLHolidayRepository(conn)
    shift_catalog_repo = MySQLShiftCatalogRepository(conn)
    shift_assignments_repo = MySQLShiftAssignmentRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    wfh_repo = MySQLWfhRequestRepository(conn)
    overtime_repo = MySQLOvertimeRequestRepository(conn)
    leave_requests_repo = MySQLLeaveRequestRepository(conn)
    leave_balances_repo = MySQLLeaveBalanceRepository(conn)

    holiday_calendar = HolidayCalendar(holidays_repo)
    shift_resolver = ShiftResolver(shift_catalog_repo, shift_assignments_repo, schedules_repo, holiday_calendar)
    shift_assignment_service = ShiftAssignmentService(shift_catalog_repo, shift_assignments_repo, employees_repo)
    schedule_service = ScheduleService(schedules_repo, shift_catalog_repo, employees_repo)
    approval_chain = ApprovalChainResolver(employees_repo, departments_repo, max_depth=max_depth)

    wfh_service = WfhRequestService(wfh_repo, approval_chain, hr_roles=hr_roles)
    overtime_service = OvertimeRequestService(overtime_repo, approval_chain, hr_roles=hr_roles)
    leave_balance_engine = LeaveBalanceEngine(
        leave_balances_repo,
        default_quota=annual_quota,
        expiry_months=expiry_months,
    )
    leave_service = LeaveRequestService(
        leave_requests_repo,
        approval_chain,
        leave_balance_engine,
        holiday_calendar,
        exclude_holidays=exclude_holidays,
        hr_roles=hr_roles,
    )
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        shift_resolver,
        wfh_requests=wfh_service,
        overtime_requests=overtime_service,
        strategy_factory=AttendanceStrategyFactory(),
        locks=KeyedLock(),
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        departments_repo=departments_repo,
        holidays_repo=holidays_repo,
        shift_catalog_repo=shift_catalog_repo,
        shift_assignments_repo=shift_assignments_repo,
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        wfh_repo=wfh_repo,
        overtime_repo=overtime_repo,
        leave_requests_repo=leave_requests_repo,
        leave_balances_repo=leave_balances_repo,
        holiday_calendar=holiday_calendar,
        shift_resolver=shift_resolver,
        shift_assignment_service=shift_assignment_service,
        schedule_service=schedule_service,
        approval_chain=approval_chain,
        wfh_service=wfh_service,
        overtime_service=overtime_service,
        leave_balance_engine=leave_balance_engine,
        leave_service=leave_service,
        attendance_service=attendance_service,
        contract_history=HistoryLedger(MySQLContractHistoryRepository(conn)),
        job_history=HistoryLedger(MySQLJobHistoryRepository(conn)),
        salary_history=SalaryLedger(MySQLSalaryHistoryRepository(conn)),
    )
