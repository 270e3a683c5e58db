from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from typing import Optional

import pytest

from hris_engine.approvals.chain import ApprovalChainResolver
from hris_engine.approvals.two_level import ApprovalAction, TwoLevelApprovalWorkflow, next_status
from hris_engine.core.enums import RequestStatus, Role
from hris_engine.core.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NoApproverAvailableError,
    OverlapConflictError,
)
from hris_engine.requests.service import OvertimeRequestService, WfhRequestService
from hris_engine.users.model import Department, Employee

NOW = datetime(2026, 3, 2, 9, 0)
DAY = date(2026, 3, 5)

STAFF = 1
SUPERVISOR = 2
HR_USER = 3


@dataclass
class InMemoryEmployees:
    by_id: dict[int, Employee] = field(default_factory=dict)

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.by_id.get(employee_id)


@dataclass
class InMemoryDepartments:
    by_id: dict[int, Department] = field(default_factory=dict)

    def get_by_id(self, department_id: int) -> Optional[Department]:
        return self.by_id.get(department_id)


class InMemoryRequests:
    def __init__(self):
        self.rows = {}
        self._id = 0

    def get_by_id(self, request_id):
        return self.rows.get(request_id)

    def find_live_for_date(self, *, employee_id, request_date):
        for r in self.rows.values():
            if r.employee_id == employee_id and r.request_date == request_date and not r.status.is_rejected:
                return r
        return None

    def create(self, request):
        self._id += 1
        self.rows[self._id] = replace(request, request_id=self._id)
        return self._id

    def update_if_status(self, request, *, expected):
        current = self.rows.get(request.request_id)
        if current is None or current.status is not expected:
            return False
        self.rows[request.request_id] = request
        return True

    def list_by_status(self, status, *, supervisor_id=None):
        return [
            r
            for r in self.rows.values()
            if r.status is status and (supervisor_id is None or r.supervisor_id == supervisor_id)
        ]

    def list_for_employee(self, employee_id):
        return [r for r in self.rows.values() if r.employee_id == employee_id]


def _chain(*, with_supervisor: bool = True) -> ApprovalChainResolver:
    employees = InMemoryEmployees(
        {
            STAFF: Employee(employee_id=STAFF, full_name="Staff", approver_id=SUPERVISOR if with_supervisor else None),
            SUPERVISOR: Employee(employee_id=SUPERVISOR, full_name="Supervisor"),
        }
    )
    return ApprovalChainResolver(employees, InMemoryDepartments())


def _wfh_service(repo=None, **kwargs) -> WfhRequestService:
    return WfhRequestService(repo or InMemoryRequests(), _chain(**kwargs), clock=lambda: NOW)


def test_transition_table_is_closed():
    assert next_status(RequestStatus.PENDING_SUPERVISOR, ApprovalAction.SUPERVISOR_APPROVE) is RequestStatus.PENDING_HR
    assert next_status(RequestStatus.PENDING_HR, ApprovalAction.HR_REJECT) is RequestStatus.REJECTED_BY_HR

    with pytest.raises(InvalidTransitionError):
        next_status(RequestStatus.PENDING_SUPERVISOR, ApprovalAction.HR_APPROVE)
    with pytest.raises(InvalidTransitionError):
        next_status(RequestStatus.APPROVED, ApprovalAction.HR_REJECT)


def test_workflow_stamps_the_acting_level():
    svc = _wfh_service()
    request = svc.submit(employee_id=STAFF, request_date=DAY, reason="Plumber visit")

    updated = TwoLevelApprovalWorkflow().approve_by_supervisor(request, actor_id=SUPERVISOR, at=NOW, note="ok")

    assert updated.supervisor_id == SUPERVISOR
    assert updated.supervisor_action_at == NOW
    assert updated.supervisor_note == "ok"
    assert updated.hr_id is None


def test_full_approval_path():
    svc = _wfh_service()
    request = svc.submit(employee_id=STAFF, request_date=DAY, reason="Plumber visit", work_location="Home")

    assert request.status is RequestStatus.PENDING_SUPERVISOR
    assert request.supervisor_id == SUPERVISOR
    assert [r.request_id for r in svc.pending_for_supervisor(SUPERVISOR)] == [request.request_id]

    svc.approve_by_supervisor(request_id=request.request_id, actor_id=SUPERVISOR)
    approved = svc.approve_by_hr(request_id=request.request_id, actor_id=HR_USER, current_role=Role.HR, note="fine")

    assert approved.status is RequestStatus.APPROVED
    assert approved.hr_id == HR_USER
    assert svc.has_approved_for_date(STAFF, DAY)
    assert not svc.has_approved_for_date(STAFF, date(2026, 3, 6))


def test_hr_cannot_act_before_supervisor():
    svc = _wfh_service()
    request = svc.submit(employee_id=STAFF, request_date=DAY, reason="Plumber visit")

    with pytest.raises(InvalidTransitionError):
        svc.approve_by_hr(request_id=request.request_id, actor_id=HR_USER, current_role=Role.HR)


def test_terminal_status_cannot_change():
    svc = _wfh_service()
    request = svc.submit(employee_id=STAFF, request_date=DAY, reason="Plumber visit")
    rejected = svc.reject_by_supervisor(request_id=request.request_id, actor_id=SUPERVISOR, note="busy week")

    assert rejected.status is RequestStatus.REJECTED_BY_SUPERVISOR
    with pytest.raises(InvalidTransitionError):
        svc.approve_by_supervisor(request_id=request.request_id, actor_id=SUPERVISOR)


def test_requester_cannot_approve_own_request():
    svc = _wfh_service()
    request = svc.submit(employee_id=STAFF, request_date=DAY, reason="Plumber visit")

    with pytest.raises(AuthorizationError):
        svc.approve_by_supervisor(request_id=request.request_id, actor_id=STAFF)


def test_hr_level_requires_hr_role():
    svc = _wfh_service()
    request = svc.submit(employee_id=STAFF, request_date=DAY, reason="Plumber visit")
    svc.approve_by_supervisor(request_id=request.request_id, actor_id=SUPERVISOR)

    with pytest.raises(AuthorizationError):
        svc.approve_by_hr(request_id=request.request_id, actor_id=SUPERVISOR, current_role=Role.STAFF)


def test_one_live_request_per_day():
    repo = InMemoryRequests()
    svc = _wfh_service(repo)
    svc.submit(employee_id=STAFF, request_date=DAY, reason="Plumber visit")

    with pytest.raises(OverlapConflictError):
        svc.submit(employee_id=STAFF, request_date=DAY, reason="Again")


def test_rejected_request_frees_the_day():
    svc = _wfh_service()
    first = svc.submit(employee_id=STAFF, request_date=DAY, reason="Plumber visit")
    svc.reject_by_supervisor(request_id=first.request_id, actor_id=SUPERVISOR)

    second = svc.submit(employee_id=STAFF, request_date=DAY, reason="Rescheduled")

    assert second.request_id != first.request_id


def test_submission_needs_an_approver():
    svc = _wfh_service(with_supervisor=False)

    with pytest.raises(NoApproverAvailableError):
        svc.submit(employee_id=STAFF, request_date=DAY, reason="Plumber visit")


def test_stale_update_is_refused():
    repo = InMemoryRequests()
    svc = _wfh_service(repo)
    request = svc.submit(employee_id=STAFF, request_date=DAY, reason="Plumber visit")

    class RacingRepo(InMemoryRequests):
        def update_if_status(self, request, *, expected):
            return False

    racing = RacingRepo()
    racing.rows = repo.rows
    with pytest.raises(InvalidTransitionError):
        _wfh_service(racing).approve_by_supervisor(request_id=request.request_id, actor_id=SUPERVISOR)


def test_overtime_actual_duration_is_recorded_once_approved():
    repo = InMemoryRequests()
    svc = OvertimeRequestService(repo, _chain(), clock=lambda: NOW)
    request = svc.submit(
        employee_id=STAFF, request_date=DAY, reason="Release", start_time=time(17, 0), end_time=time(20, 0)
    )
    assert request.planned_minutes == 180

    assert not svc.record_actual_duration(employee_id=STAFF, work_date=DAY, minutes=150)

    svc.approve_by_supervisor(request_id=request.request_id, actor_id=SUPERVISOR)
    svc.approve_by_hr(request_id=request.request_id, actor_id=HR_USER, current_role=Role.ADMIN)

    assert svc.record_actual_duration(employee_id=STAFF, work_date=DAY, minutes=150)
    assert svc.get(request.request_id).actual_duration_minutes == 150
