from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, Optional, Sequence

from ..approvals.chain import ApprovalChainResolver
from ..approvals.leave_chain import ChainedLeaveApprovalWorkflow
from ..common.datetime_utils import Clock, days_inclusive, now_local
from ..common.validators import require_date_range, require_non_empty
from ..core.enums import LeaveRequestStatus, LeaveType, Role
from ..core.exceptions import (
    AuthorizationError,
    InsufficientBalanceError,
    InvalidTransitionError,
    NotFoundError,
    OverlapConflictError,
    ValidationError,
)
from ..holidays.service import HolidayCalendar
from ..leave.service import LeaveBalanceEngine
from .model import LeaveRequest
from .repository import LeaveRequestRepository
from .service import DEFAULT_HR_ROLES

logger = logging.getLogger(__name__)


class LeaveRequestService:
    """Leave requests approved along the department hierarchy."""

    def __init__(
        self,
        requests: LeaveRequestRepository,
        chain: ApprovalChainResolver,
        balances: LeaveBalanceEngine,
        calendar: HolidayCalendar,
        *,
        exclude_holidays: bool = False,
        hr_roles: Iterable[Role | str] = DEFAULT_HR_ROLES,
        workflow: Optional[ChainedLeaveApprovalWorkflow] = None,
        clock: Clock = now_local,
    ):
        self._requests = requests
        self._chain = chain
        self._balances = balances
        self._calendar = calendar
        self._exclude_holidays = bool(exclude_holidays)
        self._hr_roles = frozenset(Role(r) for r in hr_roles)
        self._workflow = workflow or ChainedLeaveApprovalWorkflow()
        self._clock = clock

    def count_days(self, start: date, end: date) -> int:
        """Inclusive calendar days, minus holidays when configured."""
        require_date_range(start, end, field_name="leave period")
        days = days_inclusive(start, end)
        if self._exclude_holidays:
            days -= len(self._calendar.holidays_between(start, end))
        return days

    def get(self, request_id: int) -> LeaveRequest:
        request = self._requests.get_by_id(int(request_id))
        if request is None:
            raise NotFoundError(f"Leave request {request_id} not found")
        return request

    def submit(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> LeaveRequest:
        reason = require_non_empty(reason, "reason")
        total_days = self.count_days(start_date, end_date)
        if total_days <= 0:
            raise ValidationError("Leave period contains no working days")

        overlapping = self._requests.find_overlapping(employee_id=employee_id, start=start_date, end=end_date)
        if overlapping:
            clash = overlapping[0]
            raise OverlapConflictError(
                f"Leave overlaps request {clash.request_id} ({clash.start_date} - {clash.end_date}, {clash.status.value})"
            )

        if leave_type.deducts_from_balance:
            balance = self._balances.ensure_year(employee_id, start_date.year)
            if balance.balance < total_days:
                raise InsufficientBalanceError(
                    f"Insufficient leave balance: {balance.balance} left, {total_days} requested"
                )

        chain = self._chain.resolve_chain_for(employee_id)
        draft = LeaveRequest(
            request_id=None,
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            total_days=total_days,
            reason=reason,
            status=LeaveRequestStatus.PENDING,
            created_at=self._clock(),
        )
        request = self._workflow.start(draft, chain)
        request_id = self._requests.create(request)
        logger.info(
            "Leave request %s submitted by employee %s: %s %s..%s (%d days), first approver %s",
            request_id,
            employee_id,
            leave_type.value,
            start_date,
            end_date,
            total_days,
            request.current_approver_id,
        )
        return replace(request, request_id=request_id)

    def _persist(self, updated: LeaveRequest, previous: LeaveRequest) -> None:
        ok = self._requests.update_if_state(
            updated,
            expected_status=previous.status,
            expected_approver_id=previous.current_approver_id,
        )
        if not ok:
            raise InvalidTransitionError(f"Leave request {previous.request_id} was changed concurrently")

    def approve(self, *, request_id: int, actor_id: int) -> LeaveRequest:
        request = self.get(request_id)
        try:
            updated = self._workflow.approve(request, actor_id=actor_id, at=self._clock())
        except (InvalidTransitionError, AuthorizationError) as exc:
            logger.warning("Approval of leave request %s by %s refused: %s", request_id, actor_id, exc)
            raise

        if updated.status is not LeaveRequestStatus.APPROVED:
            self._persist(updated, request)
            logger.info(
                "Leave request %s approved by %s, forwarded to %s",
                request_id,
                actor_id,
                updated.current_approver_id,
            )
            return updated

        deducted = False
        if request.leave_type.deducts_from_balance:
            self._balances.deduct(request.employee_id, request.year, request.total_days)
            deducted = True

        try:
            self._persist(updated, request)
        except Exception:
            if deducted:
                # Compensate so balance and request stay consistent
                self._balances.reimburse(request.employee_id, request.year, request.total_days)
                logger.warning("Leave request %s not saved, %d day(s) reimbursed", request_id, request.total_days)
            raise

        logger.info("Leave request %s finally approved by %s", request_id, actor_id)
        return updated

    def reject(self, *, request_id: int, actor_id: int, reason: str) -> LeaveRequest:
        reason = require_non_empty(reason, "reason")
        request = self.get(request_id)
        try:
            updated = self._workflow.reject(request, actor_id=actor_id, reason=reason, at=self._clock())
        except (InvalidTransitionError, AuthorizationError) as exc:
            logger.warning("Rejection of leave request %s by %s refused: %s", request_id, actor_id, exc)
            raise

        self._persist(updated, request)
        logger.info("Leave request %s rejected by %s: %s", request_id, actor_id, reason)
        return updated

    def cancel(self, *, request_id: int, actor_id: int) -> None:
        request = self.get(request_id)
        if actor_id != request.employee_id:
            raise AuthorizationError("Only the requester can cancel a leave request")
        if request.status is not LeaveRequestStatus.PENDING:
            raise InvalidTransitionError(f"Only pending requests can be cancelled (status {request.status.value})")

        if not self._requests.delete(request.request_id):
            raise InvalidTransitionError(f"Leave request {request_id} could not be cancelled")
        logger.info("Leave request %s cancelled by employee %s", request_id, actor_id)

    def reimburse(self, *, request_id: int, current_role: Role) -> LeaveRequest:
        """Withdraw an approved annual leave and credit its days back."""
        if current_role not in self._hr_roles:
            raise AuthorizationError("Only HR may reimburse approved leave")

        request = self.get(request_id)
        if request.status is not LeaveRequestStatus.APPROVED:
            raise InvalidTransitionError(f"Only approved requests can be reimbursed (status {request.status.value})")
        if not request.leave_type.deducts_from_balance:
            raise ValidationError(f"{request.leave_type.value} leave does not use the annual balance")

        self._balances.reimburse(request.employee_id, request.year, request.total_days)
        if not self._requests.delete(request.request_id):
            self._balances.deduct(request.employee_id, request.year, request.total_days)
            raise InvalidTransitionError(f"Leave request {request_id} could not be withdrawn")
        logger.info("Leave request %s withdrawn, %d day(s) reimbursed", request_id, request.total_days)
        return request

    def is_on_leave(self, employee_id: int, day: date) -> bool:
        return any(
            r.status is LeaveRequestStatus.APPROVED
            for r in self._requests.find_overlapping(employee_id=employee_id, start=day, end=day)
        )

    def pending_for_approver(self, approver_id: int) -> Sequence[LeaveRequest]:
        return self._requests.list_pending_for_approver(approver_id)

    def stats(self, employee_id: int, *, year: Optional[int] = None) -> Dict[str, int]:
        counts = {status.value: 0 for status in LeaveRequestStatus}
        for request in self._requests.list_for_employee(employee_id, year=year):
            counts[request.status.value] += 1
        counts["TOTAL"] = sum(counts.values())
        return counts
