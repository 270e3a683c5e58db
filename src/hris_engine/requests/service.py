from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, time
from typing import Generic, Iterable, Optional, Sequence, TypeVar

from ..approvals.chain import ApprovalChainResolver
from ..approvals.two_level import INITIAL_STATUS, ApprovalAction, TwoLevelApprovalWorkflow
from ..common.datetime_utils import Clock, now_local, span_minutes
from ..common.validators import clean_note, require_non_empty
from ..core.enums import RequestStatus, Role
from ..core.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NoApproverAvailableError,
    NotFoundError,
    OverlapConflictError,
    ValidationError,
)
from .model import OvertimeRequest, TwoLevelRequest, WfhRequest
from .repository import TwoLevelRequestRepository

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=TwoLevelRequest)

DEFAULT_HR_ROLES = (Role.HR, Role.ADMIN)


class TwoLevelRequestService(Generic[R]):
    """Use cases around a supervisor -> HR approved request type."""

    kind = "request"

    def __init__(
        self,
        requests: TwoLevelRequestRepository[R],
        chain: ApprovalChainResolver,
        *,
        hr_roles: Iterable[Role | str] = DEFAULT_HR_ROLES,
        workflow: Optional[TwoLevelApprovalWorkflow] = None,
        clock: Clock = now_local,
    ):
        self._requests = requests
        self._chain = chain
        self._hr_roles = frozenset(Role(r) for r in hr_roles)
        self._workflow = workflow or TwoLevelApprovalWorkflow()
        self._clock = clock

    def _submit(self, draft: R) -> R:
        existing = self._requests.find_live_for_date(employee_id=draft.employee_id, request_date=draft.request_date)
        if existing is not None:
            raise OverlapConflictError(
                f"Employee {draft.employee_id} already has a {existing.status.value} {self.kind} for {draft.request_date}"
            )

        chain = self._chain.resolve_chain_for(draft.employee_id)
        if not chain:
            raise NoApproverAvailableError(f"No supervisor available for employee {draft.employee_id}")

        request = replace(draft, status=INITIAL_STATUS, supervisor_id=chain[0])
        request_id = self._requests.create(request)
        logger.info(
            "%s %s submitted by employee %s for %s (supervisor=%s)",
            self.kind,
            request_id,
            draft.employee_id,
            draft.request_date,
            chain[0],
        )
        return replace(request, request_id=request_id)

    def get(self, request_id: int) -> R:
        request = self._requests.get_by_id(int(request_id))
        if request is None:
            raise NotFoundError(f"{self.kind} {request_id} not found")
        return request

    def _transition(self, request_id: int, action: ApprovalAction, *, actor_id: int, note: Optional[str]) -> R:
        request = self.get(request_id)
        if actor_id == request.employee_id:
            raise AuthorizationError("Requesters cannot act on their own request")

        try:
            updated = self._workflow.apply(request, action, actor_id=actor_id, at=self._clock(), note=clean_note(note))
        except InvalidTransitionError:
            logger.warning("Rejected %s on %s %s in status %s", action.value, self.kind, request_id, request.status.value)
            raise

        if not self._requests.update_if_status(updated, expected=request.status):
            raise InvalidTransitionError(f"{self.kind} {request_id} was changed concurrently")

        logger.info(
            "%s %s: %s -> %s by %s",
            self.kind,
            request_id,
            request.status.value,
            updated.status.value,
            actor_id,
        )
        return updated

    def _require_hr(self, current_role: Role) -> None:
        if current_role not in self._hr_roles:
            raise AuthorizationError("Only HR may act at the HR level")

    def approve_by_supervisor(self, *, request_id: int, actor_id: int, note: Optional[str] = None) -> R:
        return self._transition(request_id, ApprovalAction.SUPERVISOR_APPROVE, actor_id=actor_id, note=note)

    def reject_by_supervisor(self, *, request_id: int, actor_id: int, note: Optional[str] = None) -> R:
        return self._transition(request_id, ApprovalAction.SUPERVISOR_REJECT, actor_id=actor_id, note=note)

    def approve_by_hr(self, *, request_id: int, actor_id: int, current_role: Role, note: Optional[str] = None) -> R:
        self._require_hr(current_role)
        return self._transition(request_id, ApprovalAction.HR_APPROVE, actor_id=actor_id, note=note)

    def reject_by_hr(self, *, request_id: int, actor_id: int, current_role: Role, note: Optional[str] = None) -> R:
        self._require_hr(current_role)
        return self._transition(request_id, ApprovalAction.HR_REJECT, actor_id=actor_id, note=note)

    def pending_for_supervisor(self, supervisor_id: int) -> Sequence[R]:
        return self._requests.list_by_status(RequestStatus.PENDING_SUPERVISOR, supervisor_id=supervisor_id)

    def pending_for_hr(self) -> Sequence[R]:
        return self._requests.list_by_status(RequestStatus.PENDING_HR)

    def history(self, employee_id: int) -> Sequence[R]:
        return self._requests.list_for_employee(employee_id)

    def find_approved_for_date(self, employee_id: int, day: date) -> Optional[R]:
        request = self._requests.find_live_for_date(employee_id=employee_id, request_date=day)
        if request is not None and request.status is RequestStatus.APPROVED:
            return request
        return None

    def has_approved_for_date(self, employee_id: int, day: date) -> bool:
        return self.find_approved_for_date(employee_id, day) is not None


class WfhRequestService(TwoLevelRequestService[WfhRequest]):
    kind = "WFH request"

    def submit(
        self,
        *,
        employee_id: int,
        request_date: date,
        reason: str,
        work_location: Optional[str] = None,
    ) -> WfhRequest:
        draft = WfhRequest(
            request_id=None,
            employee_id=int(employee_id),
            request_date=request_date,
            reason=require_non_empty(reason, "reason"),
            status=INITIAL_STATUS,
            created_at=self._clock(),
            work_location=clean_note(work_location),
        )
        return self._submit(draft)


class OvertimeRequestService(TwoLevelRequestService[OvertimeRequest]):
    kind = "overtime request"

    def submit(
        self,
        *,
        employee_id: int,
        request_date: date,
        reason: str,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
    ) -> OvertimeRequest:
        planned = 0
        if start_time is not None and end_time is not None:
            if start_time == end_time:
                raise ValidationError("Overtime start and end must differ")
            planned = span_minutes(start_time, end_time, overnight=True)

        draft = OvertimeRequest(
            request_id=None,
            employee_id=int(employee_id),
            request_date=request_date,
            reason=require_non_empty(reason, "reason"),
            status=INITIAL_STATUS,
            created_at=self._clock(),
            start_time=start_time,
            end_time=end_time,
            planned_minutes=planned,
        )
        return self._submit(draft)

    def record_actual_duration(self, *, employee_id: int, work_date: date, minutes: int) -> bool:
        """Attach measured overtime to the approved request of that day, if any."""
        request = self.find_approved_for_date(employee_id, work_date)
        if request is None:
            return False

        updated = replace(request, actual_duration_minutes=max(0, int(minutes)))
        ok = self._requests.update_if_status(updated, expected=RequestStatus.APPROVED)
        if ok:
            logger.info(
                "Overtime request %s: actual duration %d min recorded",
                request.request_id,
                updated.actual_duration_minutes,
            )
        return ok
