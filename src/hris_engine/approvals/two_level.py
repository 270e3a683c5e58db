from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple, TypeVar

from ..core.enums import RequestStatus
from ..core.exceptions import InvalidTransitionError


class ApprovalAction(str, Enum):
    SUPERVISOR_APPROVE = "SUPERVISOR_APPROVE"
    SUPERVISOR_REJECT = "SUPERVISOR_REJECT"
    HR_APPROVE = "HR_APPROVE"
    HR_REJECT = "HR_REJECT"

    @property
    def is_supervisor_level(self) -> bool:
        return self in (ApprovalAction.SUPERVISOR_APPROVE, ApprovalAction.SUPERVISOR_REJECT)


# Closed table: anything not listed is an invalid transition.
TRANSITIONS: Dict[Tuple[RequestStatus, ApprovalAction], RequestStatus] = {
    (RequestStatus.PENDING_SUPERVISOR, ApprovalAction.SUPERVISOR_APPROVE): RequestStatus.PENDING_HR,
    (RequestStatus.PENDING_SUPERVISOR, ApprovalAction.SUPERVISOR_REJECT): RequestStatus.REJECTED_BY_SUPERVISOR,
    (RequestStatus.PENDING_HR, ApprovalAction.HR_APPROVE): RequestStatus.APPROVED,
    (RequestStatus.PENDING_HR, ApprovalAction.HR_REJECT): RequestStatus.REJECTED_BY_HR,
}

INITIAL_STATUS = RequestStatus.PENDING_SUPERVISOR


def next_status(current: RequestStatus, action: ApprovalAction) -> RequestStatus:
    try:
        return TRANSITIONS[(current, action)]
    except KeyError:
        raise InvalidTransitionError(f"Cannot {action.value} a request in status {current.value}") from None


R = TypeVar("R")


class TwoLevelApprovalWorkflow:
    """Supervisor -> HR state machine shared by WFH and overtime requests.

    Works on any frozen request dataclass carrying ``status`` plus the
    ``supervisor_*`` and ``hr_*`` stamp fields; returns the updated copy.
    """

    def apply(self, request: R, action: ApprovalAction, *, actor_id: int, at: datetime, note: Optional[str]) -> R:
        new_status = next_status(request.status, action)
        if action.is_supervisor_level:
            return replace(
                request,
                status=new_status,
                supervisor_id=actor_id,
                supervisor_action_at=at,
                supervisor_note=note,
            )
        return replace(request, status=new_status, hr_id=actor_id, hr_action_at=at, hr_note=note)

    def approve_by_supervisor(self, request: R, *, actor_id: int, at: datetime, note: Optional[str] = None) -> R:
        return self.apply(request, ApprovalAction.SUPERVISOR_APPROVE, actor_id=actor_id, at=at, note=note)

    def reject_by_supervisor(self, request: R, *, actor_id: int, at: datetime, note: Optional[str] = None) -> R:
        return self.apply(request, ApprovalAction.SUPERVISOR_REJECT, actor_id=actor_id, at=at, note=note)

    def approve_by_hr(self, request: R, *, actor_id: int, at: datetime, note: Optional[str] = None) -> R:
        return self.apply(request, ApprovalAction.HR_APPROVE, actor_id=actor_id, at=at, note=note)

    def reject_by_hr(self, request: R, *, actor_id: int, at: datetime, note: Optional[str] = None) -> R:
        return self.apply(request, ApprovalAction.HR_REJECT, actor_id=actor_id, at=at, note=note)
