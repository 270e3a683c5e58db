from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence, TypeVar

from ..core.enums import LeaveRequestStatus, RequestStatus
from .model import LeaveRequest, TwoLevelRequest

R = TypeVar("R", bound=TwoLevelRequest)


class TwoLevelRequestRepository(Protocol[R]):
    """Store for WFH or overtime requests (one implementation per table)."""

    def get_by_id(self, request_id: int) -> Optional[R]:
        raise NotImplementedError

    def find_live_for_date(self, *, employee_id: int, request_date: date) -> Optional[R]:
        """A pending or approved request of the employee for that date."""
        raise NotImplementedError

    def create(self, request: R) -> int:
        raise NotImplementedError

    def update_if_status(self, request: R, *, expected: RequestStatus) -> bool:
        """Compare-and-swap: persist only if the stored status still equals ``expected``."""
        raise NotImplementedError

    def list_by_status(self, status: RequestStatus, *, supervisor_id: Optional[int] = None) -> Sequence[R]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int) -> Sequence[R]:
        raise NotImplementedError


class LeaveRequestRepository(Protocol):
    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create(self, request: LeaveRequest) -> int:
        raise NotImplementedError

    def update_if_state(
        self,
        request: LeaveRequest,
        *,
        expected_status: LeaveRequestStatus,
        expected_approver_id: Optional[int],
    ) -> bool:
        """Compare-and-swap on (status, current approver)."""
        raise NotImplementedError

    def find_overlapping(self, *, employee_id: int, start: date, end: date) -> Sequence[LeaveRequest]:
        """PENDING or APPROVED requests intersecting ``[start, end]``."""
        raise NotImplementedError

    def list_pending_for_approver(self, approver_id: int) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, year: Optional[int] = None) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def delete(self, request_id: int) -> bool:
        """Soft delete."""
        raise NotImplementedError
