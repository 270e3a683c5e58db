from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Sequence

from ..core.enums import LeaveRequestStatus
from ..core.exceptions import AuthorizationError, InvalidTransitionError, NoApproverAvailableError
from ..requests.model import LeaveRequest


class ChainedLeaveApprovalWorkflow:
    """PENDING -> APPROVED | REJECTED, advancing one approver at a time."""

    def start(self, request: LeaveRequest, chain: Sequence[int]) -> LeaveRequest:
        if not chain:
            raise NoApproverAvailableError(f"No approver available for employee {request.employee_id}")
        return replace(
            request,
            status=LeaveRequestStatus.PENDING,
            approval_chain=tuple(chain),
            current_approver_id=chain[0],
        )

    @staticmethod
    def _require_pending(request: LeaveRequest) -> None:
        if request.status is not LeaveRequestStatus.PENDING:
            raise InvalidTransitionError(f"Leave request {request.request_id} is already {request.status.value}")

    def approve(self, request: LeaveRequest, *, actor_id: int, at: datetime) -> LeaveRequest:
        """Advance the pointer, or finalise when the actor is the last approver."""
        self._require_pending(request)
        if actor_id != request.current_approver_id:
            raise AuthorizationError(f"Employee {actor_id} is not the current approver of request {request.request_id}")

        chain = request.approval_chain
        position = chain.index(actor_id)
        if position + 1 < len(chain):
            return replace(request, current_approver_id=chain[position + 1])

        return replace(
            request,
            status=LeaveRequestStatus.APPROVED,
            current_approver_id=None,
            approved_by=actor_id,
            approved_at=at,
        )

    def reject(self, request: LeaveRequest, *, actor_id: int, reason: str, at: datetime) -> LeaveRequest:
        self._require_pending(request)
        if actor_id != request.current_approver_id and actor_id not in request.approval_chain:
            raise AuthorizationError(f"Employee {actor_id} is not in the approval chain of request {request.request_id}")

        return replace(
            request,
            status=LeaveRequestStatus.REJECTED,
            current_approver_id=None,
            rejected_by=actor_id,
            rejected_at=at,
            rejection_reason=reason,
        )
