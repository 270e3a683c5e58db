from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, List, Optional

from ..common.datetime_utils import Clock, now_local
from ..common.validators import clean_note, require_date_range
from ..core.enums import AssignmentFailure
from ..core.exceptions import DomainError, NotFoundError, OverlapConflictError, ValidationError
from ..users.repository import EmployeeRepository
from .model import EmployeeShiftSetting, ShiftPattern
from .repository import ShiftAssignmentRepository, ShiftCatalogRepository

logger = logging.getLogger(__name__)

SKIP_SAME_PATTERN = "SAME_PATTERN"


class InactiveEmployeeError(ValidationError):
    """Raised when assigning a shift to an employee who is not ACTIVE."""


@dataclass(frozen=True)
class AssignmentSuccess:
    employee_id: int
    setting_id: int
    before_pattern_name: Optional[str]
    after_pattern_name: str
    auto_closed: bool


@dataclass(frozen=True)
class AssignmentFailed:
    employee_id: int
    reason: AssignmentFailure
    message: str


@dataclass(frozen=True)
class AssignmentSkipped:
    employee_id: int
    reason: str
    pattern_name: str


@dataclass
class BulkAssignmentResult:
    pattern_id: int
    effective_from: date
    is_retroactive: bool
    days_ago: int
    succeeded: List[AssignmentSuccess] = field(default_factory=list)
    failed: List[AssignmentFailed] = field(default_factory=list)
    skipped: List[AssignmentSkipped] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed) + len(self.skipped)


class ShiftAssignmentService:
    """Assigns shift patterns to employees over date ranges."""

    def __init__(
        self,
        catalog: ShiftCatalogRepository,
        assignments: ShiftAssignmentRepository,
        employees: EmployeeRepository,
        *,
        clock: Clock = now_local,
    ):
        self._catalog = catalog
        self._assignments = assignments
        self._employees = employees
        self._clock = clock

    def current_assignment(self, employee_id: int, on: Optional[date] = None) -> Optional[EmployeeShiftSetting]:
        return self._assignments.get_active_on(employee_id=employee_id, work_date=on or self._clock().date())

    def assign_pattern(
        self,
        *,
        employee_id: int,
        pattern_id: int,
        effective_from: date,
        effective_to: Optional[date] = None,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AssignmentSuccess | AssignmentSkipped:
        require_date_range(effective_from, effective_to, field_name="effective range")
        pattern = self._require_pattern(pattern_id)
        return self._assign_one(
            employee_id=int(employee_id),
            pattern=pattern,
            effective_from=effective_from,
            effective_to=effective_to,
            reason=clean_note(reason),
            notes=clean_note(notes),
        )

    def bulk_assign(
        self,
        *,
        employee_ids: Iterable[int],
        pattern_id: int,
        effective_from: date,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> BulkAssignmentResult:
        """Assign one pattern to many employees; items never abort the batch.

        Each employee ends up in exactly one of succeeded / failed / skipped.
        Retroactive dates are flagged but allowed.
        """
        pattern = self._require_pattern(pattern_id)
        today = self._clock().date()
        days_ago = max(0, (today - effective_from).days)
        result = BulkAssignmentResult(
            pattern_id=pattern.pattern_id,
            effective_from=effective_from,
            is_retroactive=effective_from < today,
            days_ago=days_ago,
        )
        if result.is_retroactive:
            logger.warning("Retroactive bulk assignment of pattern %s (%d days ago)", pattern.pattern_id, days_ago)

        seen = set()
        for raw_id in employee_ids:
            employee_id = int(raw_id)
            if employee_id in seen:
                continue
            seen.add(employee_id)

            try:
                outcome = self._assign_one(
                    employee_id=employee_id,
                    pattern=pattern,
                    effective_from=effective_from,
                    effective_to=None,
                    reason=clean_note(reason),
                    notes=clean_note(notes),
                )
            except DomainError as exc:
                failure = AssignmentFailed(employee_id=employee_id, reason=self._classify(exc), message=str(exc))
                logger.warning("Bulk assign failed for employee %s: %s (%s)", employee_id, failure.reason.value, exc)
                result.failed.append(failure)
                continue

            if isinstance(outcome, AssignmentSkipped):
                result.skipped.append(outcome)
            else:
                result.succeeded.append(outcome)

        logger.info(
            "Bulk assign pattern %s from %s: %d ok, %d failed, %d skipped",
            pattern.pattern_id,
            effective_from,
            len(result.succeeded),
            len(result.failed),
            len(result.skipped),
        )
        return result

    @staticmethod
    def _classify(exc: DomainError) -> AssignmentFailure:
        if isinstance(exc, NotFoundError):
            return AssignmentFailure.EMPLOYEE_NOT_FOUND
        if isinstance(exc, InactiveEmployeeError):
            return AssignmentFailure.INACTIVE
        if isinstance(exc, OverlapConflictError):
            return AssignmentFailure.OVERLAP
        return AssignmentFailure.UNKNOWN

    def _require_pattern(self, pattern_id: int) -> ShiftPattern:
        pattern = self._catalog.get_pattern(int(pattern_id))
        if pattern is None:
            raise NotFoundError(f"Shift pattern {pattern_id} not found")
        return pattern

    def _pattern_name(self, pattern_id: int) -> Optional[str]:
        pattern = self._catalog.get_pattern(pattern_id)
        return pattern.name if pattern else None

    def _assign_one(
        self,
        *,
        employee_id: int,
        pattern: ShiftPattern,
        effective_from: date,
        effective_to: Optional[date],
        reason: Optional[str],
        notes: Optional[str],
    ) -> AssignmentSuccess | AssignmentSkipped:
        employee = self._employees.get_by_id(employee_id)
        if employee is None:
            raise NotFoundError(f"Employee {employee_id} not found")
        if not employee.is_active:
            raise InactiveEmployeeError(f"Employee {employee_id} is {employee.status.value}")

        settings = list(self._assignments.list_for_employee(employee_id))
        if any(
            s.is_open and s.pattern_id == pattern.pattern_id and s.effective_from <= effective_from
            for s in settings
        ):
            return AssignmentSkipped(employee_id=employee_id, reason=SKIP_SAME_PATTERN, pattern_name=pattern.name)

        current = next(
            (s for s in settings if s.is_open and s.effective_from < effective_from),
            None,
        )

        for existing in settings:
            if existing is current:
                continue
            if existing.effective_from >= effective_from or (
                existing.effective_to is not None and existing.covers(effective_from)
            ):
                raise OverlapConflictError(
                    f"Employee {employee_id} already has assignment {existing.setting_id} "
                    f"from {existing.effective_from} to {existing.effective_to or 'open'}"
                )

        before_name = None
        auto_closed = False
        if current is not None:
            before_name = self._pattern_name(current.pattern_id)
            auto_closed = self._assignments.close(
                setting_id=current.setting_id,
                effective_to=effective_from - timedelta(days=1),
            )

        setting_id = self._assignments.create(
            EmployeeShiftSetting(
                setting_id=None,
                employee_id=employee_id,
                pattern_id=pattern.pattern_id,
                effective_from=effective_from,
                effective_to=effective_to,
                reason=reason,
                notes=notes,
            )
        )
        logger.info(
            "Assigned pattern %s to employee %s from %s (previous=%s, auto_closed=%s)",
            pattern.pattern_id,
            employee_id,
            effective_from,
            before_name,
            auto_closed,
        )
        return AssignmentSuccess(
            employee_id=employee_id,
            setting_id=setting_id,
            before_pattern_name=before_name,
            after_pattern_name=pattern.name,
            auto_closed=auto_closed,
        )
