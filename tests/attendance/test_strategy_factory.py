from hris_engine.attendance.factory import AttendanceStrategyFactory
from hris_engine.attendance.model import DerivedAttendance
from hris_engine.attendance.strategies.early_strategy import EarlyLeaveStrategy
from hris_engine.attendance.strategies.late_strategy import LateStrategy
from hris_engine.attendance.strategies.normal_strategy import NormalStrategy
from hris_engine.attendance.strategies.wfh_strategy import WfhStrategy
from hris_engine.core.enums import AttendanceStatus


def test_factory_clock_in_within_tolerance_is_normal():
    derived = DerivedAttendance(late_minutes=4, billable_late_minutes=0)

    strategy = AttendanceStrategyFactory().for_clock_in(derived=derived, is_wfh=False)

    assert isinstance(strategy, NormalStrategy)
    assert strategy.decide_clock_in(derived=derived, is_wfh=False).status == AttendanceStatus.PRESENT


def test_factory_clock_in_late_after_tolerance():
    derived = DerivedAttendance(late_minutes=16, billable_late_minutes=6)

    strategy = AttendanceStrategyFactory().for_clock_in(derived=derived, is_wfh=True)

    assert isinstance(strategy, LateStrategy)
    decision = strategy.decide_clock_in(derived=derived, is_wfh=True)
    assert decision.status == AttendanceStatus.LATE
    assert decision.note == "late 6 min"


def test_factory_clock_in_wfh_on_time():
    strategy = AttendanceStrategyFactory().for_clock_in(derived=DerivedAttendance(), is_wfh=True)

    assert isinstance(strategy, WfhStrategy)


def test_factory_clock_out_early_only_from_present():
    derived = DerivedAttendance(early_leave_minutes=30, billable_early_leave_minutes=20)
    factory = AttendanceStrategyFactory()

    early = factory.for_clock_out(derived=derived, current_status=AttendanceStatus.PRESENT)
    assert isinstance(early, EarlyLeaveStrategy)
    assert early.decide_clock_out(derived=derived, current=AttendanceStatus.PRESENT).status == AttendanceStatus.EARLY_LEAVE

    kept = factory.for_clock_out(derived=derived, current_status=AttendanceStatus.LATE)
    assert kept.decide_clock_out(derived=derived, current=AttendanceStatus.LATE).status == AttendanceStatus.LATE
