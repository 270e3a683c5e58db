from __future__ import annotations

import threading
from datetime import date, time
from decimal import Decimal

from hris_engine.common.datetime_utils import add_months, days_inclusive, ranges_overlap, span_minutes
from hris_engine.common.locks import KeyedLock
from hris_engine.common.money import capped_deduction, to_amount


def test_capped_deduction():
    assert capped_deduction(Decimal("1000"), 90, Decimal("50000")) == Decimal("50000.00")
    assert capped_deduction(Decimal("1000"), 30, Decimal("50000")) == Decimal("30000.00")
    assert capped_deduction(Decimal("1000"), 30, None) == Decimal("30000.00")
    assert capped_deduction(Decimal("0"), 30, Decimal("50000")) == Decimal("0.00")
    assert capped_deduction(Decimal("0.005"), 1000, None) == Decimal("5.00")


def test_to_amount_rounds_half_up():
    assert to_amount("1.005") == Decimal("1.01")
    assert to_amount(None) == Decimal("0.00")


def test_span_minutes_wraps_overnight():
    assert span_minutes(time(22, 0), time(6, 0), overnight=True) == 480
    assert span_minutes(time(8, 0), time(17, 0), overnight=False) == 540


def test_add_months_clamps_to_month_end():
    assert add_months(date(2026, 8, 31), 6) == date(2027, 2, 28)
    assert add_months(date(2026, 1, 5), 6) == date(2026, 7, 5)


def test_date_ranges():
    assert days_inclusive(date(2026, 3, 9), date(2026, 3, 11)) == 3
    assert ranges_overlap(date(2026, 1, 1), None, date(2030, 1, 1), date(2030, 1, 2))
    assert not ranges_overlap(date(2026, 1, 1), date(2026, 1, 31), date(2026, 2, 1), None)


def test_keyed_lock_serialises_one_key_and_cleans_up():
    locks = KeyedLock()
    counter = {"value": 0}

    def bump():
        for _ in range(200):
            with locks.hold((1, date(2026, 2, 2))):
                current = counter["value"]
                counter["value"] = current + 1

    threads = [threading.Thread(target=bump) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert counter["value"] == 800
    assert len(locks) == 0
