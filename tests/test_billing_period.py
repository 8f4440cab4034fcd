import pytest

from billing_ledger.services.billing_period import (
    AFTER,
    BEFORE,
    EQUAL,
    Period,
    compare,
    enumerate_periods,
    is_before,
    months_between,
    next_period,
    period_of,
    previous,
)
from datetime import date


def test_compare_orders_by_year_then_month():
    assert compare(Period(12, 2024), Period(1, 2025)) == BEFORE
    assert compare(Period(1, 2025), Period(1, 2025)) == EQUAL
    assert compare(Period(2, 2025), Period(12, 2024)) == AFTER
    assert Period(12, 2024) < Period(1, 2025)
    assert sorted([Period(3, 2025), Period(11, 2024), Period(1, 2025)]) == [
        Period(11, 2024), Period(1, 2025), Period(3, 2025)
    ]


def test_previous_and_next_roll_over_year():
    assert previous(Period(1, 2025)) == Period(12, 2024)
    assert previous(Period(7, 2025)) == Period(6, 2025)
    assert next_period(Period(12, 2024)) == Period(1, 2025)


def test_is_before_admission():
    adm = Period(3, 2025)
    assert is_before(Period(2, 2025), adm)
    assert not is_before(Period(3, 2025), adm)
    assert not is_before(Period(1, 2026), adm)
    # unknown admission: nothing is billable
    assert is_before(Period(3, 2025), None)


def test_enumerate_is_inclusive_and_ascending():
    got = enumerate_periods(Period(11, 2024), Period(2, 2025))
    assert got == [Period(11, 2024), Period(12, 2024), Period(1, 2025), Period(2, 2025)]
    assert enumerate_periods(Period(5, 2025), Period(5, 2025)) == [Period(5, 2025)]


def test_enumerate_reversed_bounds_is_empty():
    assert enumerate_periods(Period(3, 2025), Period(2, 2025)) == []


def test_parse_period_of_and_distance():
    assert Period.parse("2025-01") == Period(1, 2025)
    assert Period.parse(" 2024-9 ") == Period(9, 2024)
    assert period_of(date(2025, 2, 28)) == Period(2, 2025)
    assert months_between(Period(1, 2025), Period(1, 2026)) == 12
    assert str(Period(2, 2025)) == "2025-02"
    assert Period(2, 2025).as_dict() == {"month": 2, "year": 2025}


@pytest.mark.parametrize("raw", ["2025", "2025-13", "Jan 2025", "", "2025-00"])
def test_parse_rejects_garbage(raw):
    with pytest.raises(ValueError):
        Period.parse(raw)


def test_month_out_of_range_rejected():
    with pytest.raises(ValueError):
        Period(0, 2025)
    with pytest.raises(ValueError):
        Period(13, 2025)
