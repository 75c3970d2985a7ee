# tests/test_installments.py
from datetime import date
from decimal import Decimal

import pytest

from azlok.installments import (
    add_months,
    due_date_for,
    preview_installments,
    total_with_interest,
    validate_installment_plan,
)


def test_even_split():
    lines = preview_installments(1000, 4, start_date=date(2026, 10, 17))
    assert [line.amount for line in lines] == [Decimal("250.00")] * 4
    assert [line.number for line in lines] == [1, 2, 3, 4]
    assert lines[0].due_date == date(2026, 10, 17)


def test_last_installment_takes_remainder():
    lines = preview_installments(100, 3, start_date=date(2026, 1, 1))
    assert [str(line.amount) for line in lines] == ["33.33", "33.33", "33.34"]
    assert sum(line.amount for line in lines) == Decimal("100.00")


def test_small_totals_never_go_negative():
    lines = preview_installments(Decimal("0.90"), 24, start_date=date(2026, 1, 1))
    assert all(line.amount >= 0 for line in lines)
    assert [str(line.amount) for line in lines[-2:]] == ["0.03", "0.21"]
    assert sum(line.amount for line in lines) == Decimal("0.90")


def test_interest_and_fee():
    assert total_with_interest(1000, 12, 20) == Decimal("1140.00")
    lines = preview_installments(1000, 4, interest_rate=12, processing_fee=20, start_date=date(2026, 1, 1))
    assert [str(line.amount) for line in lines] == ["285.00"] * 4


def test_monthly_due_dates_clamp_to_month_end():
    lines = preview_installments(400, 4, "monthly", start_date=date(2026, 1, 31))
    assert [line.due_date for line in lines] == [
        date(2026, 1, 31), date(2026, 2, 28), date(2026, 3, 31), date(2026, 4, 30),
    ]
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2026, 11, 30), 3) == date(2027, 2, 28)


def test_weekly_and_biweekly():
    start = date(2026, 10, 17)
    assert due_date_for(start, 2, "weekly") == date(2026, 10, 31)
    assert due_date_for(start, 1, "biweekly") == date(2026, 10, 31)


def test_bad_inputs():
    with pytest.raises(ValueError):
        preview_installments(100, 0)
    with pytest.raises(ValueError):
        due_date_for(date(2026, 1, 1), 1, "daily")


def test_validation_messages():
    assert validate_installment_plan({
        "number_of_installments": 6,
        "installment_frequency": "biweekly",
        "start_date": "2026-11-01",
    }) == {}

    errors = validate_installment_plan({
        "number_of_installments": 25,
        "installment_frequency": "",
        "processing_fee": "abc",
    })
    assert errors == {
        "number_of_installments": "Cannot exceed 24 installments",
        "installment_frequency": "Frequency is required",
        "processing_fee": "Processing fee must be a number",
        "start_date": "Start date is required",
    }
