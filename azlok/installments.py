# azlok/installments.py
"""
Installment plan preview.

Simple-interest arithmetic used to show a buyer what each installment will
cost before the plan is submitted; the backend owns the real schedule.
"""
import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

Number = Union[int, float, str, Decimal]

CENT = Decimal("0.01")
MIN_INSTALLMENTS = 2
MAX_INSTALLMENTS = 24


class InstallmentFrequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class InstallmentLine:
    number: int
    due_date: date
    amount: Decimal


def _dec(value: Number) -> Decimal:
    return Decimal(str(value))


def add_months(start: date, months: int) -> date:
    """Same day `months` later, clamped to the last day of the target month"""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def due_date_for(start: date, index: int, frequency: Union[str, InstallmentFrequency]) -> date:
    frequency = InstallmentFrequency(frequency)
    if frequency is InstallmentFrequency.WEEKLY:
        return start + timedelta(days=7 * index)
    if frequency is InstallmentFrequency.BIWEEKLY:
        return start + timedelta(days=14 * index)
    return add_months(start, index)


def total_with_interest(total_amount: Number, interest_rate: Number = 0, processing_fee: Number = 0) -> Decimal:
    """principal * (1 + rate%) + fee, rounded to cents"""
    total = _dec(total_amount) * (1 + _dec(interest_rate) / 100) + _dec(processing_fee)
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


def preview_installments(
    total_amount: Number,
    number_of_installments: int,
    frequency: Union[str, InstallmentFrequency] = InstallmentFrequency.MONTHLY,
    interest_rate: Number = 0,
    processing_fee: Number = 0,
    start_date: Optional[date] = None,
) -> List[InstallmentLine]:
    """
    Split the interest-bearing total evenly across the installments.

    Each amount is rounded down to cents and the final installment carries
    the leftover cents, so the lines always sum to the plan total and none
    is negative.
    """
    if number_of_installments < 1:
        raise ValueError("number_of_installments must be >= 1")
    start = start_date or date.today()
    total = total_with_interest(total_amount, interest_rate, processing_fee)
    each = (total / number_of_installments).quantize(CENT, rounding=ROUND_DOWN)

    lines = []
    for i in range(number_of_installments):
        amount = each
        if i == number_of_installments - 1:
            amount = total - each * (number_of_installments - 1)
        lines.append(InstallmentLine(number=i + 1, due_date=due_date_for(start, i, frequency), amount=amount))
    return lines


def validate_installment_plan(data: Dict[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    try:
        count = int(data.get("number_of_installments") or 0)
    except (TypeError, ValueError):
        count = 0
    if count < MIN_INSTALLMENTS:
        errors["number_of_installments"] = f"Must be at least {MIN_INSTALLMENTS} installments"
    elif count > MAX_INSTALLMENTS:
        errors["number_of_installments"] = f"Cannot exceed {MAX_INSTALLMENTS} installments"

    frequency = data.get("installment_frequency")
    if not frequency:
        errors["installment_frequency"] = "Frequency is required"
    elif frequency not in {f.value for f in InstallmentFrequency}:
        errors["installment_frequency"] = f"Unknown frequency '{frequency}'"

    for field, label in (("interest_rate", "Interest rate"), ("processing_fee", "Processing fee")):
        try:
            if _dec(data.get(field) or 0) < 0:
                errors[field] = f"{label} cannot be negative"
        except ArithmeticError:
            errors[field] = f"{label} must be a number"

    if not data.get("start_date"):
        errors["start_date"] = "Start date is required"

    return errors
