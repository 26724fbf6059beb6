from datetime import date
from typing import Iterable

from .models import RateChange


def monthly_rate(annual_rate: float) -> float:
    """Annual percent -> monthly fraction (simple monthly compounding)."""
    return annual_rate / 1200


def compute_emi(principal: float, rate: float, months: int) -> float:
    """
    Level monthly instalment that amortizes `principal` over `months` at
    monthly rate `rate`:

        EMI = P * r * (1 + r)^n / ((1 + r)^n - 1)

    Degenerate tenures do not raise: 0 months means the whole principal is
    due at once, a negative tenure yields 0.
    """
    if months <= 0:
        return principal if months == 0 else 0.0
    if rate == 0:
        return principal / months
    growth = (1 + rate) ** months
    return principal * rate * growth / (growth - 1)


def rate_on_date(dt: date, rate_changes: Iterable[RateChange], initial_rate: float) -> float:
    """
    Annual rate in force on `dt`: the latest change dated on or before `dt`,
    else the loan's initial rate. Changes need not be sorted; of two changes
    on the same date the first listed wins.
    """
    applicable = None
    for rc in rate_changes:
        if rc.effective_date <= dt:
            if applicable is None or rc.effective_date > applicable.effective_date:
                applicable = rc
    return applicable.rate if applicable is not None else initial_rate
