import logging
from calendar import monthrange
from datetime import date
from typing import Iterable

from .errors import ScheduleDidNotConverge
from .models import (
    LoanTerms, Prepayment, RateChange, Schedule, ScheduleRow, Strategy,
    parse_date, to_amount, to_months,
)
from .rates import compute_emi, monthly_rate, rate_on_date

logger = logging.getLogger(__name__)

# balance at or below this is treated as paid off (currency units)
EPSILON = 0.005
# months allowed beyond the contracted tenure before giving up
EXTRA_MONTHS = 600
MAX_ITERATIONS = 5000
# an EMI below this is treated as zero and re-amortized
ZERO_EMI = 1e-5


def add_months(start: date, months: int) -> date:
    """
    Shift `start` by whole calendar months, clamping to the last day of the
    target month (Jan 31 + 1 month -> Feb 28/29).
    """
    year = start.year + (start.month - 1 + months) // 12
    month = (start.month - 1 + months) % 12 + 1
    day = min(start.day, monthrange(year, month)[1])
    return date(year, month, day)


def build_schedule(
    principal: float,
    annual_rate: float,
    total_months: int,
    start_date: date,
    prepayments: Iterable[Prepayment] = (),
    rate_changes: Iterable[RateChange] = (),
) -> Schedule:
    """
    Month-by-month amortization of a loan under variable rates and prepayments.

    Each month the rate in force on the payment date is applied to the
    opening balance, the current EMI pays interest first and principal
    second, and every prepayment falling due that month is applied on top,
    capped so the balance never goes below zero.

    A month in which any applied prepayment asks for `reduce-emi` re-amortizes
    the remaining balance over what is left of the original tenure; otherwise
    the EMI stays put and the loan simply ends sooner.

    A tenure of zero or less, or a principal that is already paid off, gives
    an empty schedule; `base_emi` still reports the degenerate EMI (the whole
    principal for 0 months, 0 for a negative tenure).

    Raises:
        InvalidInput: if `start_date` is not a usable date
        ScheduleDidNotConverge: if the balance is still outstanding once the
            iteration ceiling is reached
    """
    principal = to_amount(principal)
    annual_rate = to_amount(annual_rate)
    total_months = to_months(total_months)
    start_date = parse_date(start_date)
    prepayments = tuple(prepayments)
    rate_changes = tuple(rate_changes)

    base_emi = compute_emi(principal, monthly_rate(annual_rate), total_months)
    if total_months <= 0 or principal <= EPSILON:
        return Schedule(rows=(), months_taken=0, base_emi=base_emi)

    ceiling = min(total_months + EXTRA_MONTHS, MAX_ITERATIONS)
    current_emi = base_emi
    outstanding = principal
    rows = []
    month = 1

    while outstanding > EPSILON and month <= ceiling:
        payment_date = add_months(start_date, month - 1)

        annual = rate_on_date(payment_date, rate_changes, annual_rate)
        rate = monthly_rate(annual)

        interest = outstanding * rate
        # a stale EMI after a rate drop must not pay more than what is owed
        principal_paid = max(0.0, min(current_emi - interest, outstanding))

        prepaid = 0.0
        reduce_emi = False
        for p in prepayments:
            if not p.applies_on(payment_date):
                continue
            applied = min(p.amount, max(0.0, outstanding - principal_paid - prepaid))
            if applied > 0:
                prepaid += applied
                reduce_emi = reduce_emi or p.strategy is Strategy.REDUCE_EMI

        closing = max(0.0, outstanding - principal_paid - prepaid)

        rows.append(ScheduleRow(
            month=month,
            date=payment_date,
            rate=annual,
            opening=outstanding,
            emi=principal_paid + interest,
            interest=interest,
            principal=principal_paid,
            prepayment=prepaid,
            closing=closing,
        ))

        outstanding = closing

        if outstanding > EPSILON:
            months_left = max(1, total_months - month)
            if reduce_emi:
                current_emi = compute_emi(outstanding, rate, months_left)
                logger.debug("Month %d: EMI re-amortized to %.2f over %d months", month, current_emi, months_left)
            elif current_emi < ZERO_EMI:
                current_emi = compute_emi(outstanding, rate, months_left)
                logger.warning("Month %d: zero EMI with %.2f outstanding, re-amortized to %.2f", month, outstanding, current_emi)

        month += 1

    if outstanding > EPSILON:
        logger.warning("Schedule stopped at the %d month ceiling with %.2f outstanding", ceiling, outstanding)
        raise ScheduleDidNotConverge(len(rows), outstanding)

    logger.debug("Built schedule: %d months, base EMI %.2f", len(rows), base_emi)
    return Schedule(rows=tuple(rows), months_taken=len(rows), base_emi=base_emi)


def compute_schedule(
    loan: LoanTerms,
    rate_changes: Iterable[RateChange] = (),
    prepayments: Iterable[Prepayment] = (),
) -> Schedule:
    return build_schedule(
        loan.principal,
        loan.annual_rate,
        loan.total_months,
        loan.start_date,
        prepayments=prepayments,
        rate_changes=rate_changes,
    )
