import logging
from datetime import date
from typing import Iterable

from .models import LoanTerms, Prepayment, PrepaymentSaving, RateChange
from .schedule import build_schedule

logger = logging.getLogger(__name__)


def attribute_prepayments(
    principal: float,
    annual_rate: float,
    total_months: int,
    start_date: date,
    prepayments: Iterable[Prepayment] = (),
    rate_changes: Iterable[RateChange] = (),
) -> list[PrepaymentSaving]:
    """
    Marginal interest and months saved by each prepayment.

    Prepayments are taken in date order (ties keep their input order). The
    i-th one is credited with the difference between the schedule built
    from the first i-1 prepayments and the one built from the first i, so
    each saving is measured on top of every earlier prepayment rather than
    in isolation. The savings therefore add up to the total saving of the
    whole set against the no-prepayment baseline.

    Every step rebuilds the schedule from scratch with the same rate changes.
    """
    ordered = sorted(prepayments, key=lambda p: p.effective_date)
    rate_changes = tuple(rate_changes)

    previous = build_schedule(principal, annual_rate, total_months, start_date, (), rate_changes)
    savings = []

    for i, prepayment in enumerate(ordered, start=1):
        current = build_schedule(
            principal, annual_rate, total_months, start_date, ordered[:i], rate_changes
        )
        saving = PrepaymentSaving(
            prepayment=prepayment,
            interest_saved=previous.total_interest - current.total_interest,
            months_saved=previous.months_taken - current.months_taken,
        )
        logger.debug(
            "Prepayment %d (%s, %.2f): interest saved %.2f, months saved %d",
            i, prepayment.effective_date, prepayment.amount,
            saving.interest_saved, saving.months_saved,
        )
        savings.append(saving)
        previous = current

    return savings


def attribute_loan_prepayments(
    loan: LoanTerms,
    rate_changes: Iterable[RateChange] = (),
    prepayments: Iterable[Prepayment] = (),
) -> list[PrepaymentSaving]:
    return attribute_prepayments(
        loan.principal,
        loan.annual_rate,
        loan.total_months,
        loan.start_date,
        prepayments=prepayments,
        rate_changes=rate_changes,
    )
