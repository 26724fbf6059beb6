"""
Turn raw form / persisted state into engine inputs and back.

Raw state is what the UI collects and what gets saved: plain strings and
numbers, possibly blank or half filled. Incomplete rows are dropped the
way the calculator always did (no date, no usable rate, no positive
amount), but a date that is present and malformed raises InvalidInput.
"""
import math
from datetime import date
from typing import Iterable, Optional

from .errors import InvalidInput
from .models import LoanTerms, Prepayment, RateChange, parse_date, to_amount
from .summary import split_months

# keys used by state saved from the old browser calculator
_LEGACY_KEYS = {
    "startDate": "start_date",
    "initialRate": "initial_rate",
    "roi": "rates",
    "prepay": "prepayments",
}


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _number(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def collect_rate_changes(raw_rows: Iterable[dict]) -> list[RateChange]:
    changes = []
    for row in raw_rows or ():
        if _blank(row.get("date")):
            continue
        rate = _number(row.get("rate"))
        if rate is None:
            continue
        changes.append(RateChange(parse_date(row["date"]), rate))
    return sorted(changes, key=lambda r: r.effective_date)


def collect_prepayments(raw_rows: Iterable[dict]) -> list[Prepayment]:
    prepayments = []
    for row in raw_rows or ():
        if _blank(row.get("date")):
            continue
        amount = to_amount(row.get("amount"))
        if amount <= 0:
            continue
        prepayments.append(Prepayment(
            effective_date=parse_date(row["date"]),
            amount=amount,
            kind=row.get("kind") or row.get("type") or "one-time",
            strategy=row.get("strategy") or "reduce-tenure",
        ))
    return sorted(prepayments, key=lambda p: p.effective_date)


def normalize_state(state: dict) -> dict:
    if not isinstance(state, dict):
        raise InvalidInput(f"Saved state is not a mapping: {state!r}")
    normalized = dict(state)
    for legacy, key in _LEGACY_KEYS.items():
        if legacy in normalized and key not in normalized:
            normalized[key] = normalized.pop(legacy)
    return normalized


def loan_from_state(state: dict, today: Optional[date] = None):
    """
    Returns (LoanTerms, rate_changes, prepayments) from a raw state dict.
    A missing start date falls back to `today`.
    """
    state = normalize_state(state)
    start = state.get("start_date")
    if _blank(start):
        start = today or date.today()

    loan = LoanTerms.from_tenure(
        principal=state.get("principal"),
        annual_rate=state.get("initial_rate"),
        years=state.get("years"),
        months=state.get("months"),
        start_date=start,
    )
    return (
        loan,
        collect_rate_changes(state.get("rates", [])),
        collect_prepayments(state.get("prepayments", [])),
    )


def state_from_inputs(
    loan: LoanTerms,
    rate_changes: Iterable[RateChange] = (),
    prepayments: Iterable[Prepayment] = (),
) -> dict:
    years, months = split_months(loan.total_months)
    return {
        "principal": loan.principal,
        "years": years,
        "months": months,
        "start_date": loan.start_date.isoformat(),
        "initial_rate": loan.annual_rate,
        "rates": [
            {"date": r.effective_date.isoformat(), "rate": r.rate}
            for r in rate_changes
        ],
        "prepayments": [
            {
                "kind": p.kind.value,
                "amount": p.amount,
                "date": p.effective_date.isoformat(),
                "strategy": p.strategy.value,
            }
            for p in prepayments
        ],
    }
