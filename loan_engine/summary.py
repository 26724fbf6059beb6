from dataclasses import dataclass

from .models import Schedule


@dataclass(frozen=True)
class ImpactMetrics:
    baseline_interest: float
    scenario_interest: float
    interest_saved: float
    baseline_months: int
    scenario_months: int
    months_saved: int


@dataclass(frozen=True)
class LoanSummary:
    emi: float
    total_interest: float
    total_payment: float
    months_taken: int
    remaining_years: int
    remaining_months: int


def split_months(months: int) -> tuple[int, int]:
    """120 -> (10, 0); 27 -> (2, 3)."""
    months = max(0, int(months))
    return months // 12, months % 12


def impact_metrics(baseline: Schedule, scenario: Schedule) -> ImpactMetrics:
    baseline_interest = baseline.total_interest
    scenario_interest = scenario.total_interest

    return ImpactMetrics(
        baseline_interest=baseline_interest,
        scenario_interest=scenario_interest,
        interest_saved=baseline_interest - scenario_interest,
        baseline_months=baseline.months_taken,
        scenario_months=scenario.months_taken,
        months_saved=baseline.months_taken - scenario.months_taken,
    )


def summarize(baseline: Schedule, scenario: Schedule) -> LoanSummary:
    """
    Headline figures: the origination EMI and lifetime totals of the
    baseline loan, plus how long the scenario takes to clear.
    """
    years, months = split_months(scenario.months_taken)
    return LoanSummary(
        emi=baseline.base_emi,
        total_interest=baseline.total_interest,
        total_payment=baseline.total_emi_paid,
        months_taken=scenario.months_taken,
        remaining_years=years,
        remaining_months=months,
    )
