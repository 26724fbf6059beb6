from typing import Iterable

import pandas as pd

from .models import PrepaymentSaving, Schedule

SCHEDULE_COLUMNS = [
    "Month",
    "Date",
    "Rate (%)",
    "Opening",
    "EMI",
    "Interest",
    "Principal Paid",
    "Prepayment",
    "Outstanding",
]
MONEY_COLUMNS = ["Opening", "EMI", "Interest", "Principal Paid", "Prepayment", "Outstanding"]


def schedule_frame(schedule: Schedule) -> pd.DataFrame:
    rows = [
        {
            "Month": r.month,
            "Date": r.date,
            "Rate (%)": r.rate,
            "Opening": r.opening,
            "EMI": r.emi,
            "Interest": r.interest,
            "Principal Paid": r.principal,
            "Prepayment": r.prepayment,
            "Outstanding": r.closing,
        }
        for r in schedule.rows
    ]
    return pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)


def schedule_csv(schedule: Schedule) -> str:
    """Schedule as CSV text: ISO dates, two decimals on rates and money."""
    df = schedule_frame(schedule)
    df["Date"] = df["Date"].map(lambda d: d.isoformat())
    return df.to_csv(index=False, float_format="%.2f", lineterminator="\n")


def savings_frame(savings: Iterable[PrepaymentSaving]) -> pd.DataFrame:
    rows = [
        {
            "#": i,
            "Date": s.prepayment.effective_date,
            "Type": s.prepayment.kind.value,
            "Amount": s.prepayment.amount,
            "Strategy": s.prepayment.strategy.value,
            "Interest Saved": round(s.interest_saved, 2),
            "Months Saved": s.months_saved,
        }
        for i, s in enumerate(savings, start=1)
    ]
    return pd.DataFrame(
        rows,
        columns=["#", "Date", "Type", "Amount", "Strategy", "Interest Saved", "Months Saved"],
    )


def comparison_frame(baseline: Schedule, scenario: Schedule) -> pd.DataFrame:
    """
    Closing balances of both schedules side by side, one row per payment
    date. Dates past the scenario's payoff show a scenario balance of 0.
    """
    comparison_df = (
        schedule_frame(baseline)[["Date", "Outstanding"]]
        .rename(columns={"Outstanding": "Baseline Outstanding"})
        .merge(
            schedule_frame(scenario)[["Date", "Outstanding"]]
            .rename(columns={"Outstanding": "Scenario Outstanding"}),
            on="Date",
            how="outer",
        )
        .sort_values("Date")
        .set_index("Date")
    )

    comparison_df["Scenario Outstanding"] = comparison_df["Scenario Outstanding"].fillna(0)
    return comparison_df


def chart_frame(baseline: Schedule, scenario: Schedule) -> pd.DataFrame:
    """Long-form balances for plotting (Date, Type, Outstanding)."""
    chart_df = comparison_frame(baseline, scenario).reset_index().melt(
        id_vars="Date",
        value_vars=["Baseline Outstanding", "Scenario Outstanding"],
        var_name="Type",
        value_name="Outstanding",
    )
    chart_df["Date"] = pd.to_datetime(chart_df["Date"])
    return chart_df
