# pipeline/gold/invoice_reports.py
"""
Invoice dispute reports over the cleaned invoices table.

Answers:
1) How long invoices take to settle (per quarter and overall)
2) How long disputed invoices take to settle
3) Share of disputes lost
4) Share of disputed revenue lost
5) Country with the highest losses from lost disputes
"""

import logging
from typing import Dict, Optional

import pandas as pd

from pipeline.gold.reports import percent_of_total, require_columns, summarize
from pipeline.silver.invoices import (
    RESOLUTION_COMPANY,
    RESOLUTION_CUSTOMER,
    STATUS_ACCEPTED,
    STATUS_DISPUTED,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [
    "country", "customer_id", "invoice_number", "invoice_amount",
    "invoice_settled_date", "days_to_settle", "invoice_status", "invoice_dispute_resolution",
]


def _disputed(df: pd.DataFrame) -> pd.DataFrame:
    return df[df["invoice_status"] == STATUS_DISPUTED]


def _lost(df: pd.DataFrame) -> pd.DataFrame:
    return df[
        (df["invoice_status"] == STATUS_DISPUTED)
        & (df["invoice_dispute_resolution"] == RESOLUTION_CUSTOMER)
    ]


def _round_days(value) -> Optional[int]:
    return None if pd.isna(value) else int(round(value))


def settlement_by_quarter(invoices: pd.DataFrame, disputed_only: bool = False) -> pd.DataFrame:
    """Average and longest settlement time per settlement quarter."""
    require_columns(invoices, REQUIRED_COLUMNS, "settlement_by_quarter")
    df = _disputed(invoices) if disputed_only else invoices

    settled = pd.to_datetime(df["invoice_settled_date"], errors="coerce")
    df, settled = df[settled.notna()], settled[settled.notna()]
    df = df.assign(
        year=settled.dt.year.astype(int),
        quarter="Qtr" + settled.dt.quarter.astype(str),
    )

    report = summarize(df, ["year", "quarter"], {
        "invoice_count": ("invoice_number", "count"),
        "average_days_to_settle": ("days_to_settle", "mean"),
        "longest_days_to_settle": ("days_to_settle", "max"),
    })
    report["average_days_to_settle"] = report["average_days_to_settle"].round(0)
    return report


def settlement_stats(invoices: pd.DataFrame) -> pd.DataFrame:
    """Average / shortest / longest settlement time, for all and for disputed invoices."""
    require_columns(invoices, REQUIRED_COLUMNS, "settlement_stats")
    rows = []
    for scope, df in (("all", invoices), ("disputed", _disputed(invoices))):
        days = pd.to_numeric(df["days_to_settle"], errors="coerce")
        rows.append({
            "scope": scope,
            "invoice_count": len(df),
            "average_days_to_settle": _round_days(days.mean()),
            "shortest_days_to_settle": _round_days(days.min()),
            "longest_days_to_settle": _round_days(days.max()),
        })
    return pd.DataFrame(rows)


def dispute_outcomes(invoices: pd.DataFrame) -> pd.DataFrame:
    """Disputed invoices per resolution, with count and revenue shares."""
    require_columns(invoices, REQUIRED_COLUMNS, "dispute_outcomes")
    report = summarize(_disputed(invoices), "invoice_dispute_resolution", {
        "invoice_count": ("invoice_number", "count"),
        "invoice_amount": ("invoice_amount", "sum"),
    })
    report = percent_of_total(report, "invoice_count", "percentage_disputes")
    return percent_of_total(report, "invoice_amount", "percentage_revenue")


def lost_revenue_by_country(invoices: pd.DataFrame) -> pd.DataFrame:
    """Lost disputes per country, highest revenue loss first."""
    require_columns(invoices, REQUIRED_COLUMNS, "lost_revenue_by_country")
    report = summarize(_lost(invoices), "country", {
        "average_days_to_settle": ("days_to_settle", "mean"),
        "disputed_invoices": ("invoice_number", "count"),
        "revenue_lost": ("invoice_amount", "sum"),
    })
    report["average_days_to_settle"] = report["average_days_to_settle"].round(0)
    report = percent_of_total(report, "disputed_invoices", "percentage_disputes_lost")
    report = percent_of_total(report, "revenue_lost", "percentage_revenue_lost")
    return report.sort_values(
        ["revenue_lost", "country"], ascending=[False, True], kind="mergesort"
    ).reset_index(drop=True)


def invoice_summary(invoices: pd.DataFrame) -> pd.DataFrame:
    """The five analysis answers as a single row."""
    require_columns(invoices, REQUIRED_COLUMNS, "invoice_summary")
    stats = settlement_stats(invoices).set_index("scope")
    outcomes = dispute_outcomes(invoices).set_index("invoice_dispute_resolution")
    countries = lost_revenue_by_country(invoices)

    lost = outcomes.index == RESOLUTION_CUSTOMER
    return pd.DataFrame([{
        "average_invoice_settlement_time": stats.at["all", "average_days_to_settle"],
        "average_dispute_settlement_time": stats.at["disputed", "average_days_to_settle"],
        "percentage_disputes_lost": float(outcomes.loc[lost, "percentage_disputes"].sum()),
        "percentage_revenue_lost_disputes": float(outcomes.loc[lost, "percentage_revenue"].sum()),
        "top_country_revenue_loss": countries["country"].iloc[0] if not countries.empty else None,
    }])


def customer_distribution(invoices: pd.DataFrame, country: str) -> pd.DataFrame:
    """
    Lost / won / not disputed invoices per customer of one country.

    Customers with the largest lost amount come first.
    """
    require_columns(invoices, REQUIRED_COLUMNS, "customer_distribution")
    df = invoices[invoices["country"] == country]

    disputed = df["invoice_status"] == STATUS_DISPUTED
    outcome = pd.Series("won", index=df.index)
    outcome[disputed & (df["invoice_dispute_resolution"] == RESOLUTION_CUSTOMER)] = "lost"
    outcome[df["invoice_status"] == STATUS_ACCEPTED] = "not_disputed"

    amounts = pd.to_numeric(df["invoice_amount"], errors="coerce").fillna(0)
    columns = {}
    for name in ("lost", "not_disputed", "won"):
        hit = outcome == name
        columns[name] = hit.astype(int)
        columns[f"{name}_amount"] = amounts.where(hit, 0)
    flags = pd.DataFrame(columns, index=df.index).assign(customer_id=df["customer_id"])

    report = flags.groupby("customer_id", dropna=False).sum().reset_index()
    report["total"] = report[["lost", "not_disputed", "won"]].sum(axis=1)
    report["total_amount"] = report[["lost_amount", "not_disputed_amount", "won_amount"]].sum(axis=1)
    return report.sort_values(
        ["lost_amount", "customer_id"], ascending=[False, True], kind="mergesort"
    ).reset_index(drop=True)


def build_invoice_reports(invoices: pd.DataFrame, country: Optional[str] = None) -> Dict[str, pd.DataFrame]:
    """
    Every invoice report. The customer distribution is built for ``country``
    or, by default, the country with the highest losses.
    """
    reports = {
        "invoice_summary": invoice_summary(invoices),
        "settlement_by_quarter": settlement_by_quarter(invoices),
        "dispute_settlement_by_quarter": settlement_by_quarter(invoices, disputed_only=True),
        "settlement_stats": settlement_stats(invoices),
        "dispute_outcomes": dispute_outcomes(invoices),
        "lost_revenue_by_country": lost_revenue_by_country(invoices),
    }
    country = country or reports["invoice_summary"].at[0, "top_country_revenue_loss"]
    if country:
        reports["customer_distribution"] = customer_distribution(invoices, country)

    for name, report in reports.items():
        logger.info(f"  {name}: {len(report)} rows")
    return reports
