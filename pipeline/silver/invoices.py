# pipeline/silver/invoices.py
"""Cleaning rules for the invoice disputes case study."""

import logging
from typing import Dict, Optional

import pandas as pd

from pipeline.common.config import CleaningPolicy
from pipeline.silver.utils import deduplicate, map_boolean_labels, to_date

logger = logging.getLogger(__name__)

DEDUP_KEYS = {"invoices": ["invoice_number"]}

STATUS_DISPUTED = "Disputed"
STATUS_ACCEPTED = "Accepted"
RESOLUTION_CUSTOMER = "In favor of Customer"
RESOLUTION_COMPANY = "In favor of Yellevate"


def label_disputes(df: pd.DataFrame) -> pd.DataFrame:
    """
    Replace the ``disputed`` / ``dispute_lost`` flags with readable labels.

    ``disputed`` -> invoice_status (Disputed / Accepted) and
    ``dispute_lost`` -> invoice_dispute_resolution (In favor of Customer /
    In favor of Yellevate). The two flags are mapped independently.
    """
    df = df.copy()
    df["invoice_status"] = map_boolean_labels(df["disputed"], STATUS_DISPUTED, STATUS_ACCEPTED)
    df["invoice_dispute_resolution"] = map_boolean_labels(
        df["dispute_lost"], RESOLUTION_CUSTOMER, RESOLUTION_COMPANY
    )
    return df.drop(columns=["disputed", "dispute_lost"])


def clean_invoices(df: pd.DataFrame, policy: Optional[CleaningPolicy] = None) -> pd.DataFrame:
    """Collapse re-submitted invoices and label the dispute flags."""
    df = deduplicate(df, DEDUP_KEYS["invoices"])
    for column in ("invoice_generated_date", "invoice_due_date", "invoice_settled_date"):
        df[column] = to_date(df[column])

    df = label_disputes(df)
    df = df.sort_values("invoice_number", kind="mergesort").reset_index(drop=True)

    logger.info(f"Invoices cleaned: {len(df)} records")
    return df


def clean_invoices_case(
    frames: Dict[str, pd.DataFrame],
    policy: Optional[CleaningPolicy] = None
) -> Dict[str, pd.DataFrame]:
    return {"invoices": clean_invoices(frames["invoices"], policy)}
