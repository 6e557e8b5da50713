# pipeline/silver/housing.py
"""
Cleaning rules for the housing sales case study.

1. Drop duplicate sale records
2. Fill missing property addresses from another raw record of the same parcel
3. Sale price text to numeric
4. Y / N to Yes / No
5. Default the remaining nulls
6. Split addresses into address / city (/ state)
"""

import logging
from typing import Dict, Optional

import pandas as pd

from pipeline.common.config import CleaningPolicy
from pipeline.silver.utils import NO_DATA_SENTINEL, deduplicate, fill_defaults, split_part, to_date

logger = logging.getLogger(__name__)

DEDUP_KEYS = {
    "housing_sales": ["parcel_id", "property_address", "sale_price", "sale_date", "legal_reference"],
}

VACANT_LABELS = {"Y": "Yes", "N": "No"}

TEXT_DEFAULTS = {
    "owner_name": NO_DATA_SENTINEL,
    "owner_address": NO_DATA_SENTINEL,
    "tax_district": NO_DATA_SENTINEL,
}
NUMERIC_DEFAULTS = {
    "acreage": 0,
    "land_value": 0,
    "building_value": 0,
    "total_value": 0,
    "bedrooms": 0,
    "full_bath": 0,
    "half_bath": 0,
}


def fill_property_address(df: pd.DataFrame, source: Optional[pd.DataFrame] = None) -> pd.DataFrame:
    """
    Fill a null property address with the first known address of the same parcel.

    Addresses are looked up in ``source`` (default: ``df`` itself), so rows
    dropped as duplicates can still supply an address.
    """
    df = df.copy()
    source = df if source is None else source
    known = (
        source[source["property_address"].notna() & source["parcel_id"].notna()]
        .sort_values("unique_id", kind="mergesort")
        .drop_duplicates(subset="parcel_id")
        .set_index("parcel_id")["property_address"]
    )
    missing = df["property_address"].isna()
    df.loc[missing, "property_address"] = df.loc[missing, "parcel_id"].map(known)
    filled = int(missing.sum() - df["property_address"].isna().sum())
    if filled:
        logger.info(f"  Filled {filled} property addresses from parcel records")
    return df


def parse_sale_price(series: pd.Series) -> pd.Series:
    """``$1,200,000`` -> 1200000.0"""
    cleaned = series.map(
        lambda v: str(v).replace(",", "").replace("$", "").strip(),
        na_action="ignore",
    )
    return pd.to_numeric(cleaned, errors="raise")


def split_addresses(df: pd.DataFrame) -> pd.DataFrame:
    """
    Break the comma separated addresses into parts.

    Property: "address, city". Owner: "address, city, state"; an owner
    address of "No Data" gives "No Data" for city and state as well.
    """
    df = df.copy()
    property_address = df["property_address"]
    df["property_address"] = split_part(property_address, ",", 1)
    df["property_city"] = split_part(property_address, ",", 2)

    owner_address = df["owner_address"]
    no_data = owner_address == NO_DATA_SENTINEL
    df["owner_address"] = split_part(owner_address, ",", 1)
    df["owner_city"] = split_part(owner_address, ",", 2).mask(no_data, NO_DATA_SENTINEL)
    df["owner_state"] = split_part(owner_address, ",", 3).mask(no_data, NO_DATA_SENTINEL)
    return df


def clean_housing_sales(df: pd.DataFrame, policy: Optional[CleaningPolicy] = None) -> pd.DataFrame:
    raw = df
    df = deduplicate(df, DEDUP_KEYS["housing_sales"], order_by="unique_id")
    df = fill_property_address(df, source=raw)

    df["sale_price"] = parse_sale_price(df["sale_price"])
    df["sale_date"] = to_date(df["sale_date"])
    df["sold_as_vacant"] = df["sold_as_vacant"].map(lambda v: VACANT_LABELS.get(v, v))

    df = fill_defaults(df, TEXT_DEFAULTS)
    df = fill_defaults(df, NUMERIC_DEFAULTS)
    df = split_addresses(df)

    df = df.sort_values(["property_address", "unique_id"], kind="mergesort").reset_index(drop=True)
    logger.info(f"Housing sales cleaned: {len(df)} records")
    return df


def clean_housing_case(
    frames: Dict[str, pd.DataFrame],
    policy: Optional[CleaningPolicy] = None
) -> Dict[str, pd.DataFrame]:
    return {"housing_sales": clean_housing_sales(frames["housing_sales"], policy)}
