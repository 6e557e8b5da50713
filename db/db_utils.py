# db/db_utils.py
"""
Database helpers shared by every layer.
Engine/session factories, full-refresh table management and DataFrame I/O.
"""

import logging
from functools import lru_cache
from typing import Iterable, List, Optional

import pandas as pd
from sqlalchemy import create_engine, func, insert, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from pipeline.common.config import get_settings

logger = logging.getLogger(__name__)

# Named schemas used by the layer models
LAYER_SCHEMAS = ("raw", "staging", "analytics")


# ENGINE AND SESSION

def build_engine(database_url: str) -> Engine:
    """
    Create an engine for the given URL.

    SQLite has no named schemas, so the layer schemas are translated away
    and every table lands in the main database.
    """
    engine = create_engine(database_url, pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        engine = engine.execution_options(
            schema_translate_map={schema: None for schema in LAYER_SCHEMAS}
        )
    return engine


@lru_cache(maxsize=8)
def _cached_engine(database_url: str) -> Engine:
    return build_engine(database_url)


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Return the (cached) engine for ``database_url`` or the configured URL."""
    return _cached_engine(database_url or get_settings().database_url)


def get_session(engine: Optional[Engine] = None) -> Session:
    """Open a new ORM session bound to ``engine``."""
    factory = sessionmaker(bind=engine or get_engine(), autoflush=False)
    return factory()


# SCHEMA AND TABLE MANAGEMENT

def create_schema(engine: Engine, schema: str) -> None:
    """Create a named schema if the backend supports it."""
    if engine.dialect.name == "sqlite":
        return
    with engine.begin() as conn:
        conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{schema}"'))
    logger.info(f"Schema '{schema}' created or already exists")


def recreate_tables(engine: Engine, tables: Iterable) -> None:
    """
    Drop and recreate the given tables (full refresh).

    Accepts Table objects or declarative model classes.
    """
    tables = [getattr(t, "__table__", t) for t in tables]
    if not tables:
        return

    for schema in {t.schema for t in tables if t.schema}:
        create_schema(engine, schema)

    metadata = tables[0].metadata
    metadata.drop_all(engine, tables=tables)
    metadata.create_all(engine, tables=tables)
    logger.info(f"Recreated tables: {', '.join(t.name for t in tables)}")


# DATAFRAME I/O

def clean_nulls(df: pd.DataFrame) -> pd.DataFrame:
    """Replace NaN/NaT/NA with None so the DBAPI receives proper NULLs."""
    df = df.astype(object)
    return df.where(pd.notna(df), None)


def table_columns(table, include_primary_key: bool = False) -> List[str]:
    """Column names of a table or model, optionally without the primary key."""
    table = getattr(table, "__table__", table)
    return [
        c.name for c in table.columns
        if include_primary_key or not c.primary_key
    ]


def insert_dataframe(
    df: pd.DataFrame,
    table,
    conn,
    batch_size: int = 1000
) -> int:
    """
    Insert a DataFrame into ``table`` in batches on an open connection.

    Only non-key columns that exist on the table are sent; the primary key
    is generated by the database. The caller owns the transaction, so a
    failure in any batch rolls back the whole insert.
    """
    table = getattr(table, "__table__", table)
    if df.empty:
        return 0

    writable = set(table_columns(table))
    columns = [c for c in df.columns if c in writable]
    records = clean_nulls(df[columns]).to_dict(orient="records")
    total = len(records)

    for i in range(0, total, batch_size):
        batch = records[i:i + batch_size]
        conn.execute(insert(table), batch)
        logger.debug(f"  Inserted batch {i // batch_size + 1} ({len(batch)} records) into {table.name}")

    logger.info(f"  {table.name}: {total} records inserted")
    return total


def read_table(table, engine: Engine) -> pd.DataFrame:
    """Read a whole table into a DataFrame, ordered by primary key when present."""
    table = getattr(table, "__table__", table)
    query = select(table)
    if table.primary_key.columns:
        query = query.order_by(*table.primary_key.columns)

    with engine.connect() as conn:
        df = pd.read_sql(query, conn)

    logger.info(f"Loaded {len(df)} rows from {table.name}")
    return df


def count_rows(table, engine: Engine) -> int:
    """Row count of a table."""
    table = getattr(table, "__table__", table)
    with engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(table)).scalar_one()
