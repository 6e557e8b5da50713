# api/database.py
"""Database session dependency for FastAPI."""

from typing import Generator

from sqlalchemy.orm import Session

from db.db_utils import get_session


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a database session.
    Automatically closes session after request completes.
    """
    db = get_session()
    try:
        yield db
    finally:
        db.close()
