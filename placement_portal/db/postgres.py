"""
Relational store connection.

DATABASE_URL (or the postgres_* settings) picks the backend. Production runs
on PostgreSQL; the test suite points it at a SQLite file.
"""

import logging
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from placement_portal.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    """Pool options per backend. SQLite (tests) has no sized pool."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    # 5 warm connections, up to 10 more under load
    return {"pool_size": 5, "max_overflow": 10, "pool_pre_ping": True}


engine = create_engine(
    settings.postgres_url,
    echo=settings.debug,
    **_engine_options(settings.postgres_url)
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_session():
    """
    One transaction per block: commit on clean exit, roll back on any
    exception (HTTPException included) and re-raise.

    Usage:
        with get_db_session() as db:
            db.execute(text("DELETE FROM messages WHERE id = :id"), {"id": 1})
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def test_postgres_connection() -> bool:
    """True when the store answers a trivial query."""
    try:
        with get_db_session() as db:
            return db.execute(text("SELECT 1")).scalar() == 1
    except Exception as e:
        logger.warning("Database connection failed: %s", e)
        return False


def execute_raw_sql(sql: str, params: Optional[dict] = None) -> List[dict]:
    """Run one statement in its own transaction, rows as plain dicts."""
    with get_db_session() as db:
        result = db.execute(text(sql), params or {})
        return [dict(row) for row in result.mappings().all()]
