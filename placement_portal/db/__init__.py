"""
Database module - relational store connection and table definitions.
"""
from placement_portal.db.postgres import get_db_session, execute_raw_sql, test_postgres_connection
from placement_portal.db.schema import init_db, drop_db

__all__ = [
    "get_db_session",
    "execute_raw_sql",
    "test_postgres_connection",
    "init_db",
    "drop_db",
]
