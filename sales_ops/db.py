# sales_ops/db.py
"""
Database Engine for the hosted Postgres project

Features:
- One shared SQLAlchemy engine per process (lazy, lock-guarded)
- psycopg2 driver, TLS required by default
- Health check used by every page before loading data
- Small query helpers that accept an injected engine (tests use SQLite)
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import QueuePool

from .config import config

logger = logging.getLogger(__name__)

APPLICATION_NAME = "sales-ops-dashboard"

_engine: Optional[Engine] = None
_engine_lock = threading.Lock()


# =============================================================================
# ENGINE
# =============================================================================

def build_db_url(db_config: Dict[str, Any]) -> URL:
    """Connection URL from a DatabaseConfig dict; sslmode travels as a query arg."""
    query = {}
    if db_config.get("sslmode"):
        query["sslmode"] = db_config["sslmode"]

    return URL.create(
        db_config["driver"],
        username=db_config["user"],
        password=str(db_config["password"]),
        host=db_config["host"],
        port=db_config["port"],
        database=db_config["database"],
        query=query,
    )


def get_db_engine() -> Engine:
    """
    Shared engine, created on first use.

    Raises:
        ValueError: When DB_HOST / DB_USER / DB_PASSWORD are not configured
    """
    global _engine

    if _engine is None:
        with _engine_lock:
            if _engine is None:
                _engine = _build_engine()

    return _engine


def _build_engine() -> Engine:
    url = build_db_url(config.get_db_config())
    pool_size = config.get_app_setting("DB_POOL_SIZE", 5)
    pool_recycle = config.get_app_setting("DB_POOL_RECYCLE", 3600)

    engine = create_engine(
        url,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=pool_recycle,
        pool_pre_ping=True,
        connect_args={"application_name": APPLICATION_NAME},
    )

    logger.info(
        f"🔌 Engine ready for {url.render_as_string(hide_password=True)} "
        f"(pool_size={pool_size}, recycle={pool_recycle}s)"
    )
    return engine


def reset_db_engine():
    """Dispose the shared engine; the next call to get_db_engine() reconnects."""
    global _engine

    with _engine_lock:
        if _engine is None:
            return
        try:
            _engine.dispose()
        except Exception as e:
            logger.error(f"Error disposing engine: {e}")
        _engine = None

    logger.info("🔄 Database engine reset")


# =============================================================================
# HEALTH
# =============================================================================

def check_db_connection() -> Tuple[bool, Optional[str]]:
    """
    Ping the database.

    A failed connect also resets the engine so a later rerun starts
    from a fresh pool.

    Returns:
        (is_connected, user-facing error message or None)
    """
    try:
        with get_db_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return True, None
    except ValueError as e:
        logger.error(f"❌ Database not configured: {e}")
        return False, "Database is not configured. Please set DB_HOST, DB_USER and DB_PASSWORD."
    except OperationalError as e:
        logger.error(f"❌ Database unreachable: {e}")
        reset_db_engine()
        return False, "Cannot reach the database. Please check your network connection."
    except Exception as e:
        logger.error(f"❌ Database error: {e}")
        return False, f"Database error: {e}"


def get_connection_pool_status() -> Dict[str, Any]:
    """Pool counters for the debug panel on the home page."""
    if _engine is None:
        return {"status": "not_initialized"}

    pool = _engine.pool
    try:
        return {
            "status": "active",
            "pool_size": pool.size(),
            "checked_in": pool.checkedin(),
            "checked_out": pool.checkedout(),
            "overflow": pool.overflow(),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}


# =============================================================================
# QUERY HELPERS
# =============================================================================

@contextmanager
def get_transaction(engine: Optional[Engine] = None):
    """
    Connection inside one transaction: commit on exit, rollback on error.

    Usage:
        with get_transaction(engine) as conn:
            result = conn.execute(text('UPDATE "Agent" ...'), params)
    """
    engine = engine or get_db_engine()
    with engine.connect() as conn:
        trans = conn.begin()
        try:
            yield conn
            trans.commit()
        except Exception:
            trans.rollback()
            raise


def execute_query(query: str, params: Dict = None, engine: Optional[Engine] = None) -> List[Dict]:
    """Run a SELECT and return rows as plain dicts."""
    engine = engine or get_db_engine()

    with engine.connect() as conn:
        result = conn.execute(text(query), params or {})
        return [dict(row._mapping) for row in result]


def execute_query_df(query: str, params: Dict = None, engine: Optional[Engine] = None) -> pd.DataFrame:
    """Run a SELECT into a DataFrame."""
    engine = engine or get_db_engine()
    return pd.read_sql(text(query), engine, params=params or {})


def execute_update(query: str, params: Dict = None, engine: Optional[Engine] = None) -> int:
    """Run one INSERT/UPDATE/DELETE, commit, and return the affected row count."""
    with get_transaction(engine) as conn:
        result = conn.execute(text(query), params or {})
        return result.rowcount


__all__ = [
    'get_db_engine',
    'build_db_url',
    'check_db_connection',
    'reset_db_engine',
    'get_connection_pool_status',
    'get_transaction',
    'execute_query',
    'execute_query_df',
    'execute_update',
]
