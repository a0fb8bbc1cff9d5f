# sales_ops/gateway.py
"""
Data Gateway for the Sales Operations Dashboard

Handles all database interactions with the hosted Postgres project:
- Row-level reads on "Agent" and "Customer_Data"
- Aggregate SQL functions (dashboard totals, daily counts, per-agent counts)
- Server-side search / sort / pagination for the customer list
- The single allowed mutation (agent rename)

Every read degrades to an empty DataFrame or zero totals on error and
logs the failure, unless the gateway is built with raise_on_error=True
(the cached loaders, so a failure is never cached). update_agent_name()
and an incomplete iter_customer_batches() always raise.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple
import pandas as pd
from sqlalchemy import text

from .db import get_db_engine, execute_query_df, get_transaction

logger = logging.getLogger(__name__)

# Column sets returned by the gateway (snake_case aliases of the quoted schema)
AGENT_COLUMNS = ['agent_id', 'full_name', 'location', 'phone_number', 'created_at']
CUSTOMER_COLUMNS = ['customer_id', 'customer_name', 'customer_mobile', 'agent_id', 'created_at']
DAILY_COUNT_COLUMNS = ['date', 'customer_count']
AGENT_COUNT_COLUMNS = ['agent_id', 'customer_count']

# Sortable customer fields -> SQL column
CUSTOMER_SORT_COLUMNS = {
    'customer_name': '"Customer_Name"',
    'customer_id': '"Customer ID"',
    'created_at': '"Created at"',
}
CUSTOMER_TEXT_SORT_FIELDS = {'customer_name'}

SORT_DIRECTIONS = ('asc', 'desc')


class GatewayError(Exception):
    """Raised when a mutation fails, a strict read fails, or an export comes up short."""


@dataclass
class DashboardTotals:
    """Headline numbers returned by get_dashboard_metrics()."""
    total_customers: int = 0
    active_agents: int = 0
    avg_customers_per_day: float = 0.0


# =============================================================================
# SEARCH HELPERS
# =============================================================================

_DIGITS = re.compile(r"[0-9]+")


def parse_numeric_term(term: Optional[str]) -> Optional[int]:
    """Return the search term as an int when it is a plain ASCII digit string, else None."""
    if term is None:
        return None
    term = term.strip()
    if not _DIGITS.fullmatch(term):
        return None
    return int(term)


def _escape_like(value: str) -> str:
    return value.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def build_search_clause(
    term: Optional[str],
    text_columns: Tuple[str, ...],
    id_column: str
) -> Tuple[str, Dict]:
    """
    Build a WHERE fragment for a free-text search.

    Text columns match case-insensitively by substring. The id column is
    matched (as text) only when the term parses as an integer; otherwise
    the id clause is left out entirely.

    Args:
        term: Raw search term from the UI
        text_columns: Quoted SQL column names searched by substring
        id_column: Quoted SQL name of the numeric identifier

    Returns:
        Tuple of (sql_fragment, params). Fragment is "" for an empty term.
    """
    if term is None or not term.strip():
        return "", {}

    term = term.strip()
    params = {'search': f"%{_escape_like(term.lower())}%"}
    clauses = [
        f"LOWER(COALESCE(CAST({col} AS TEXT), '')) LIKE :search ESCAPE '\\'"
        for col in text_columns
    ]

    numeric = parse_numeric_term(term)
    if numeric is not None:
        clauses.append(f"CAST({id_column} AS TEXT) LIKE :id_search")
        params['id_search'] = f"%{numeric}%"

    return "(" + " OR ".join(clauses) + ")", params


def build_order_clause(sort_field: str, sort_dir: str) -> str:
    """
    Build an ORDER BY clause for the customer list.

    Text fields compare case-insensitively; NULLs sort like an empty
    string / 0 (first ascending, last descending). Customer ID is always
    the final tiebreaker so offset batches are repeatable.
    """
    if sort_field not in CUSTOMER_SORT_COLUMNS:
        raise ValueError(f"Unsupported sort field: {sort_field}")
    if sort_dir not in SORT_DIRECTIONS:
        raise ValueError(f"Unsupported sort direction: {sort_dir}")

    col = CUSTOMER_SORT_COLUMNS[sort_field]
    direction = sort_dir.upper()

    if sort_field in CUSTOMER_TEXT_SORT_FIELDS:
        terms = [f"LOWER(COALESCE({col}, '')) {direction}"]
    else:
        terms = [
            f"CASE WHEN {col} IS NULL THEN 0 ELSE 1 END {direction}",
            f"{col} {direction}",
        ]

    if sort_field != 'customer_id':
        terms.append('"Customer ID" ASC')

    return "ORDER BY " + ", ".join(terms)


# =============================================================================
# GATEWAY
# =============================================================================

class SalesGateway:
    """
    Narrow read/update interface over the hosted sales database.

    Usage:
        gateway = SalesGateway()

        totals = gateway.get_dashboard_metrics()
        daily_df = gateway.get_daily_customer_counts(days_back=120)
        page_df = gateway.list_customers("ali", "customer_name", "asc", offset=0, limit=25)
    """

    def __init__(self, engine=None, raise_on_error: bool = False):
        """
        Args:
            engine: Optional SQLAlchemy engine. Defaults to the shared
                    singleton from sales_ops.db on first use.
            raise_on_error: Raise GatewayError from failed reads instead
                    of returning the empty fallback.
        """
        self._engine = engine
        self.raise_on_error = raise_on_error

    @property
    def engine(self):
        """Lazy load database engine."""
        if self._engine is None:
            self._engine = get_db_engine()
        return self._engine

    # =========================================================================
    # AGGREGATE FUNCTIONS
    # =========================================================================

    def get_dashboard_metrics(self) -> DashboardTotals:
        """
        Call get_dashboard_metrics().

        The function may return either a single json object or a one-row
        table; both shapes are accepted.
        """
        df = self._execute_query(
            "SELECT * FROM get_dashboard_metrics()", {}, "dashboard_metrics"
        )
        if df.empty:
            return DashboardTotals()

        row = df.iloc[0].to_dict()
        if len(row) == 1 and isinstance(next(iter(row.values())), dict):
            row = next(iter(row.values()))

        try:
            return DashboardTotals(
                total_customers=int(row.get('total_customers') or 0),
                active_agents=int(row.get('active_agents') or 0),
                avg_customers_per_day=float(row.get('avg_customers_per_day') or 0),
            )
        except (TypeError, ValueError) as e:
            logger.error(f"Malformed dashboard metrics row {row}: {e}")
            return DashboardTotals()

    def get_daily_customer_counts(self, days_back: int = 120) -> pd.DataFrame:
        """
        Call get_daily_customer_counts(days_back).

        Returns:
            DataFrame[date (datetime.date), customer_count (int)]
        """
        df = self._execute_query(
            "SELECT * FROM get_daily_customer_counts(:days_back)",
            {'days_back': days_back},
            "daily_customer_counts",
            columns=DAILY_COUNT_COLUMNS,
        )
        if df.empty:
            return df

        df = df[DAILY_COUNT_COLUMNS].copy()
        df['date'] = pd.to_datetime(df['date']).dt.date
        df['customer_count'] = pd.to_numeric(df['customer_count'], errors='coerce').fillna(0).astype(int)
        return df

    def get_agent_customer_counts(self) -> pd.DataFrame:
        """
        Call get_agent_customer_counts().

        Returns:
            DataFrame[agent_id, customer_count]
        """
        df = self._execute_query(
            "SELECT * FROM get_agent_customer_counts()",
            {},
            "agent_customer_counts",
            columns=AGENT_COUNT_COLUMNS,
        )
        if df.empty:
            return df

        df = df[AGENT_COUNT_COLUMNS].copy()
        df['customer_count'] = pd.to_numeric(df['customer_count'], errors='coerce').fillna(0).astype(int)
        return df

    # =========================================================================
    # AGENTS
    # =========================================================================

    def list_agents(self) -> pd.DataFrame:
        """Load every agent in gateway (Agent ID) order."""
        query = """
            SELECT
                "Agent ID" AS agent_id,
                "Full Name" AS full_name,
                "Location" AS location,
                "Phone Number" AS phone_number,
                created_at
            FROM "Agent"
            ORDER BY "Agent ID"
        """
        return self._execute_query(query, {}, "agents", columns=AGENT_COLUMNS)

    def update_agent_name(self, agent_id: int, new_name: str) -> None:
        """
        Rename an agent.

        Raises:
            GatewayError: On any database error, or when no row was
                          updated (missing agent, or a row-level security
                          policy filtered the update out).
        """
        query = text('UPDATE "Agent" SET "Full Name" = :full_name WHERE "Agent ID" = :agent_id')

        try:
            with get_transaction(self.engine) as conn:
                result = conn.execute(query, {'full_name': new_name, 'agent_id': agent_id})
                rowcount = result.rowcount
        except Exception as e:
            logger.error(f"Error updating agent {agent_id}: {e}")
            raise GatewayError(str(e)) from e

        if rowcount == 0:
            raise GatewayError(
                f"Agent {agent_id} was not updated: row not found or blocked by row-level security policy"
            )

        logger.info(f"Agent {agent_id} renamed to '{new_name}'")

    # =========================================================================
    # CUSTOMERS
    # =========================================================================

    def list_customers(
        self,
        search: Optional[str] = None,
        sort_field: str = 'customer_id',
        sort_dir: str = 'desc',
        offset: int = 0,
        limit: Optional[int] = None
    ) -> pd.DataFrame:
        """
        Load one window of the filtered, sorted customer list.

        Args:
            search: Free-text term (name, mobile, or numeric id)
            sort_field: One of CUSTOMER_SORT_COLUMNS
            sort_dir: 'asc' or 'desc'
            offset: Rows to skip (only used together with limit)
            limit: Window size; None loads every matching row

        Returns:
            DataFrame with CUSTOMER_COLUMNS
        """
        where_sql, params = build_search_clause(
            search, ('"Customer_Name"', '"Customer_Mobile"'), '"Customer ID"'
        )

        query = """
            SELECT
                "Customer ID" AS customer_id,
                "Customer_Name" AS customer_name,
                "Customer_Mobile" AS customer_mobile,
                "Agent ID" AS agent_id,
                "Created at" AS created_at
            FROM "Customer_Data"
        """
        if where_sql:
            query += f" WHERE {where_sql}"

        query += " " + build_order_clause(sort_field, sort_dir)

        # LIMIT/OFFSET only added when a window is explicitly requested
        if limit is not None:
            query += " LIMIT :limit OFFSET :offset"
            params['limit'] = int(limit)
            params['offset'] = int(offset)

        return self._execute_query(query, params, "customers", columns=CUSTOMER_COLUMNS)

    def count_customers(self, search: Optional[str] = None) -> int:
        """Count customers matching the search, independent of any page window."""
        where_sql, params = build_search_clause(
            search, ('"Customer_Name"', '"Customer_Mobile"'), '"Customer ID"'
        )

        query = 'SELECT COUNT(*) AS total FROM "Customer_Data"'
        if where_sql:
            query += f" WHERE {where_sql}"

        df = self._execute_query(query, params, "customer_count")
        if df.empty:
            return 0
        return int(df.iloc[0]['total'])

    def iter_customer_batches(
        self,
        search: Optional[str] = None,
        sort_field: str = 'customer_id',
        sort_dir: str = 'desc',
        batch_size: int = 1000,
        expected_total: Optional[int] = None
    ) -> Iterator[pd.DataFrame]:
        """
        Yield the full filtered, sorted customer set in bounded batches.

        Stops after the first batch shorter than batch_size, so the hosted
        API's per-request row cap is never hit.

        Raises:
            GatewayError: When fewer than expected_total rows came back. A
                          failed batch reads as empty, so this is how a
                          mid-export failure surfaces.
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

        offset = 0
        fetched = 0
        while True:
            batch = self.list_customers(search, sort_field, sort_dir, offset=offset, limit=batch_size)
            if not batch.empty:
                fetched += len(batch)
                yield batch
            if len(batch) < batch_size:
                break
            offset += batch_size

        if expected_total is not None and fetched < expected_total:
            logger.error(f"Customer batches stopped at {fetched} of {expected_total} rows")
            raise GatewayError(f"Export incomplete: fetched {fetched} of {expected_total} customers")

        logger.debug(f"Customer batches exhausted at offset {offset} ({fetched} rows)")

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _execute_query(
        self,
        query: str,
        params: dict,
        query_name: str = "query",
        columns=None
    ) -> pd.DataFrame:
        """
        Execute SQL query and return DataFrame.

        Args:
            query: SQL query string
            params: Query parameters
            query_name: Name for logging
            columns: Columns of the empty fallback frame

        Returns:
            DataFrame with results, or an empty frame on error

        Raises:
            GatewayError: On error when raise_on_error is set
        """
        try:
            logger.debug(f"Executing {query_name}")
            df = execute_query_df(query, params, engine=self.engine)
            logger.debug(f"{query_name} returned {len(df)} rows")
            return df
        except Exception as e:
            logger.error(f"Error executing {query_name}: {e}")
            if self.raise_on_error:
                raise GatewayError(f"{query_name} failed: {e}") from e
            return pd.DataFrame(columns=columns or [])


__all__ = [
    'SalesGateway',
    'GatewayError',
    'DashboardTotals',
    'parse_numeric_term',
    'build_search_clause',
    'build_order_clause',
    'AGENT_COLUMNS',
    'CUSTOMER_COLUMNS',
    'CUSTOMER_SORT_COLUMNS',
]
