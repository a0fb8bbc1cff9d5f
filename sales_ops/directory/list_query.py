# sales_ops/directory/list_query.py
"""
List Query Pipeline for the Agents and Customers views

Turns (search, sort, page) into the exact row window and total count
to display:
- Customers are filtered, sorted, counted and windowed by the gateway (SQL)
- Agents are a small set joined to per-agent counts, so the same
  semantics are applied in pandas

Shared rules:
- Search is a case-insensitive substring over fixed text columns, OR a
  substring over the numeric id when the term parses as an integer
- Missing values sort like "" / 0; the record id breaks ties ascending
- total_count is independent of the page window
- Out-of-range pages are clamped to the last valid page
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple
import pandas as pd

from sales_ops.gateway import SalesGateway, parse_numeric_term
from .constants import (
    AGENT_ID_COLUMN,
    AGENT_SEARCH_COLUMNS,
    DEFAULT_PAGE_SIZE,
    EXPORT_BATCH_SIZE,
    SORT_DIRECTIONS,
    STATUS_OPTIONS,
    UNKNOWN_AGENT,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListQuery:
    """Query parameters for one list view render."""
    sort_field: str
    sort_dir: str = 'asc'
    search: str = ''
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    status: str = 'all'

    def __post_init__(self):
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.page_size <= 0:
            raise ValueError("page_size must be > 0")
        if self.sort_dir not in SORT_DIRECTIONS:
            raise ValueError(f"Unsupported sort direction: {self.sort_dir}")
        if self.status not in STATUS_OPTIONS:
            raise ValueError(f"Unsupported status filter: {self.status}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class PageResult:
    """One rendered page of a list view."""
    rows: pd.DataFrame
    total_count: int
    page: int
    page_count: int
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def first_row(self) -> int:
        """1-based index of the first row shown (0 when empty)."""
        if self.rows.empty:
            return 0
        return (self.page - 1) * self.page_size + 1

    @property
    def last_row(self) -> int:
        if self.rows.empty:
            return 0
        return self.first_row + len(self.rows) - 1


# =============================================================================
# PAGINATION
# =============================================================================

def page_count(total_count: int, page_size: int) -> int:
    """Number of pages; an empty set still has one (empty) page."""
    return max(1, math.ceil(total_count / page_size))


def clamp_page(page: int, page_size: int, total_count: int) -> int:
    """Clamp a requested page into [1, page_count]."""
    return min(max(page, 1), page_count(total_count, page_size))


def paginate(df: pd.DataFrame, page: int, page_size: int) -> pd.DataFrame:
    start = (page - 1) * page_size
    return df.iloc[start:start + page_size].reset_index(drop=True)


# =============================================================================
# IN-MEMORY FILTER & SORT
# =============================================================================

def filter_frame(
    df: pd.DataFrame,
    term: Optional[str],
    text_columns: Tuple[str, ...],
    id_column: str
) -> pd.DataFrame:
    """
    Keep rows matching a free-text search term.

    Args:
        df: Rows to filter
        term: Search term; empty keeps everything
        text_columns: Columns matched case-insensitively by substring
        id_column: Numeric id column, matched only for integer terms
    """
    if df.empty or term is None or not term.strip():
        return df

    term = term.strip()
    needle = term.lower()

    mask = pd.Series(False, index=df.index)
    for col in text_columns:
        mask |= df[col].astype('string').str.lower().str.contains(needle, regex=False, na=False)

    numeric = parse_numeric_term(term)
    if numeric is not None:
        mask |= df[id_column].astype('string').str.contains(str(numeric), regex=False, na=False)

    return df[mask.astype(bool)]


def _sort_key(series: pd.Series) -> pd.Series:
    if pd.api.types.is_bool_dtype(series):
        return series
    if pd.api.types.is_numeric_dtype(series):
        return series.fillna(0)
    if pd.api.types.is_datetime64_any_dtype(series):
        return series
    return series.astype('string').fillna('').str.lower()


def sort_frame(
    df: pd.DataFrame,
    sort_field: str,
    sort_dir: str,
    id_column: str
) -> pd.DataFrame:
    """
    Sort by one field, case-insensitive for text.

    Missing dates sort first ascending and last descending, like an
    empty string would. The id column breaks ties ascending.
    """
    if sort_field not in df.columns:
        raise ValueError(f"Unsupported sort field: {sort_field}")
    if sort_dir not in SORT_DIRECTIONS:
        raise ValueError(f"Unsupported sort direction: {sort_dir}")

    ascending = sort_dir == 'asc'
    by = [sort_field]
    order = [ascending]
    if sort_field != id_column:
        by.append(id_column)
        order.append(True)

    return df.sort_values(
        by=by,
        ascending=order,
        key=_sort_key,
        na_position='first' if ascending else 'last',
        kind='mergesort',
    ).reset_index(drop=True)


# =============================================================================
# JOINS
# =============================================================================

def resolve_agent_names(customers_df: pd.DataFrame, agents_df: pd.DataFrame) -> pd.DataFrame:
    """
    Add agent_name to customer rows.

    Unresolvable agent ids get the UNKNOWN_AGENT sentinel.
    """
    df = customers_df.copy()
    if agents_df is None or agents_df.empty:
        names = {}
    else:
        names = dict(zip(agents_df['agent_id'], agents_df['full_name']))

    agent_names = df['agent_id'].map(names).astype('object')
    df['agent_name'] = agent_names.where(agent_names.notna() & (agent_names != ''), UNKNOWN_AGENT)
    return df


# =============================================================================
# PIPELINES
# =============================================================================

class AgentListPipeline:
    """
    Agents list: filter, status, sort and page in pandas.

    Usage:
        pipeline = AgentListPipeline(agents_with_counts_df)
        result = pipeline.query_page(ListQuery('agent_id', 'asc', search='ali'))
    """

    def __init__(self, agents_df: pd.DataFrame):
        """
        Args:
            agents_df: Agents with a customer_count column
                       (see DashboardMetrics.attach_customer_counts)
        """
        self.agents_df = agents_df

    def filtered(self, query: ListQuery) -> pd.DataFrame:
        """Every agent matching search + status, sorted. Used by exports."""
        df = filter_frame(self.agents_df, query.search, AGENT_SEARCH_COLUMNS, AGENT_ID_COLUMN)

        if query.status == 'active':
            df = df[df['customer_count'] > 0]
        elif query.status == 'inactive':
            df = df[df['customer_count'] == 0]

        if df.empty:
            return df.reset_index(drop=True)

        return sort_frame(df, query.sort_field, query.sort_dir, AGENT_ID_COLUMN)

    def query_page(self, query: ListQuery) -> PageResult:
        df = self.filtered(query)
        total = len(df)
        page = clamp_page(query.page, query.page_size, total)

        if page != query.page:
            logger.info(f"Agents page {query.page} out of range, clamped to {page}")

        return PageResult(
            rows=paginate(df, page, query.page_size),
            total_count=total,
            page=page,
            page_count=page_count(total, query.page_size),
            page_size=query.page_size,
        )


class CustomerListPipeline:
    """
    Customers list: filter, sort and page in SQL, agent names joined here.

    Usage:
        pipeline = CustomerListPipeline(gateway, agents_df)
        result = pipeline.query_page(ListQuery('customer_id', 'desc'))
    """

    def __init__(self, gateway: SalesGateway, agents_df: pd.DataFrame):
        self.gateway = gateway
        self.agents_df = agents_df

    def query_page(self, query: ListQuery) -> PageResult:
        total = self.gateway.count_customers(query.search)
        page = clamp_page(query.page, query.page_size, total)

        if page != query.page:
            logger.info(f"Customers page {query.page} out of range, clamped to {page}")

        rows = self.gateway.list_customers(
            search=query.search,
            sort_field=query.sort_field,
            sort_dir=query.sort_dir,
            offset=(page - 1) * query.page_size,
            limit=query.page_size,
        )

        return PageResult(
            rows=resolve_agent_names(rows, self.agents_df),
            total_count=total,
            page=page,
            page_count=page_count(total, query.page_size),
            page_size=query.page_size,
        )

    def iter_all(self, query: ListQuery, batch_size: int = EXPORT_BATCH_SIZE) -> Iterator[pd.DataFrame]:
        """
        Yield the full filtered, sorted set in batches, agent names joined.

        Raises:
            GatewayError: When the batches return fewer rows than the count
        """
        for batch in self.gateway.iter_customer_batches(
            search=query.search,
            sort_field=query.sort_field,
            sort_dir=query.sort_dir,
            batch_size=batch_size,
            expected_total=self.gateway.count_customers(query.search),
        ):
            yield resolve_agent_names(batch, self.agents_df)


__all__ = [
    'ListQuery',
    'PageResult',
    'AgentListPipeline',
    'CustomerListPipeline',
    'filter_frame',
    'sort_frame',
    'paginate',
    'page_count',
    'clamp_page',
    'resolve_agent_names',
]
