# sales_ops/loaders.py
"""
Cached Gateway Reads shared by the pages

Every read goes through @st.cache_data so reruns triggered by widgets do
not hit the database again. After a write (agent rename) pages call
clear_cached_reads().

The cached _fetch_* functions read through a gateway that raises, so a
failed read is never stored in the cache. The public load_* wrappers
turn that failure into the empty default for this run only; the next
rerun queries again.
"""

import logging
from typing import Optional

import pandas as pd
import streamlit as st

from .config import config
from .gateway import (
    AGENT_COLUMNS,
    AGENT_COUNT_COLUMNS,
    CUSTOMER_COLUMNS,
    DAILY_COUNT_COLUMNS,
    DashboardTotals,
    GatewayError,
    SalesGateway,
)

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = config.get_app_setting("CACHE_TTL_SECONDS", 300)


# =============================================================================
# CACHED QUERY FUNCTIONS (Module-level for st.cache_data)
# =============================================================================

@st.cache_data(ttl=CACHE_TTL_SECONDS)
def _fetch_dashboard_totals() -> DashboardTotals:
    return SalesGateway(raise_on_error=True).get_dashboard_metrics()


@st.cache_data(ttl=CACHE_TTL_SECONDS)
def _fetch_daily_customer_counts(days_back: int) -> pd.DataFrame:
    return SalesGateway(raise_on_error=True).get_daily_customer_counts(days_back=days_back)


@st.cache_data(ttl=CACHE_TTL_SECONDS)
def _fetch_agent_customer_counts() -> pd.DataFrame:
    return SalesGateway(raise_on_error=True).get_agent_customer_counts()


@st.cache_data(ttl=CACHE_TTL_SECONDS)
def _fetch_agents() -> pd.DataFrame:
    return SalesGateway(raise_on_error=True).list_agents()


@st.cache_data(ttl=CACHE_TTL_SECONDS)
def _fetch_customer_count(search: Optional[str]) -> int:
    return SalesGateway(raise_on_error=True).count_customers(search)


@st.cache_data(ttl=CACHE_TTL_SECONDS)
def _fetch_customer_page(
    search: Optional[str],
    sort_field: str,
    sort_dir: str,
    offset: int,
    limit: int
) -> pd.DataFrame:
    return SalesGateway(raise_on_error=True).list_customers(
        search, sort_field, sort_dir, offset=offset, limit=limit
    )


# =============================================================================
# LOADERS (empty default on failure, not cached)
# =============================================================================

def _not_cached(name: str, error: Exception):
    logger.warning(f"{name} failed, serving empty default without caching: {error}")


def load_dashboard_totals() -> DashboardTotals:
    try:
        return _fetch_dashboard_totals()
    except GatewayError as e:
        _not_cached("dashboard totals", e)
        return DashboardTotals()


def load_daily_customer_counts(days_back: int) -> pd.DataFrame:
    try:
        return _fetch_daily_customer_counts(days_back)
    except GatewayError as e:
        _not_cached("daily customer counts", e)
        return pd.DataFrame(columns=DAILY_COUNT_COLUMNS)


def load_agent_customer_counts() -> pd.DataFrame:
    try:
        return _fetch_agent_customer_counts()
    except GatewayError as e:
        _not_cached("agent customer counts", e)
        return pd.DataFrame(columns=AGENT_COUNT_COLUMNS)


def load_agents() -> pd.DataFrame:
    try:
        return _fetch_agents()
    except GatewayError as e:
        _not_cached("agents", e)
        return pd.DataFrame(columns=AGENT_COLUMNS)


def load_customer_count(search: Optional[str]) -> int:
    try:
        return _fetch_customer_count(search)
    except GatewayError as e:
        _not_cached("customer count", e)
        return 0


def load_customer_page(
    search: Optional[str],
    sort_field: str,
    sort_dir: str,
    offset: int,
    limit: int
) -> pd.DataFrame:
    try:
        return _fetch_customer_page(search, sort_field, sort_dir, offset, limit)
    except GatewayError as e:
        _not_cached(f"customers window at offset {offset}", e)
        return pd.DataFrame(columns=CUSTOMER_COLUMNS)


class CachedSalesGateway(SalesGateway):
    """
    SalesGateway whose windowed customer reads are served from the page
    cache. Export batches are windowed reads too, so they are cached; a
    failed batch comes back empty and iter_customer_batches() reports the
    shortfall.
    """

    def count_customers(self, search: Optional[str] = None) -> int:
        return load_customer_count(search or None)

    def list_customers(
        self,
        search: Optional[str] = None,
        sort_field: str = 'customer_id',
        sort_dir: str = 'desc',
        offset: int = 0,
        limit: Optional[int] = None
    ) -> pd.DataFrame:
        if limit is None:
            return super().list_customers(search, sort_field, sort_dir, offset=offset, limit=limit)
        return load_customer_page(search or None, sort_field, sort_dir, offset, limit)


def clear_cached_reads():
    """Drop every cached read (after a successful write)."""
    st.cache_data.clear()
    logger.info("Cached reads cleared")


__all__ = [
    'load_dashboard_totals',
    'load_daily_customer_counts',
    'load_agent_customer_counts',
    'load_agents',
    'load_customer_count',
    'load_customer_page',
    'CachedSalesGateway',
    'clear_cached_reads',
    'CACHE_TTL_SECONDS',
]
