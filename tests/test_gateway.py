# tests/test_gateway.py

import pandas as pd
import pytest

from sales_ops.gateway import (
    AGENT_COLUMNS,
    CUSTOMER_COLUMNS,
    DAILY_COUNT_COLUMNS,
    DashboardTotals,
    GatewayError,
    SalesGateway,
    build_order_clause,
    build_search_clause,
    parse_numeric_term,
)

from conftest import make_engine


def _ids(df):
    return df['customer_id'].tolist()


# =============================================================================
# SEARCH / ORDER HELPERS
# =============================================================================

def test_parse_numeric_term():
    assert parse_numeric_term('42') == 42
    assert parse_numeric_term(' 7 ') == 7
    assert parse_numeric_term('ali') is None
    assert parse_numeric_term(None) is None


def test_parse_numeric_term_only_accepts_plain_digits():
    assert parse_numeric_term('007') == 7
    assert parse_numeric_term('1_2') is None
    assert parse_numeric_term('+5') is None
    assert parse_numeric_term('-5') is None
    assert parse_numeric_term('٣') is None
    assert parse_numeric_term('') is None


def test_search_clause_omits_id_for_text_terms():
    sql, params = build_search_clause('Ali', ('"Customer_Name"',), '"Customer ID"')
    assert 'id_search' not in params
    assert '"Customer ID"' not in sql
    assert params['search'] == '%ali%'


def test_search_clause_adds_id_for_numeric_terms():
    sql, params = build_search_clause('12', ('"Customer_Name"',), '"Customer ID"')
    assert params['id_search'] == '%12%'
    assert 'CAST("Customer ID" AS TEXT)' in sql


def test_search_clause_empty_term():
    assert build_search_clause('   ', ('"Customer_Name"',), '"Customer ID"') == ("", {})


def test_order_clause_rejects_unknown_field():
    with pytest.raises(ValueError):
        build_order_clause('agent_name', 'asc')
    with pytest.raises(ValueError):
        build_order_clause('customer_id', 'up')


# =============================================================================
# READS
# =============================================================================

def test_list_agents_in_id_order(gateway):
    df = gateway.list_agents()
    assert list(df.columns) == AGENT_COLUMNS
    assert df['agent_id'].tolist() == [1, 2, 3, 12]


def test_list_customers_default_sort_is_newest_id_first(gateway):
    df = gateway.list_customers()
    assert list(df.columns) == CUSTOMER_COLUMNS
    assert _ids(df) == [112, 105, 104, 103, 102, 101]


def test_search_is_case_insensitive(gateway):
    df = gateway.list_customers('TEMBO', sort_dir='asc')
    assert _ids(df) == [101, 102]


def test_numeric_search_matches_name_mobile_or_id(gateway):
    df = gateway.list_customers('12', sort_dir='asc')
    assert _ids(df) == [104, 112]
    assert gateway.count_customers('12') == 2


def test_like_wildcards_are_literal(gateway):
    assert gateway.count_customers('%') == 0
    assert gateway.count_customers('_') == 0


def test_count_is_independent_of_window(gateway):
    page = gateway.list_customers('tembo', offset=5, limit=5)
    assert page.empty
    assert gateway.count_customers('tembo') == 2


def test_sort_by_name_is_case_insensitive(gateway):
    df = gateway.list_customers(sort_field='customer_name', sort_dir='asc')
    assert _ids(df) == [112, 102, 101, 104, 105, 103]


def test_missing_dates_sort_first_ascending_last_descending(gateway):
    asc = gateway.list_customers(sort_field='created_at', sort_dir='asc')
    desc = gateway.list_customers(sort_field='created_at', sort_dir='desc')
    assert _ids(asc) == [105, 101, 102, 103, 104, 112]
    assert _ids(desc) == [112, 104, 103, 102, 101, 105]


def test_limit_offset_window(gateway):
    df = gateway.list_customers(sort_dir='asc', offset=2, limit=2)
    assert _ids(df) == [103, 104]


def test_missing_functions_degrade_to_defaults(gateway):
    assert gateway.get_dashboard_metrics() == DashboardTotals()

    daily = gateway.get_daily_customer_counts(days_back=120)
    assert daily.empty
    assert list(daily.columns) == DAILY_COUNT_COLUMNS

    assert gateway.get_agent_customer_counts().empty


def test_read_on_broken_database_returns_empty_frame():
    gateway = SalesGateway(engine=make_engine())
    df = gateway.list_customers('x')
    assert df.empty
    assert list(df.columns) == CUSTOMER_COLUMNS
    assert gateway.count_customers() == 0


def test_strict_gateway_raises_on_broken_database():
    gateway = SalesGateway(engine=make_engine(), raise_on_error=True)
    with pytest.raises(GatewayError):
        gateway.list_agents()
    with pytest.raises(GatewayError):
        gateway.count_customers('x')


# =============================================================================
# BATCHES
# =============================================================================

def test_batches_cover_full_set(bulk_gateway):
    batches = list(bulk_gateway.iter_customer_batches(batch_size=1000))
    assert [len(b) for b in batches] == [1000, 1000, 500]

    ids = [i for b in batches for i in b['customer_id']]
    assert len(ids) == len(set(ids)) == 2500
    assert ids[0] == 2500


def test_batches_stop_on_empty_batch(bulk_gateway):
    batches = list(bulk_gateway.iter_customer_batches(batch_size=500))
    assert [len(b) for b in batches] == [500] * 5


def test_batches_respect_search(bulk_gateway):
    batches = list(bulk_gateway.iter_customer_batches(search='customer 00', batch_size=40))
    assert sum(len(b) for b in batches) == 99


def test_batches_matching_expected_total_pass(bulk_gateway):
    batches = list(bulk_gateway.iter_customer_batches(batch_size=1000, expected_total=2500))
    assert sum(len(b) for b in batches) == 2500


class FailingAfterFirstBatch(SalesGateway):
    """Reads past the first window come back empty, as a failed read does."""

    def list_customers(self, search=None, sort_field='customer_id', sort_dir='desc', offset=0, limit=None):
        if offset >= 1000:
            return pd.DataFrame(columns=CUSTOMER_COLUMNS)
        return super().list_customers(search, sort_field, sort_dir, offset=offset, limit=limit)


def test_failed_batch_mid_export_raises(bulk_engine):
    gateway = FailingAfterFirstBatch(engine=bulk_engine)
    batches = gateway.iter_customer_batches(batch_size=1000, expected_total=gateway.count_customers())

    with pytest.raises(GatewayError, match='1000 of 2500'):
        list(batches)


def test_batch_size_must_be_positive(bulk_gateway):
    with pytest.raises(ValueError):
        list(bulk_gateway.iter_customer_batches(batch_size=0))


# =============================================================================
# RENAME
# =============================================================================

def test_update_agent_name(gateway):
    gateway.update_agent_name(2, 'Bob Banda')
    df = gateway.list_agents()
    assert df.loc[df['agent_id'] == 2, 'full_name'].item() == 'Bob Banda'


def test_update_missing_agent_raises(gateway):
    with pytest.raises(GatewayError, match='policy'):
        gateway.update_agent_name(999, 'Nobody')


def test_update_database_error_raises():
    gateway = SalesGateway(engine=make_engine())
    with pytest.raises(GatewayError):
        gateway.update_agent_name(1, 'Alice')
