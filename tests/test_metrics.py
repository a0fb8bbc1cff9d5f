# tests/test_metrics.py

from datetime import date

import pandas as pd

from sales_ops.dashboard.charts import DashboardCharts
from sales_ops.dashboard.metrics import DashboardMetrics, TimeSeries, get_initials


def _daily(rows):
    return pd.DataFrame(rows, columns=['date', 'customer_count'])


# =============================================================================
# TIME SERIES
# =============================================================================

def test_adjacent_days_across_month_boundary():
    daily = _daily([(date(2024, 1, 31), 3), (date(2024, 2, 1), 5)])
    series = DashboardMetrics.build_time_series(daily, today=date(2024, 2, 1))

    assert series.monthly == [0, 0, 3, 5]
    assert series.weekly[-1] == 5
    assert series.weekly[-2] == 3
    assert len(series.weekly) == 7


def test_monthly_buckets_roll_over_year():
    daily = _daily([
        ('2023-10-31', 100),
        ('2023-11-15', 4),
        ('2023-12-01', 6),
        ('2024-01-09', 1),
        ('2024-02-10', 2),
    ])
    series = DashboardMetrics.build_time_series(daily, today=date(2024, 2, 10))
    assert series.monthly == [4, 6, 1, 2]


def test_weekly_window_ends_today():
    today = date(2024, 3, 10)
    daily = _daily([
        ('2024-03-03', 9),
        ('2024-03-04', 1),
        ('2024-03-10', 7),
        ('2024-03-11', 50),
    ])
    series = DashboardMetrics.build_time_series(daily, today=today)
    assert series.weekly == [1, 0, 0, 0, 0, 0, 7]


def test_duplicate_days_are_summed():
    daily = _daily([('2024-03-10', 2), ('2024-03-10', 3)])
    series = DashboardMetrics.build_time_series(daily, today=date(2024, 3, 10))
    assert series.weekly[-1] == 5


def test_empty_input_gives_zero_series():
    empty = _daily([])
    assert DashboardMetrics.build_time_series(empty, today=date(2024, 1, 1)) == TimeSeries()
    assert DashboardMetrics.build_time_series(None) == TimeSeries([0] * 7, [0] * 4)


def test_stale_data_yields_zero_buckets():
    daily = _daily([('2020-01-01', 10)])
    series = DashboardMetrics.build_time_series(daily, today=date(2024, 6, 1))
    assert series.weekly == [0] * 7
    assert series.monthly == [0] * 4


def test_shift_month():
    assert DashboardMetrics.shift_month(2024, 2, 3) == (2023, 11)
    assert DashboardMetrics.shift_month(2024, 12, 0) == (2024, 12)
    assert DashboardMetrics.shift_month(2024, 1, 1) == (2023, 12)


# =============================================================================
# AGENT PARTITIONS
# =============================================================================

def _agents(rows):
    return pd.DataFrame(rows, columns=['agent_id', 'full_name'])


def test_all_inactive_agents_keep_input_order():
    agents = _agents([(1, 'A'), (2, 'B')])
    partition = DashboardMetrics.partition_agents(agents, {1: 0, 2: 0})

    assert partition.all_agents['agent_id'].tolist() == [1, 2]
    assert partition.top_agents['agent_id'].tolist() == [1, 2]
    assert partition.inactive_agents['agent_id'].tolist() == [1, 2]


def test_agents_missing_from_counts_default_to_zero():
    agents = _agents([(1, 'A'), (2, 'B'), (3, 'C')])
    counts = pd.DataFrame({'agent_id': [1, 3], 'customer_count': [4, 2]})
    partition = DashboardMetrics.partition_agents(agents, counts)

    assert partition.all_agents['agent_id'].tolist() == [1, 3, 2]
    assert partition.all_agents['customer_count'].sum() == counts['customer_count'].sum()
    assert partition.inactive_agents['agent_id'].tolist() == [2]


def test_ties_keep_gateway_order_and_top_is_five():
    agents = _agents([(i, f'Agent {i}') for i in range(1, 8)])
    counts = {1: 5, 2: 7, 3: 5, 4: 1, 5: 5, 6: 0, 7: 3}
    partition = DashboardMetrics.partition_agents(agents, counts)

    assert partition.all_agents['agent_id'].tolist() == [2, 1, 3, 5, 7, 4, 6]
    assert partition.top_agents['agent_id'].tolist() == [2, 1, 3, 5, 7]
    assert partition.inactive_agents['agent_id'].tolist() == [6]


def test_partition_of_no_agents():
    partition = DashboardMetrics.partition_agents(pd.DataFrame(), {1: 3})
    assert partition.all_agents.empty
    assert partition.top_agents.empty
    assert partition.inactive_agents.empty


# =============================================================================
# SUMMARIES & LABELS
# =============================================================================

def test_summarize_series():
    assert DashboardMetrics.summarize_series([1, 2, 3], 12) == (6, 50.0)
    assert DashboardMetrics.summarize_series([1, 2, 3], 0) == (6, 0.0)
    assert DashboardMetrics.summarize_series([10, 10], 5) == (20, 100.0)


def test_leader_share_uses_first_agent_only():
    top = pd.DataFrame({'agent_id': [2, 1, 3], 'full_name': ['B', 'A', 'C'], 'customer_count': [6, 3, 1]})

    assert DashboardMetrics.leader_counts(top) == [6]
    assert DashboardMetrics.summarize_series(DashboardMetrics.leader_counts(top), 12) == (6, 50.0)
    assert DashboardMetrics.leader_counts(top.iloc[0:0]) == []


def test_namesake_agents_get_separate_bars():
    top = pd.DataFrame({
        'agent_id': [4, 9, 5, 6],
        'full_name': ['Sam Phiri', 'Sam Phiri', None, '  '],
        'customer_count': [3, 3, 1, 1],
    })

    labels = DashboardCharts.agent_bar_labels(top)

    assert labels == ['Sam Phiri (#4)', 'Sam Phiri (#9)', 'Unnamed (#5)', 'Unnamed (#6)']
    assert len(set(labels)) == len(top)


def test_labels_end_at_today():
    today = date(2024, 2, 1)
    weekly = DashboardMetrics.weekly_labels(today)
    assert len(weekly) == 7
    assert weekly[-1] == 'Thu'
    assert DashboardMetrics.monthly_labels(today) == ['Nov', 'Dec', 'Jan', 'Feb']


def test_initials():
    assert get_initials('alice mwale') == 'AM'
    assert get_initials('Cher') == 'C'
    assert get_initials('Anna Maria Banda') == 'AM'
    assert get_initials('') == '??'
    assert get_initials(None) == '??'
