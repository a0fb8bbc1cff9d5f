# sales_ops/dashboard/metrics.py
"""
KPI Calculations for the Dashboard Overview

Handles all metric derivations from gateway rows:
- Weekly (7 daily buckets) and monthly (4 calendar-month buckets) series
- Agent partitions: all agents by customer count, top 5, inactive
- Series totals and share-of-customers for the progress bars
- Bar labels (weekday / month names)

Bucket boundaries are always computed from `today`, never from the data,
so a stale or sparse feed yields zero buckets rather than an error.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Mapping, Optional, Tuple, Union
import pandas as pd

from .constants import WEEK_BUCKETS, MONTH_BUCKETS, TOP_AGENT_COUNT, MONTH_ORDER

logger = logging.getLogger(__name__)

AGENT_FRAME_COLUMNS = ['agent_id', 'full_name', 'customer_count']


@dataclass
class TimeSeries:
    """Fixed-width customer acquisition series, oldest first."""
    weekly: List[int] = field(default_factory=lambda: [0] * WEEK_BUCKETS)
    monthly: List[int] = field(default_factory=lambda: [0] * MONTH_BUCKETS)


@dataclass
class AgentPartition:
    """
    Agents split for the overview.

    Attributes:
        all_agents: Every agent, sorted by customer_count desc (stable)
        top_agents: First TOP_AGENT_COUNT rows of all_agents
        inactive_agents: Agents with customer_count == 0, gateway order
    """
    all_agents: pd.DataFrame
    top_agents: pd.DataFrame
    inactive_agents: pd.DataFrame


class DashboardMetrics:
    """
    Metric derivations for the overview page.

    All methods are static - can be called without instantiation.

    Usage:
        series = DashboardMetrics.build_time_series(daily_df, date.today())
        partition = DashboardMetrics.partition_agents(agents_df, counts_df)
    """

    # =========================================================================
    # TIME SERIES
    # =========================================================================

    @staticmethod
    def shift_month(year: int, month: int, months_back: int) -> Tuple[int, int]:
        """Return (year, month) `months_back` calendar months before (year, month)."""
        index = year * 12 + (month - 1) - months_back
        return index // 12, index % 12 + 1

    @staticmethod
    def build_time_series(
        daily_counts: pd.DataFrame,
        today: Optional[date] = None
    ) -> TimeSeries:
        """
        Bucket a per-day customer count series.

        Args:
            daily_counts: DataFrame[date, customer_count]; dates may be
                          date objects, timestamps or ISO strings
            today: Reference day (defaults to the current date)

        Returns:
            TimeSeries with weekly[6] == today and monthly[3] == this month
        """
        if today is None:
            today = date.today()

        if daily_counts is None or daily_counts.empty:
            logger.warning("Empty daily counts - returning zero series")
            return TimeSeries()

        df = daily_counts[['date', 'customer_count']].copy()
        df['date'] = pd.to_datetime(df['date']).dt.date
        df['customer_count'] = pd.to_numeric(df['customer_count'], errors='coerce').fillna(0).astype(int)

        by_day = df.groupby('date')['customer_count'].sum().to_dict()

        weekly = [
            int(by_day.get(today - timedelta(days=WEEK_BUCKETS - 1 - i), 0))
            for i in range(WEEK_BUCKETS)
        ]

        by_month = {}
        for day, count in by_day.items():
            key = (day.year, day.month)
            by_month[key] = by_month.get(key, 0) + count

        monthly = [
            int(by_month.get(
                DashboardMetrics.shift_month(today.year, today.month, MONTH_BUCKETS - 1 - j), 0
            ))
            for j in range(MONTH_BUCKETS)
        ]

        logger.debug(f"Weekly customer data: {weekly}; monthly: {monthly}")
        return TimeSeries(weekly=weekly, monthly=monthly)

    # =========================================================================
    # AGENT PARTITIONS
    # =========================================================================

    @staticmethod
    def attach_customer_counts(
        agents_df: pd.DataFrame,
        counts: Union[pd.DataFrame, Mapping[int, int], None]
    ) -> pd.DataFrame:
        """
        Add a customer_count column to the agent frame.

        Agents missing from `counts` get 0. Row order is preserved.
        """
        if agents_df is None or agents_df.empty:
            return pd.DataFrame(columns=AGENT_FRAME_COLUMNS)

        if counts is None:
            counts_map = {}
        elif isinstance(counts, pd.DataFrame):
            counts_map = dict(zip(counts['agent_id'], counts['customer_count'])) if not counts.empty else {}
        else:
            counts_map = dict(counts)

        df = agents_df.copy()
        df['customer_count'] = (
            df['agent_id'].map(counts_map).fillna(0).astype(int)
        )
        return df

    @staticmethod
    def partition_agents(
        agents_df: pd.DataFrame,
        counts: Union[pd.DataFrame, Mapping[int, int], None]
    ) -> AgentPartition:
        """
        Split agents into all / top / inactive.

        Args:
            agents_df: DataFrame with at least agent_id, full_name
            counts: Per-agent customer counts (DataFrame[agent_id,
                    customer_count] or {agent_id: count})

        Returns:
            AgentPartition
        """
        df = DashboardMetrics.attach_customer_counts(agents_df, counts)

        # mergesort is stable: equal counts keep gateway order
        all_agents = df.sort_values(
            'customer_count', ascending=False, kind='mergesort'
        ).reset_index(drop=True)

        top_agents = all_agents.head(TOP_AGENT_COUNT).reset_index(drop=True)
        inactive_agents = df[df['customer_count'] == 0].reset_index(drop=True)

        logger.info(
            f"Partitioned {len(all_agents)} agents: "
            f"{len(all_agents) - len(inactive_agents)} active, {len(inactive_agents)} inactive"
        )
        return AgentPartition(all_agents, top_agents, inactive_agents)

    # =========================================================================
    # SUMMARIES & LABELS
    # =========================================================================

    @staticmethod
    def summarize_series(values: List[int], total_customers: int) -> Tuple[int, float]:
        """Return (sum of values, share of total_customers in percent)."""
        total = int(sum(values))
        if total_customers <= 0 or total <= 0:
            return total, 0.0
        return total, min(total / total_customers * 100, 100.0)

    @staticmethod
    def leader_counts(top_agents: pd.DataFrame) -> List[int]:
        """Customer count of the leading agent as a one-item series (empty without agents)."""
        if top_agents is None or top_agents.empty:
            return []
        return [int(top_agents['customer_count'].iloc[0])]

    @staticmethod
    def weekly_labels(today: Optional[date] = None) -> List[str]:
        """Short weekday names for the weekly buckets; the last one is today."""
        today = today or date.today()
        return [
            (today - timedelta(days=WEEK_BUCKETS - 1 - i)).strftime('%a')
            for i in range(WEEK_BUCKETS)
        ]

    @staticmethod
    def monthly_labels(today: Optional[date] = None) -> List[str]:
        """Short month names for the monthly buckets."""
        today = today or date.today()
        return [
            MONTH_ORDER[DashboardMetrics.shift_month(today.year, today.month, MONTH_BUCKETS - 1 - j)[1] - 1]
            for j in range(MONTH_BUCKETS)
        ]


def get_initials(name: Optional[str]) -> str:
    """Up to two upper-case initials, '??' when there is no name."""
    if name is None or pd.isna(name) or not str(name).strip():
        return "??"
    return "".join(part[0] for part in str(name).split()).upper()[:2]


__all__ = [
    'DashboardMetrics',
    'TimeSeries',
    'AgentPartition',
    'get_initials',
]
