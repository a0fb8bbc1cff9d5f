# sales_ops/dashboard/__init__.py
"""
Dashboard Overview Module

Components:
- metrics: Weekly/monthly series and agent ranking from gateway aggregates
- charts: KPI cards, Altair bar charts and progress summaries

Usage:
    from sales_ops.dashboard import (
        DashboardMetrics,
        DashboardCharts,
        COLORS
    )
"""

from .metrics import DashboardMetrics, TimeSeries, AgentPartition, get_initials
from .charts import DashboardCharts

# Constants
from .constants import (
    COLORS,
    WEEK_BUCKETS,
    MONTH_BUCKETS,
    TOP_AGENT_COUNT,
    DEFAULT_LOOKBACK_DAYS,
    CHART_HEIGHT,
)

__all__ = [
    # Classes
    'DashboardMetrics',
    'DashboardCharts',
    'TimeSeries',
    'AgentPartition',
    'get_initials',

    # Constants
    'COLORS',
    'WEEK_BUCKETS',
    'MONTH_BUCKETS',
    'TOP_AGENT_COUNT',
    'DEFAULT_LOOKBACK_DAYS',
    'CHART_HEIGHT',
]

__version__ = '1.0.0'
