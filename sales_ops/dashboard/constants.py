# sales_ops/dashboard/constants.py
"""
Constants for the Dashboard Overview

Centralized configuration for:
- Bucket widths
- Color scheme
- Chart settings
"""

# =====================================================================
# BUCKETS
# =====================================================================

WEEK_BUCKETS = 7
MONTH_BUCKETS = 4
TOP_AGENT_COUNT = 5

# Lookback passed to get_daily_customer_counts(); covers MONTH_BUCKETS months
DEFAULT_LOOKBACK_DAYS = 120

# =====================================================================
# COLOR SCHEME
# =====================================================================

COLORS = {
    "customers": "#1f77b4",            # Blue
    "agents": "#27ae60",               # Green
    "average": "#FFA500",              # Orange
    "today": "#d62728",                # Red
    "inactive": "#95a5a6",             # Grey
    "text_light": "#666666",
}

# =====================================================================
# MONTH ORDER
# =====================================================================

MONTH_ORDER = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"
]

# =====================================================================
# CHART SETTINGS
# =====================================================================

CHART_HEIGHT = 220
