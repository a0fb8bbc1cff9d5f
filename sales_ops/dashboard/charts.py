# sales_ops/dashboard/charts.py
"""
Altair Chart Builders for the Dashboard Overview

- KPI summary cards (using st.metric)
- Top agents / weekly / monthly bar charts
- Progress summaries under each chart
"""

import logging
from typing import List, Optional
import pandas as pd
import altair as alt
import streamlit as st

from sales_ops.gateway import DashboardTotals
from .constants import COLORS, CHART_HEIGHT
from .metrics import DashboardMetrics

logger = logging.getLogger(__name__)


class DashboardCharts:
    """
    Chart builders for the overview page.

    All methods are static - can be called without instantiation.

    Usage:
        DashboardCharts.render_kpi_cards(totals)
        chart = DashboardCharts.build_bar_chart(series.weekly, labels)
        st.altair_chart(chart, use_container_width=True)
    """

    # =========================================================================
    # KPI CARDS
    # =========================================================================

    @staticmethod
    def render_kpi_cards(totals: DashboardTotals):
        """Render the three headline numbers."""
        col1, col2, col3 = st.columns(3)

        with col1:
            st.metric(
                label="👥 Total Customers",
                value=f"{totals.total_customers:,}",
            )
        with col2:
            st.metric(
                label="🪪 Active Agents",
                value=f"{totals.active_agents:,}",
            )
        with col3:
            st.metric(
                label="📈 Avg Customers/Day",
                value=f"{totals.avg_customers_per_day:.1f}",
            )

    # =========================================================================
    # BAR CHARTS
    # =========================================================================

    @staticmethod
    def build_bar_chart(
        values: List[int],
        labels: List[str],
        color: str = COLORS["customers"],
        highlight_last: bool = False,
        height: int = CHART_HEIGHT
    ) -> alt.Chart:
        """
        Build a labelled bar chart keeping the given bar order.

        Args:
            values: Bar heights
            labels: One label per bar
            color: Bar color
            highlight_last: Paint the last bar (today) in the highlight color
            height: Chart height in pixels
        """
        df = pd.DataFrame({
            'label': labels,
            'value': values,
            'order': range(len(values)),
        })
        df['highlight'] = False
        if highlight_last and not df.empty:
            df.loc[df.index[-1], 'highlight'] = True

        base = alt.Chart(df).encode(
            x=alt.X('label:N', sort=alt.SortField('order'), title=None,
                    axis=alt.Axis(labelAngle=0)),
            y=alt.Y('value:Q', title=None),
            tooltip=[
                alt.Tooltip('label:N', title='Bucket'),
                alt.Tooltip('value:Q', title='Customers'),
            ],
        )

        bars = base.mark_bar(cornerRadiusTopLeft=4, cornerRadiusTopRight=4).encode(
            color=alt.condition(
                alt.datum.highlight,
                alt.value(COLORS["today"]),
                alt.value(color),
            )
        )

        text = base.mark_text(dy=-8, color=COLORS["text_light"]).encode(
            text=alt.Text('value:Q')
        )

        return (bars + text).properties(height=height)

    @staticmethod
    def agent_bar_labels(top_agents: pd.DataFrame) -> List[str]:
        """One label per agent; the id keeps namesakes on separate bars."""
        return [
            f"{str(name).strip() or 'Unnamed'} (#{agent_id})"
            for name, agent_id in zip(top_agents['full_name'].fillna(''), top_agents['agent_id'])
        ]

    @staticmethod
    def build_top_agents_chart(top_agents: pd.DataFrame) -> Optional[alt.Chart]:
        """Bar chart of customers per top agent, or None when there are no agents."""
        if top_agents is None or top_agents.empty:
            return None

        return DashboardCharts.build_bar_chart(
            values=top_agents['customer_count'].astype(int).tolist(),
            labels=DashboardCharts.agent_bar_labels(top_agents),
            color=COLORS["agents"],
        )

    # =========================================================================
    # PROGRESS SUMMARY
    # =========================================================================

    @staticmethod
    def render_progress(values: List[int], total_customers: int, caption: str):
        """Progress bar: share of all customers captured by this series."""
        total, pct = DashboardMetrics.summarize_series(values, total_customers)
        st.progress(pct / 100)
        st.caption(f"**{total:,}** {caption}")


__all__ = ['DashboardCharts']
