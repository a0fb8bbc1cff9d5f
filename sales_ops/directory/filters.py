# sales_ops/directory/filters.py
"""
Streamlit Controls for the list views

Widgets never mutate the view state directly: each render returns the
events the user triggered, and the page folds them in with reduce().
"""

import logging
from typing import Dict, List, Optional

import streamlit as st

from .constants import PAGE_SIZE_OPTIONS, STATUS_OPTIONS
from .list_query import PageResult
from .view_state import (
    ListViewState,
    PageRequested,
    PageSizeChanged,
    SearchChanged,
    SortRequested,
    StatusChanged,
)

logger = logging.getLogger(__name__)


def render_list_controls(
    state: ListViewState,
    key: str,
    sort_fields: Dict[str, str],
    placeholder: str = "Search...",
    show_status: bool = False
) -> List:
    """
    Render search / sort / status / page size controls.

    Args:
        state: Current view state (widget defaults)
        key: Unique widget key prefix
        sort_fields: {field: label} sortable columns
        placeholder: Search box placeholder
        show_status: Show the Active/Inactive filter (agents only)

    Returns:
        List of events, in the order they should be applied
    """
    events = []

    widths = [4, 2, 1, 2, 1] if show_status else [5, 2, 1, 1]
    cols = st.columns(widths)

    with cols[0]:
        term = st.text_input(
            "Search",
            value=state.search,
            placeholder=placeholder,
            key=f"{key}_search",
            label_visibility="collapsed",
        )
        if term.strip() != state.search:
            events.append(SearchChanged(term.strip()))

    field_keys = list(sort_fields.keys())
    with cols[1]:
        sort_field = st.selectbox(
            "Sort by",
            options=field_keys,
            index=field_keys.index(state.sort_field) if state.sort_field in field_keys else 0,
            format_func=lambda f: f"Sort: {sort_fields[f]}",
            key=f"{key}_sort_field",
            label_visibility="collapsed",
        )
        if sort_field != state.sort_field:
            events.append(SortRequested(sort_field))

    with cols[2]:
        arrow = "⬆️" if state.sort_dir == 'asc' else "⬇️"
        if st.button(arrow, key=f"{key}_sort_dir", help="Toggle sort direction"):
            events.append(SortRequested(state.sort_field))

    status_col = 3
    if show_status:
        status_keys = list(STATUS_OPTIONS.keys())
        with cols[status_col]:
            status = st.selectbox(
                "Status",
                options=status_keys,
                index=status_keys.index(state.status),
                format_func=lambda s: STATUS_OPTIONS[s],
                key=f"{key}_status",
                label_visibility="collapsed",
            )
            if status != state.status:
                events.append(StatusChanged(status))
        status_col += 1

    with cols[status_col]:
        page_size = st.selectbox(
            "Rows",
            options=PAGE_SIZE_OPTIONS,
            index=PAGE_SIZE_OPTIONS.index(state.page_size) if state.page_size in PAGE_SIZE_OPTIONS else 0,
            key=f"{key}_page_size",
            label_visibility="collapsed",
        )
        if page_size != state.page_size:
            events.append(PageSizeChanged(page_size))

    return events


def render_pager(result: PageResult, key: str, noun: str = "rows") -> Optional[PageRequested]:
    """Render 'Showing X to Y of Z' plus Previous / Next buttons."""
    col_info, col_prev, col_page, col_next = st.columns([4, 1, 1, 1])

    with col_info:
        if result.total_count == 0:
            st.caption(f"No {noun} found")
        else:
            st.caption(
                f"Showing {result.first_row:,} to {result.last_row:,} "
                f"of {result.total_count:,} {noun}"
            )

    event = None
    with col_prev:
        if st.button("◀ Previous", key=f"{key}_prev", disabled=result.page <= 1):
            event = PageRequested(result.page - 1)
    with col_page:
        st.markdown(f"**{result.page} / {result.page_count}**")
    with col_next:
        if st.button("Next ▶", key=f"{key}_next", disabled=result.page >= result.page_count):
            event = PageRequested(result.page + 1)

    return event


__all__ = ['render_list_controls', 'render_pager']
