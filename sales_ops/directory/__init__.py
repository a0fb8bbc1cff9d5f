# sales_ops/directory/__init__.py
"""
Agents and Customers Directory Module

Components:
- list_query: Search / sort / pagination pipelines
- view_state: List view state and the events that change it
- filters: Streamlit list controls and pager
- export: CSV and Excel export of the full filtered set
- rename: Agent rename with permission-aware errors

Usage:
    from sales_ops.directory import (
        AgentListPipeline,
        CustomerListPipeline,
        ListViewState,
        reduce,
        DirectoryExport,
        AgentRenameController
    )
"""

from .list_query import (
    ListQuery,
    PageResult,
    AgentListPipeline,
    CustomerListPipeline,
    resolve_agent_names,
)
from .view_state import (
    ListViewState,
    SearchChanged,
    SortRequested,
    PageRequested,
    PageSizeChanged,
    StatusChanged,
    reduce,
    needs_fetch,
    kept_page_keys,
    drop_kept_pages,
)
from .filters import render_list_controls, render_pager
from .export import (
    DirectoryExport,
    CUSTOMER_EXPORT_COLUMNS,
    AGENT_EXPORT_COLUMNS,
    serialize_csv,
    export_customers_csv,
    export_agents_csv,
    export_file_name,
    iter_customer_records,
    collect_customer_records,
)
from .rename import AgentRenameController, RenameResult

# Constants
from .constants import (
    UNKNOWN_AGENT,
    NOT_AVAILABLE,
    DEFAULT_PAGE_SIZE,
    PAGE_SIZE_OPTIONS,
    EXPORT_BATCH_SIZE,
    AGENT_SORT_FIELDS,
    AGENT_DEFAULT_SORT,
    CUSTOMER_SORT_FIELDS,
    CUSTOMER_DEFAULT_SORT,
    STATUS_OPTIONS,
)

__all__ = [
    # Pipelines
    'ListQuery',
    'PageResult',
    'AgentListPipeline',
    'CustomerListPipeline',
    'resolve_agent_names',

    # View state
    'ListViewState',
    'SearchChanged',
    'SortRequested',
    'PageRequested',
    'PageSizeChanged',
    'StatusChanged',
    'reduce',
    'needs_fetch',
    'kept_page_keys',
    'drop_kept_pages',

    # Widgets
    'render_list_controls',
    'render_pager',

    # Export
    'DirectoryExport',
    'CUSTOMER_EXPORT_COLUMNS',
    'AGENT_EXPORT_COLUMNS',
    'serialize_csv',
    'export_customers_csv',
    'export_agents_csv',
    'export_file_name',
    'iter_customer_records',
    'collect_customer_records',

    # Rename
    'AgentRenameController',
    'RenameResult',

    # Constants
    'UNKNOWN_AGENT',
    'NOT_AVAILABLE',
    'DEFAULT_PAGE_SIZE',
    'PAGE_SIZE_OPTIONS',
    'EXPORT_BATCH_SIZE',
    'AGENT_SORT_FIELDS',
    'AGENT_DEFAULT_SORT',
    'CUSTOMER_SORT_FIELDS',
    'CUSTOMER_DEFAULT_SORT',
    'STATUS_OPTIONS',
]

__version__ = '1.0.0'
