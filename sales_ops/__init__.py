# sales_ops/__init__.py
"""
Sales Operations Dashboard Package

Shared modules used by every page:
- auth: Login and per-browser user session
- config: Configuration management (local .env + Streamlit Cloud secrets)
- db: Database engine with pooling and query helpers
- gateway: Read/update interface over agents, customers and aggregates

Feature subpackages:
- dashboard: Overview metrics and charts
- directory: Agents and Customers list views, exports and rename

Usage:
    from sales_ops import AuthManager, UserSession, SalesGateway
    from sales_ops.dashboard import DashboardMetrics
    from sales_ops.directory import CustomerListPipeline
"""

# Authentication
from .auth import (
    AuthManager,
    UserSession,
)

# Configuration
from .config import (
    config,
    Config,
    IS_RUNNING_ON_CLOUD,
    APP_CONFIG,
)

# Database
from .db import (
    get_db_engine,
    check_db_connection,
    reset_db_engine,
    get_transaction,
    execute_query,
    execute_query_df,
    execute_update,
    get_connection_pool_status,
)

# Gateway
from .gateway import (
    SalesGateway,
    GatewayError,
    DashboardTotals,
)

__all__ = [
    # Auth
    'AuthManager',
    'UserSession',

    # Config
    'config',
    'Config',
    'IS_RUNNING_ON_CLOUD',
    'APP_CONFIG',

    # Database
    'get_db_engine',
    'check_db_connection',
    'reset_db_engine',
    'get_transaction',
    'execute_query',
    'execute_query_df',
    'execute_update',
    'get_connection_pool_status',

    # Gateway
    'SalesGateway',
    'GatewayError',
    'DashboardTotals',
]

__version__ = '1.0.0'
