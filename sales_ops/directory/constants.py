# sales_ops/directory/constants.py
"""
Constants for the Agents and Customers list views
"""

# =====================================================================
# DISPLAY FALLBACKS
# =====================================================================

UNKNOWN_AGENT = "Unknown Agent"
NOT_AVAILABLE = "N/A"

# =====================================================================
# PAGINATION & EXPORT
# =====================================================================

DEFAULT_PAGE_SIZE = 25
PAGE_SIZE_OPTIONS = [10, 25, 50, 100]

# Rows per gateway request during full exports (hosted API caps responses at 1000)
EXPORT_BATCH_SIZE = 1000

# =====================================================================
# SORTING
# =====================================================================

SORT_DIRECTIONS = ('asc', 'desc')

AGENT_SORT_FIELDS = {
    'full_name': 'Full Name',
    'agent_id': 'Agent ID',
    'created_at': 'Join Date',
    'customer_count': 'Customers',
}
AGENT_DEFAULT_SORT = ('agent_id', 'asc')

CUSTOMER_SORT_FIELDS = {
    'customer_name': 'Customer',
    'customer_id': 'Customer ID',
    'created_at': 'Time Added',
}
CUSTOMER_DEFAULT_SORT = ('customer_id', 'desc')

# =====================================================================
# SEARCH
# =====================================================================

AGENT_SEARCH_COLUMNS = ('full_name', 'phone_number')
AGENT_ID_COLUMN = 'agent_id'

# =====================================================================
# STATUS FILTER (agents)
# =====================================================================

STATUS_OPTIONS = {
    'all': 'All Status',
    'active': 'Active',
    'inactive': 'Inactive',
}
