# sales_ops/directory/export.py
"""
CSV and Excel Export for the Agents and Customers views

Exports always cover the entire filtered, sorted result set (not just
the visible page), using the same search/sort as the on-screen query.

CSV format:
- Header row: comma-joined labels, unquoted
- Data rows: every cell wrapped in double quotes
- Embedded quotes are NOT escaped unless escape_quotes=True is passed.
  A value containing '"' therefore produces a row that strict CSV
  readers split differently. Kept for compatibility with existing
  downloads.

Excel export uses openpyxl with a styled header row.
"""

import itertools
import logging
from dataclasses import dataclass
from datetime import date
from io import BytesIO
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .constants import EXPORT_BATCH_SIZE, NOT_AVAILABLE, UNKNOWN_AGENT
from .list_query import AgentListPipeline, CustomerListPipeline, ListQuery

logger = logging.getLogger(__name__)

HEADER_FILL_COLOR = "1F77B4"
HEADER_FONT_COLOR = "FFFFFF"


@dataclass(frozen=True)
class ExportColumn:
    """One export column: fixed label plus a renderer over a row mapping."""
    label: str
    render: Callable[[Mapping], Any]


# =============================================================================
# CELL FORMATTING
# =============================================================================

def _is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def text_or_na(value) -> str:
    if _is_missing(value) or str(value).strip() == '':
        return NOT_AVAILABLE
    return str(value)


def format_date(value) -> str:
    """'Jan 5, 2024' style, or N/A for missing / unparseable values."""
    if _is_missing(value) or value == '':
        return NOT_AVAILABLE
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        return NOT_AVAILABLE
    if pd.isna(ts):
        return NOT_AVAILABLE
    return f"{ts.strftime('%b')} {ts.day}, {ts.year}"


def format_cell(value) -> str:
    """Plain text for one cell; integral floats lose their '.0'."""
    if _is_missing(value):
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# =============================================================================
# COLUMN SETS
# =============================================================================

CUSTOMER_EXPORT_COLUMNS: List[ExportColumn] = [
    ExportColumn('Customer ID', lambda r: r.get('customer_id')),
    ExportColumn('Customer Name', lambda r: r.get('customer_name')),
    ExportColumn('Phone Number', lambda r: text_or_na(r.get('customer_mobile'))),
    ExportColumn('Agent Name', lambda r: r.get('agent_name') or UNKNOWN_AGENT),
    ExportColumn('Agent ID', lambda r: r.get('agent_id')),
    ExportColumn('Date Added', lambda r: format_date(r.get('created_at'))),
]

AGENT_EXPORT_COLUMNS: List[ExportColumn] = [
    ExportColumn('Agent ID', lambda r: r.get('agent_id')),
    ExportColumn('Full Name', lambda r: r.get('full_name')),
    ExportColumn('Location', lambda r: text_or_na(r.get('location'))),
    ExportColumn('Phone Number', lambda r: text_or_na(r.get('phone_number'))),
    ExportColumn('Join Date', lambda r: format_date(r.get('created_at'))),
    ExportColumn('Customers', lambda r: int(r.get('customer_count') or 0)),
    ExportColumn('Status', lambda r: 'Active' if (r.get('customer_count') or 0) > 0 else 'Inactive'),
]


# =============================================================================
# CSV
# =============================================================================

def render_rows(rows: Iterable[Mapping], columns: Sequence[ExportColumn]) -> Iterable[List[str]]:
    for row in rows:
        yield [format_cell(col.render(row)) for col in columns]


def serialize_csv(
    rows: Iterable[Mapping],
    columns: Sequence[ExportColumn],
    escape_quotes: bool = False
) -> str:
    """
    Serialize rows to CSV text.

    Args:
        rows: Row mappings (e.g. DataFrame.to_dict('records'))
        columns: Ordered column specs
        escape_quotes: Double embedded quotes (RFC 4180). Off by default.

    Returns:
        CSV text, lines joined with '\\n', no trailing newline
    """
    lines = [",".join(col.label for col in columns)]

    for cells in render_rows(rows, columns):
        if escape_quotes:
            cells = [cell.replace('"', '""') for cell in cells]
        lines.append(",".join(f'"{cell}"' for cell in cells))

    return "\n".join(lines)


def iter_customer_records(
    pipeline: CustomerListPipeline,
    query: ListQuery,
    batch_size: int = EXPORT_BATCH_SIZE
) -> Iterable[Mapping]:
    """Every customer row matching the query, fetched in batches."""
    return itertools.chain.from_iterable(
        batch.to_dict('records') for batch in pipeline.iter_all(query, batch_size)
    )


def collect_customer_records(
    pipeline: CustomerListPipeline,
    query: ListQuery,
    batch_size: int = EXPORT_BATCH_SIZE
) -> List[Mapping]:
    """
    Materialize every matching customer row once, for CSV and Excel alike.

    Raises:
        GatewayError: When a batch fails and the set comes back short
    """
    return list(iter_customer_records(pipeline, query, batch_size))


def export_customers_csv(
    pipeline: CustomerListPipeline,
    query: ListQuery,
    batch_size: int = EXPORT_BATCH_SIZE,
    escape_quotes: bool = False
) -> str:
    rows = collect_customer_records(pipeline, query, batch_size)
    logger.info(f"Exporting {len(rows)} customers to CSV")
    return serialize_csv(rows, CUSTOMER_EXPORT_COLUMNS, escape_quotes=escape_quotes)


def export_agents_csv(
    pipeline: AgentListPipeline,
    query: ListQuery,
    escape_quotes: bool = False
) -> str:
    df = pipeline.filtered(query)
    logger.info(f"Exporting {len(df)} agents to CSV")
    return serialize_csv(df.to_dict('records'), AGENT_EXPORT_COLUMNS, escape_quotes=escape_quotes)


def export_file_name(prefix: str, extension: str = 'csv', today: Optional[date] = None) -> str:
    """e.g. customers_export_2024-02-01.csv"""
    today = today or date.today()
    return f"{prefix}_export_{today.isoformat()}.{extension}"


# =============================================================================
# EXCEL
# =============================================================================

class DirectoryExport:
    """
    Excel export for list views.

    Usage:
        exporter = DirectoryExport()
        excel_bytes = exporter.create_workbook(rows, CUSTOMER_EXPORT_COLUMNS, "Customers")

        st.download_button(
            label="Download Excel",
            data=excel_bytes,
            file_name=export_file_name("customers", "xlsx"),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
    """

    def __init__(self):
        self.header_fill = PatternFill(
            start_color=HEADER_FILL_COLOR,
            end_color=HEADER_FILL_COLOR,
            fill_type='solid'
        )
        self.header_font = Font(bold=True, color=HEADER_FONT_COLOR, size=11)
        self.center_align = Alignment(horizontal='center', vertical='center')

    def create_workbook(
        self,
        rows: Iterable[Mapping],
        columns: Sequence[ExportColumn],
        sheet_title: str
    ) -> BytesIO:
        """
        Write rendered rows to a single-sheet workbook.

        Returns:
            BytesIO containing the .xlsx file
        """
        wb = Workbook()
        ws = wb.active
        ws.title = sheet_title[:31]

        for col_idx, col in enumerate(columns, start=1):
            cell = ws.cell(row=1, column=col_idx, value=col.label)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = self.center_align

        widths = [len(col.label) for col in columns]
        row_count = 0
        for row_idx, cells in enumerate(render_rows(rows, columns), start=2):
            for col_idx, value in enumerate(cells, start=1):
                ws.cell(row=row_idx, column=col_idx, value=value)
                widths[col_idx - 1] = max(widths[col_idx - 1], len(value))
            row_count += 1

        for col_idx, width in enumerate(widths, start=1):
            ws.column_dimensions[get_column_letter(col_idx)].width = min(width + 2, 50)

        ws.freeze_panes = 'A2'

        output = BytesIO()
        wb.save(output)
        output.seek(0)

        logger.info(f"Excel export '{sheet_title}' created with {row_count} rows")
        return output


__all__ = [
    'ExportColumn',
    'CUSTOMER_EXPORT_COLUMNS',
    'AGENT_EXPORT_COLUMNS',
    'serialize_csv',
    'export_customers_csv',
    'export_agents_csv',
    'iter_customer_records',
    'collect_customer_records',
    'export_file_name',
    'format_date',
    'DirectoryExport',
]
