"""Projection table export to CSV and XLSX."""

from __future__ import annotations

import csv
import io
import re
import unicodedata
from typing import List, Optional, Sequence

from openpyxl import Workbook
from pydantic import BaseModel

from backend.core.formatting import FormatConfig, format_currency, format_decimal
from backend.core.withdrawals import withdrawal_date
from backend.models import YearlyBreakdown

DEFAULT_FILE_BASENAME = "projection"
SHEET_TITLE = "Projection"

CSV_MIMETYPE = "text/csv"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class TableLabels(BaseModel):
    year: str = "Year"
    yearValue: str = "Year {value}"
    endingBalance: str = "Ending balance"
    contributions: str = "Contributions"
    growth: str = "Growth"
    withdrawal: str = "Allowed withdrawal"
    withdrawalDetail: str = "available"


class TableMatrix(BaseModel):
    headers: List[str]
    rows: List[List[str]]


def sanitize_file_name(value: Optional[str]) -> str:
    if not value:
        return DEFAULT_FILE_BASENAME

    normalized = unicodedata.normalize("NFKD", value)
    normalized = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    normalized = re.sub(r"[^a-zA-Z0-9_-]+", "-", normalized)
    normalized = re.sub(r"-+", "-", normalized).strip("-")

    return normalized or DEFAULT_FILE_BASENAME


def resolve_file_name(base_name: Optional[str], extension: str) -> str:
    return f"{sanitize_file_name(base_name)}.{extension}"


def build_table_matrix(
    table: Sequence[YearlyBreakdown],
    config: FormatConfig,
    labels: Optional[TableLabels] = None,
    current_year: Optional[int] = None,
    include_withdrawal_dates: bool = True,
) -> TableMatrix:
    labels = labels or TableLabels()
    headers = [
        labels.year,
        labels.endingBalance,
        labels.contributions,
        labels.growth,
        labels.withdrawal,
    ]

    rows: List[List[str]] = []
    for row in table:
        withdrawal_cell = format_currency(row.allowedWithdrawal, config)
        if include_withdrawal_dates:
            payout = withdrawal_date(row.year, current_year)
            withdrawal_cell = f"{withdrawal_cell} ({labels.withdrawalDetail} {payout.label})"

        rows.append(
            [
                labels.yearValue.format(value=format_decimal(row.year, config)),
                format_currency(row.endingBalance, config),
                format_currency(row.contributions, config),
                format_currency(row.growth, config),
                withdrawal_cell,
            ]
        )

    return TableMatrix(headers=headers, rows=rows)


def export_csv(matrix: TableMatrix) -> bytes:
    """UTF-8 with a BOM so spreadsheet apps pick the right encoding."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\r\n")
    writer.writerow(matrix.headers)
    writer.writerows(matrix.rows)
    return buffer.getvalue().encode("utf-8-sig")


def export_xlsx(matrix: TableMatrix) -> bytes:
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = SHEET_TITLE
    worksheet.append(matrix.headers)
    for row in matrix.rows:
        worksheet.append(row)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
