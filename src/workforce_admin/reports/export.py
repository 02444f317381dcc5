from __future__ import annotations

import csv
import io
from typing import Sequence

import pandas as pd

WORKING_HOURS_COLUMNS = [
    ("date", "Date"),
    ("profile_name", "Employee"),
    ("client_name", "Client"),
    ("project_name", "Project"),
    ("start_time", "Start"),
    ("end_time", "End"),
    ("sign_in_time", "Sign in"),
    ("sign_out_time", "Sign out"),
    ("total_hours", "Scheduled hours"),
    ("actual_hours", "Actual hours"),
    ("overtime_hours", "Overtime hours"),
    ("hourly_rate", "Hourly rate"),
    ("payable_amount", "Payable"),
    ("status", "Status"),
    ("notes", "Notes"),
]

EXCEL_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def rows_to_csv(rows: Sequence[dict], columns=WORKING_HOURS_COLUMNS) -> bytes:
    """CSV with a BOM so spreadsheet apps pick up UTF-8."""

    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=[header for _, header in columns])
    writer.writeheader()
    for row in rows:
        writer.writerow({header: row.get(key) if row.get(key) is not None else "" for key, header in columns})
    return out.getvalue().encode("utf-8-sig")


def rows_to_excel(rows: Sequence[dict], columns=WORKING_HOURS_COLUMNS, *, sheet_name: str = "Working hours") -> bytes:
    df = pd.DataFrame([[row.get(key) for key, _ in columns] for row in rows], columns=[h for _, h in columns])
    for key, header in columns:
        if key in ("total_hours", "actual_hours", "overtime_hours", "hourly_rate", "payable_amount"):
            df[header] = pd.to_numeric(df[header])

    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    return out.getvalue()
