import io

import pandas as pd

from workforce_admin.reports.export import WORKING_HOURS_COLUMNS, rows_to_csv, rows_to_excel

ROWS = [
    {
        "date": "2025-03-03",
        "profile_name": "Alice Worker",
        "client_name": "Acme",
        "project_name": "Warehouse",
        "start_time": "09:00",
        "end_time": "17:00",
        "sign_in_time": None,
        "sign_out_time": None,
        "total_hours": "8.00",
        "actual_hours": None,
        "overtime_hours": "0.00",
        "hourly_rate": "30.00",
        "payable_amount": "240.00",
        "status": "approved",
        "notes": None,
    }
]


def test_csv_has_bom_and_headers():
    data = rows_to_csv(ROWS)
    assert data.startswith(b"\xef\xbb\xbf")
    lines = data.decode("utf-8-sig").splitlines()
    assert lines[0].split(",") == [header for _, header in WORKING_HOURS_COLUMNS]
    assert lines[1].startswith("2025-03-03,Alice Worker,Acme,Warehouse,09:00,17:00,,,8.00,")


def test_excel_round_trips_numbers():
    df = pd.read_excel(io.BytesIO(rows_to_excel(ROWS)), engine="openpyxl")
    assert list(df.columns) == [header for _, header in WORKING_HOURS_COLUMNS]
    assert df.loc[0, "Payable"] == 240.0
    assert df.loc[0, "Employee"] == "Alice Worker"
