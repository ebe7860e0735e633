import pandas as pd
from openpyxl import load_workbook

from export import EXPORT_COLUMNS, export_trips_csv, export_trips_xlsx, trips_to_frame


def test_frame_columns_and_values(make_trip):
    df = trips_to_frame([make_trip()])
    assert list(df.columns) == EXPORT_COLUMNS
    row = df.iloc[0]
    assert row["Crew Members"] == "Ali, Hassan, Moosa, Ibrahim"
    assert row["Total Expenses (MVR)"] == 350
    assert row["Profit (MVR)"] == 650
    assert row["Owner Share %"] == 20


def test_empty_frame_keeps_headers():
    df = trips_to_frame([])
    assert df.empty
    assert list(df.columns) == EXPORT_COLUMNS


def test_csv_export(tmp_path, make_trip):
    path = export_trips_csv([make_trip("a"), make_trip("b")], str(tmp_path / "trips.csv"))
    df = pd.read_csv(path, encoding="utf-8-sig")
    assert len(df) == 2
    assert df["Total Sales (MVR)"].tolist() == [1000.0, 1000.0]


def test_xlsx_export(tmp_path, make_trip):
    path = export_trips_xlsx([make_trip()], str(tmp_path / "trips.xlsx"))
    wb = load_workbook(path)
    ws = wb["Fishing Trips"]
    assert [c.value for c in ws[1]] == EXPORT_COLUMNS
    assert ws["A2"].value == "2025-03-01"
    assert ws.column_dimensions["A"].width == 15
    assert ws.column_dimensions["D"].width == len("Fuel Expense (MVR)")
