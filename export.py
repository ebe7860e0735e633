# export.py
from datetime import date
from typing import Any, Dict, List

import pandas as pd
from openpyxl.utils import get_column_letter

EXPORT_COLUMNS = [
    "Date",
    "Trip Type",
    "Crew Members",
    "Fuel Expense (MVR)",
    "Food Expense (MVR)",
    "Other Expenses (MVR)",
    "Total Expenses (MVR)",
    "Total Catch (kg)",
    "Total Sales (MVR)",
    "Profit (MVR)",
    "Owner Share %",
    "Owner Profit (MVR)",
    "Profit per Crew (MVR)",
]


def default_filename(ext: str) -> str:
    return f"fishing-trips-{date.today().isoformat()}.{ext}"


def trips_to_frame(trips: List[Dict[str, Any]]) -> pd.DataFrame:
    rows = []
    for t in trips or []:
        exp = t.get("expenses") or {}
        fuel, food, other = exp.get("fuel", 0), exp.get("food", 0), exp.get("other", 0)
        rows.append({
            "Date": t.get("date", ""),
            "Trip Type": t.get("tripType", ""),
            "Crew Members": ", ".join(t.get("crew") or []),
            "Fuel Expense (MVR)": fuel,
            "Food Expense (MVR)": food,
            "Other Expenses (MVR)": other,
            "Total Expenses (MVR)": fuel + food + other,
            "Total Catch (kg)": t.get("totalCatch", 0),
            "Total Sales (MVR)": t.get("totalSales", 0),
            "Profit (MVR)": t.get("profit", 0),
            "Owner Share %": t.get("ownerSharePercent", 0),
            "Owner Profit (MVR)": t.get("ownerProfit", 0),
            "Profit per Crew (MVR)": t.get("profitPerCrew", 0),
        })
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_trips_csv(trips: List[Dict[str, Any]], path: str = None) -> str:
    path = path or default_filename("csv")
    trips_to_frame(trips).to_csv(path, index=False, encoding="utf-8-sig")
    return path


def export_trips_xlsx(trips: List[Dict[str, Any]], path: str = None) -> str:
    """One "Fishing Trips" sheet, columns at least 15 characters wide."""
    path = path or default_filename("xlsx")
    df = trips_to_frame(trips)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Fishing Trips", index=False)
        ws = writer.sheets["Fishing Trips"]
        for i, col in enumerate(df.columns, start=1):
            ws.column_dimensions[get_column_letter(i)].width = max(len(col), 15)
    return path
