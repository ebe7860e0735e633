# calculations.py
import copy
import math
import random
import string
import time
from typing import Any, Dict, List, Optional

from models import FISH_TYPES, empty_summary


class SaleValueError(ValueError):
    """Raised when a fish sale is missing a buyer or has a bad weight/rate."""
    pass


def _expense_total(expenses: Optional[Dict[str, Any]]) -> float:
    expenses = expenses or {}
    return expenses.get("fuel", 0) + expenses.get("food", 0) + expenses.get("other", 0)


def compute_profit(total_sales: float, expenses: Dict[str, Any], hire_price: float = 0) -> float:
    """
    profit = total_sales + hire_price - (fuel + food + other)
    No rounding here; callers format for display. Losses come back negative.
    """
    return total_sales + hire_price - _expense_total(expenses)


def compute_distribution(profit: float, crew_count: int, owner_share_percent: float = 0) -> Dict[str, float]:
    """
    Owner takes `owner_share_percent` of the profit first, the rest is split
    evenly across the crew. With no crew the remainder stays undistributed.
    The percentage is not bounds-checked.
    """
    owner_profit = profit * owner_share_percent / 100
    remaining = profit - owner_profit
    profit_per_crew = remaining / crew_count if crew_count > 0 else 0
    return {
        "ownerProfit": owner_profit,
        "profitPerCrew": profit_per_crew,
        "totalDistributed": owner_profit + profit_per_crew * crew_count,
    }


def _token(prefix: str) -> str:
    # <prefix>-<epoch millis>-<9 base36 chars>
    salt = ''.join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{prefix}-{int(time.time() * 1000)}-{salt}"


def generate_trip_id() -> str:
    return _token("trip")


def generate_sale_id() -> str:
    return _token("sale")


def new_sale(name: str,
             contact: str,
             weight: float,
             rate_price: float,
             paid: bool = False,
             fish_type: Optional[str] = None,
             remarks: Optional[str] = None) -> Dict[str, Any]:
    """
    Build a Sale dict. `totalAmount` is fixed here (weight x rate) and is not
    re-derived later, even if weight or rate are edited.
    """
    name = (name or "").strip()
    if not name:
        raise SaleValueError("Buyer name is required.")
    try:
        w = float(weight)
        r = float(rate_price)
    except (TypeError, ValueError):
        raise SaleValueError("Weight and rate must be numbers.")
    if not (math.isfinite(w) and math.isfinite(r)):
        raise SaleValueError("Weight and rate must be finite numbers.")
    if w <= 0 or r <= 0:
        raise SaleValueError("Weight and rate must be greater than zero.")
    if fish_type is not None and fish_type not in FISH_TYPES:
        raise SaleValueError(f"Unknown fish type '{fish_type}'.")

    sale = {
        "id": generate_sale_id(),
        "name": name,
        "contact": (contact or "").strip(),
        "weight": w,
        "ratePrice": r,
        "totalAmount": w * r,
        "paid": bool(paid),
    }
    if fish_type:
        sale["fishType"] = fish_type
    if remarks:
        sale["remarks"] = remarks
    return sale


def add_sale(trip: Dict[str, Any], sale: Dict[str, Any]) -> Dict[str, Any]:
    """Append a sale and bump the catch/sales totals by its weight/amount."""
    out = copy.deepcopy(trip)
    out["fishSales"] = list(out.get("fishSales") or []) + [dict(sale)]
    out["totalCatch"] = (out.get("totalCatch") or 0) + sale.get("weight", 0)
    out["totalSales"] = (out.get("totalSales") or 0) + sale.get("totalAmount", 0)
    return out


def mark_sale_paid(trip: Dict[str, Any], sale_id: str, paid: bool = True) -> Dict[str, Any]:
    out = copy.deepcopy(trip)
    for s in out.get("fishSales") or []:
        if s.get("id") == sale_id:
            s["paid"] = bool(paid)
    return out


def finalize_trip(trip: Dict[str, Any]) -> Dict[str, Any]:
    """
    Snapshot profit, ownerProfit and profitPerCrew onto a copy of the trip.
    The stored values are what the trip looked like at save time; nothing
    recomputes them on read.
    """
    out = copy.deepcopy(trip)
    hire_price = (out.get("hireDetails") or {}).get("hiredPrice") or 0
    profit = compute_profit(out.get("totalSales") or 0, out.get("expenses"), hire_price)
    dist = compute_distribution(profit, len(out.get("crew") or []), out.get("ownerSharePercent") or 0)
    out["profit"] = profit
    out["ownerProfit"] = dist["ownerProfit"]
    out["profitPerCrew"] = dist["profitPerCrew"]
    return out


def unpaid_sales(trips: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Unpaid sales across trips, each tagged with tripId/tripDate."""
    out = []
    for t in trips or []:
        for s in t.get("fishSales") or []:
            if not s.get("paid"):
                out.append({**s, "tripId": t.get("id"), "tripDate": t.get("date")})
    return out


def summarize_trips(trips: List[Dict[str, Any]]) -> Dict[str, float]:
    if not trips:
        return empty_summary()

    total_catch = sum(t.get("totalCatch") or 0 for t in trips)
    total_sales = sum(t.get("totalSales") or 0 for t in trips)
    total_profit = sum(t.get("profit") or 0 for t in trips)
    return {
        "totalTrips": len(trips),
        "totalCatch": total_catch,
        "totalSales": total_sales,
        "totalProfit": total_profit,
        "averageProfit": total_profit / len(trips),
    }
