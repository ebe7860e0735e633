# notifications.py
import os
from typing import Any, Callable, Dict, List, Tuple

import requests

from models import SUBSCRIPTIONS_TABLE, TRIPS_TABLE
from persistence import to_float
from remote_store import RemoteTableStore

VAPID_PUBLIC_KEY = os.environ.get("VAPID_PUBLIC_KEY", "")


def save_subscription(remote: RemoteTableStore, user_id: str, subscription_data: Dict[str, Any]) -> None:
    """Store the browser push subscription; one per user."""
    remote.upsert(
        SUBSCRIPTIONS_TABLE,
        {"user_id": user_id, "subscription_data": subscription_data},
        on_conflict="user_id",
    )


def collect_unpaid(trip_rows: List[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], float]:
    """Unpaid sales from raw fishing_trips rows, plus their summed amount."""
    unpaid = []
    total = 0.0
    for trip in trip_rows or []:
        sales = trip.get("fish_sales")
        if not isinstance(sales, list):
            continue
        for sale in sales:
            if not isinstance(sale, dict) or sale.get("paid"):
                continue
            # non-numeric amounts count as 0
            amount = to_float(sale.get("totalAmount"))
            unpaid.append({
                "id": sale.get("id"),
                "name": sale.get("name"),
                "totalAmount": amount,
                "tripDate": trip.get("date"),
            })
            total += amount
    return unpaid, total


def build_payload(unpaid_count: int, total_amount: float) -> Dict[str, Any]:
    return {
        "title": "Unpaid Sales Reminder",
        "body": f"You have {unpaid_count} unpaid sales totaling MVR {total_amount:.2f}",
        "data": {
            "unpaidCount": unpaid_count,
            "totalAmount": total_amount,
            "url": "/history",
        },
    }


def post_push(subscription_data: Dict[str, Any], payload: Dict[str, Any]) -> None:
    """
    Deliver a payload to a push subscription endpoint. Message encryption
    is left to the push gateway; this only POSTs the JSON body.
    """
    endpoint = (subscription_data or {}).get("endpoint")
    if not endpoint:
        raise ValueError("subscription has no endpoint")
    resp = requests.post(
        endpoint,
        json=payload,
        headers={"TTL": "86400", "Crypto-Key": f"p256ecdsa={VAPID_PUBLIC_KEY}"},
    )
    if not resp.ok:
        raise RuntimeError(f"Push notification failed: {resp.status_code} {resp.reason}")


def send_unpaid_sales_notifications(remote: RemoteTableStore,
                                    sender: Callable[[Dict[str, Any], Dict[str, Any]], None] = post_push
                                    ) -> Dict[str, Any]:
    """
    Scan every push subscription, re-read that user's trips and send one
    reminder per subscription that has unpaid sales.

    Listing subscriptions must succeed; anything failing for a single user
    is printed and that user is skipped.
    """
    print("[NOTIFY] Starting unpaid sales notification check...")
    subscriptions = remote.select(SUBSCRIPTIONS_TABLE)
    print(f"[NOTIFY] Found {len(subscriptions)} push subscriptions")

    sent = 0
    for sub in subscriptions:
        user_id = sub.get("user_id")
        try:
            trips = remote.select(TRIPS_TABLE, {"user_id": user_id})
            unpaid, total = collect_unpaid(trips)
            print(f"[NOTIFY] User {user_id} has {len(unpaid)} unpaid sales totaling MVR {total:.2f}")
            if not unpaid:
                continue
            sender(sub.get("subscription_data") or {}, build_payload(len(unpaid), total))
            sent += 1
        except Exception as e:
            print(f"⚠️ Error processing user {user_id}: {e}")

    print(f"[NOTIFY] Notification check complete. Sent {sent} notifications.")
    return {
        "success": True,
        "message": f"Sent {sent} notifications",
        "subscriptionsChecked": len(subscriptions),
        "notificationsSent": sent,
    }
