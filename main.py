from flask import Flask, request, jsonify, send_file, abort
import io
import os
from datetime import datetime
from zoneinfo import ZoneInfo

from export import trips_to_frame
from notifications import send_unpaid_sales_notifications, post_push
from models import TRIPS_TABLE
from persistence import from_remote_row
from remote_store import RemoteStoreError, service_client

app = Flask(__name__)

ADMIN_KEY = os.environ.get("ADMIN_KEY", "fishing-admin")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _check_admin_key(req):
    key = req.args.get("key") or req.headers.get("X-Admin-Key")
    return key == ADMIN_KEY


# --- Lightweight health probe (for the scheduler's warmup ping) ---
@app.route("/healthz", methods=["GET", "HEAD"])
def healthz():
    if request.method == "HEAD":
        return ("", 200, {
            "Content-Type": "text/plain; charset=utf-8",
            "Cache-Control": "no-store"
        })
    return ("ok", 200, {
        "Content-Type": "text/plain; charset=utf-8",
        "Cache-Control": "no-store"
    })


# =========================
# Scheduled: unpaid sales reminders
# =========================
@app.route("/functions/send-unpaid-sales-notifications", methods=["POST", "OPTIONS"])
def send_unpaid_sales():
    if request.method == "OPTIONS":
        return ("", 200, CORS_HEADERS)

    cron_token = os.environ.get("CRON_TOKEN", "").strip()
    if cron_token and request.headers.get("X-Cron-Token", "") != cron_token:
        return jsonify({"error": "forbidden"}), 403, CORS_HEADERS

    if not os.environ.get("VAPID_PUBLIC_KEY") or not os.environ.get("VAPID_PRIVATE_KEY"):
        return jsonify({"error": "VAPID keys not configured"}), 500, CORS_HEADERS

    try:
        result = send_unpaid_sales_notifications(service_client(), sender=post_push)
    except Exception as e:
        print(f"⚠️ Error in send-unpaid-sales-notifications: {e}")
        return jsonify({"error": str(e)}), 500, CORS_HEADERS
    return jsonify(result), 200, CORS_HEADERS


# =========================
# Trip history export
# =========================
@app.route("/api/v1/trips/export.csv", methods=["GET"])
def export_trips_csv():
    """
    CSV of one account's trips. `user_id` is required; the server's own
    local cache is never exported.
    Same columns as the spreadsheet export.
    """
    if not _check_admin_key(request):
        return abort(403)

    user_id = (request.args.get("user_id") or "").strip()
    if not user_id:
        return jsonify({"error": "user_id is required"}), 400
    # the table only; the server has no trip cache of its own to offer
    try:
        rows = service_client().select(TRIPS_TABLE, {"user_id": user_id}, order="date.desc")
    except RemoteStoreError as e:
        print(f"⚠️ Export failed for user {user_id}: {e}")
        return jsonify({"error": str(e)}), 502
    trips = [from_remote_row(r) for r in rows]

    buf = io.StringIO()
    trips_to_frame(trips).to_csv(buf, index=False)
    data = io.BytesIO(buf.getvalue().encode("utf-8-sig"))

    dated = datetime.now(ZoneInfo("Indian/Maldives")).strftime("%Y-%m-%d")
    return send_file(
        data,
        mimetype="text/csv",
        as_attachment=True,
        download_name=f"fishing-trips-{dated}.csv",
    )


# =========================
# Entrypoint
# =========================
if __name__ == "__main__":
    # Useful for local debugging
    app.run(host="0.0.0.0", port=5000, debug=True)
