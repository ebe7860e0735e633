# persistence.py
import json
from typing import Any, Dict, List, Optional

from calculations import summarize_trips
from id_map import TripIdMap
from models import TRIP_FIELD_MAP, TRIP_NUMERIC_FIELDS, TRIPS_TABLE, empty_expenses
from remote_store import RemoteStoreError, RemoteTableStore
from trip_store import LocalTripStore


def get_repo(user_id: Optional[str] = None, access_token: Optional[str] = None):
    """
    Trip repo for the current session. No user -> everything stays in the
    local JSON cache; with a user the hosted table store is primary.
    """
    local = LocalTripStore()
    id_map = TripIdMap()
    if not user_id:
        return TripRepo(local, id_map)
    return TripRepo(local, id_map, RemoteTableStore(access_token=access_token), user_id)


def to_float(v, default=0.0):
    try:
        s = str(v).strip()
        if s == "" or s.lower() in ("nan", "none", "null"):
            return float(default)
        return float(s)
    except (TypeError, ValueError):
        return float(default)


def _json_value(v, default):
    # jsonb columns normally arrive decoded; tolerate text columns too
    if isinstance(v, str):
        try:
            v = json.loads(v)
        except ValueError:
            return default
    return default if v is None else v


def to_remote_row(trip: Dict[str, Any], user_id: str, remote_id: str) -> Dict[str, Any]:
    """Local trip -> fishing_trips row (snake_case, owned by `user_id`)."""
    row = {"id": remote_id, "user_id": user_id}
    for local_key, column in TRIP_FIELD_MAP.items():
        if local_key == "id":
            continue
        row[column] = trip.get(local_key)
    row["crew"] = list(trip.get("crew") or [])
    row["expenses"] = dict(trip.get("expenses") or empty_expenses())
    row["fish_sales"] = list(trip.get("fishSales") or [])
    return row


def from_remote_row(row: Dict[str, Any], local_id: Optional[str] = None) -> Dict[str, Any]:
    """
    fishing_trips row -> local trip. Numbers are coerced (they may come back
    as strings) and gaps become 0 / empty collections, never None.
    """
    expenses = _json_value(row.get("expenses"), {})
    if not isinstance(expenses, dict):
        expenses = {}
    trip = {
        "id": local_id or row.get("id"),
        "date": row.get("date") or "",
        "crew": list(_json_value(row.get("crew"), [])),
        "expenses": {k: to_float(expenses.get(k)) for k in empty_expenses()},
        "fishSales": list(_json_value(row.get("fish_sales"), [])),
        "tripType": row.get("trip_type") or "",
    }
    hire = _json_value(row.get("hire_details"), None)
    if hire is not None:
        trip["hireDetails"] = hire
    weather = _json_value(row.get("weather_conditions"), None)
    if weather is not None:
        trip["weatherConditions"] = weather
    for key in TRIP_NUMERIC_FIELDS:
        trip[key] = to_float(row.get(TRIP_FIELD_MAP[key]))
    return trip


class TripRepo:
    """
    One trip CRUD surface over two stores.

    Signed out: LocalTripStore only. Signed in: the remote table is the
    primary copy; reads fall back to the local cache when the remote call
    fails, and failed writes/deletes are applied locally and then re-raised
    so the caller can report "saved on this device only".
    """

    def __init__(self,
                 local: LocalTripStore,
                 id_map: TripIdMap,
                 remote: Optional[RemoteTableStore] = None,
                 user_id: Optional[str] = None):
        self.local = local
        self.id_map = id_map
        self.remote = remote
        self.user_id = user_id

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id) and self.remote is not None

    # ===== API =====

    def get_all(self) -> List[Dict[str, Any]]:
        if not self.is_authenticated:
            return self.local.get_all()
        try:
            rows = self.remote.select(TRIPS_TABLE, {"user_id": self.user_id}, order="date.desc")
        except RemoteStoreError as e:
            print(f"⚠️ Error fetching trips, using local copy: {e}")
            return self.local.get_all()
        return [self._from_row(r) for r in rows]

    def get_by_id(self, trip_id: str) -> Optional[Dict[str, Any]]:
        if not self.is_authenticated:
            return self.local.get_by_id(trip_id)
        remote_id = self.id_map.remote_id_for(trip_id)
        try:
            rows = self.remote.select(TRIPS_TABLE, {"id": remote_id, "user_id": self.user_id}, limit=1)
        except RemoteStoreError as e:
            print(f"⚠️ Error fetching trip {trip_id}, using local copy: {e}")
            return self.local.get_by_id(trip_id)
        return self._from_row(rows[0]) if rows else None

    def save(self, trip: Dict[str, Any]) -> None:
        if not self.is_authenticated:
            self.local.save(trip)
            return
        try:
            self._push(trip)
        except RemoteStoreError as e:
            # the local copy keeps the client id, whatever the mapping says
            print(f"⚠️ Error saving trip {trip.get('id')} online, saved locally instead: {e}")
            self.local.save(trip)
            raise

    def delete(self, trip_id: str) -> None:
        if not self.is_authenticated:
            self.local.delete(trip_id)
            return
        remote_id = self.id_map.remote_id_for(trip_id)
        try:
            self.remote.delete(TRIPS_TABLE, {"id": remote_id, "user_id": self.user_id})
        except RemoteStoreError as e:
            print(f"⚠️ Error deleting trip {trip_id} online, deleting local copy: {e}")
            self.local.delete(trip_id)
            raise
        self.id_map.forget(trip_id)

    def summarize(self) -> Dict[str, float]:
        return summarize_trips(self.get_all())

    def sync_local_to_remote(self) -> int:
        """
        One-shot upload of the local cache after the first sign-in.

        Skipped when the account already has any trip row. All trips go up
        in one upsert and the id mappings are stored only after it succeeds,
        so a failed upload can simply be retried. Returns how many trips
        were pushed; remote errors propagate.
        """
        if not self.is_authenticated:
            raise RuntimeError("User not authenticated")

        existing = self.remote.select(TRIPS_TABLE, {"user_id": self.user_id}, limit=1)
        if existing:
            print(f"[SYNC] user {self.user_id} already has remote trips, skipping local upload")
            return 0

        local_trips = self.local.get_all()
        if not local_trips:
            return 0
        pairs = [(t.get("id"), self.id_map.remote_id_for(t.get("id"))) for t in local_trips]
        rows = [to_remote_row(t, self.user_id, remote_id) for t, (_, remote_id) in zip(local_trips, pairs)]
        self.remote.upsert(TRIPS_TABLE, rows, on_conflict="id")
        for local_id, remote_id in pairs:
            self.id_map.remember(local_id, remote_id)
        print(f"[SYNC] pushed {len(local_trips)} local trips for user {self.user_id}")
        return len(local_trips)

    # ===== Internals =====

    def _push(self, trip: Dict[str, Any]) -> str:
        local_id = trip.get("id")
        remote_id = self.id_map.remote_id_for(local_id)
        self.remote.upsert(TRIPS_TABLE, to_remote_row(trip, self.user_id, remote_id), on_conflict="id")
        self.id_map.remember(local_id, remote_id)
        return remote_id

    def _from_row(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return from_remote_row(row, self.id_map.local_id_for(row.get("id")))
