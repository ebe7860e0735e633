# trip_store.py
import json
import os
import tempfile
import shutil
from threading import Lock
from typing import Any, Dict, List, Optional

from calculations import summarize_trips
from models import TRIPS_JSON_PATH


def _atomic_write(path: str, data: str) -> None:
    """Write a file atomically to avoid corruption."""
    folder = os.path.dirname(path) or "."
    os.makedirs(folder, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".trips.", dir=folder)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        shutil.move(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.remove(tmp)


def read_json_blob(path: str, default):
    """
    Load a JSON blob. Missing file -> `default`; unreadable or corrupt
    payloads are reported and also come back as `default`.
    """
    if not os.path.exists(path):
        return default
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        print(f"⚠️ Ignoring unreadable blob {path}: {e}")
        return default
    if not isinstance(data, type(default)):
        print(f"⚠️ Ignoring blob {path}: expected {type(default).__name__}")
        return default
    return data


def write_json_blob(path: str, data) -> None:
    _atomic_write(path, json.dumps(data, ensure_ascii=False, indent=2))


class LocalTripStore:
    """
    On-device trip list, one JSON array in data/fishing_trips.json.

    Every mutation rewrites the whole file. The lock only guards this
    process; two writers in different processes race and the last one wins.
    """

    DEFAULT_JSON_PATH = TRIPS_JSON_PATH

    def __init__(self, json_path: str = None):
        self.json_path = json_path or self.DEFAULT_JSON_PATH
        self._lock = Lock()

    # -------------------------
    # Public API
    # -------------------------
    def get_all(self) -> List[Dict[str, Any]]:
        with self._lock:
            return self._load()

    def save(self, trip: Dict[str, Any]) -> None:
        """Replace the trip with the same id in place, or append it."""
        with self._lock:
            trips = self._load()
            for i, t in enumerate(trips):
                if t.get("id") == trip.get("id"):
                    trips[i] = trip
                    break
            else:
                trips.append(trip)
            self._save(trips)

    def delete(self, trip_id: str) -> None:
        with self._lock:
            trips = [t for t in self._load() if t.get("id") != trip_id]
            self._save(trips)

    def get_by_id(self, trip_id: str) -> Optional[Dict[str, Any]]:
        for t in self.get_all():
            if t.get("id") == trip_id:
                return t
        return None

    def summarize(self) -> Dict[str, float]:
        return summarize_trips(self.get_all())

    # -------------------------
    # Internal helpers
    # -------------------------
    def _load(self) -> List[Dict[str, Any]]:
        trips = read_json_blob(self.json_path, [])
        kept = [t for t in trips if isinstance(t, dict)]
        if len(kept) != len(trips):
            print(f"⚠️ Skipping {len(trips) - len(kept)} malformed trip entries in {self.json_path}")
        return kept

    def _save(self, trips: List[Dict[str, Any]]) -> None:
        write_json_blob(self.json_path, trips)
