# settings_store.py
from threading import Lock
from typing import Any, Dict, Optional

from models import SETTINGS_FIELD_MAP, SETTINGS_JSON_PATH, SETTINGS_TABLE, default_settings
from remote_store import RemoteStoreError, RemoteTableStore
from trip_store import read_json_blob, write_json_blob


class BoatSettingsStore:
    """
    Boat/owner/bank details, one record per account, last write wins.

    The local blob (data/boat_settings.json) is always written; when a user
    is signed in the user_settings row is upserted as well.
    """

    DEFAULT_JSON_PATH = SETTINGS_JSON_PATH

    def __init__(self,
                 json_path: str = None,
                 remote: Optional[RemoteTableStore] = None,
                 user_id: Optional[str] = None):
        self.json_path = json_path or self.DEFAULT_JSON_PATH
        self.remote = remote
        self.user_id = user_id
        self._lock = Lock()

    def get(self) -> Dict[str, Any]:
        if self.remote is not None and self.user_id:
            try:
                rows = self.remote.select(SETTINGS_TABLE, {"user_id": self.user_id}, limit=1)
                if rows:
                    return self._from_row(rows[0])
            except RemoteStoreError as e:
                print(f"⚠️ Error loading boat settings, using local copy: {e}")
        return self._get_local()

    def save(self, settings: Dict[str, Any]) -> None:
        clean = {k: settings[k] for k in SETTINGS_FIELD_MAP if settings.get(k) is not None}
        with self._lock:
            write_json_blob(self.json_path, clean)
        if self.remote is not None and self.user_id:
            row = {col: clean.get(key) for key, col in SETTINGS_FIELD_MAP.items()}
            row["user_id"] = self.user_id
            self.remote.upsert(SETTINGS_TABLE, row, on_conflict="user_id")

    def _get_local(self) -> Dict[str, Any]:
        with self._lock:
            data = read_json_blob(self.json_path, {})
        out = default_settings()
        out.update({k: v for k, v in data.items() if k in SETTINGS_FIELD_MAP and v is not None})
        return out

    @staticmethod
    def _from_row(row: Dict[str, Any]) -> Dict[str, Any]:
        out = default_settings()
        for key, col in SETTINGS_FIELD_MAP.items():
            if row.get(col) is not None:
                out[key] = row[col]
        return out
