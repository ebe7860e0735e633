# id_map.py
import uuid
from threading import Lock
from typing import Dict, Optional

from models import ID_MAP_JSON_PATH
from trip_store import read_json_blob, write_json_blob


def is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except (TypeError, ValueError):
        return False
    return True


class TripIdMap:
    """
    Maps client trip ids (trip-<millis>-<salt>) to the UUIDs the remote
    fishing_trips table requires, stored as {local_id: remote_id} in
    data/trip_id_map.json.

    `remote_id_for` never writes; callers `remember` a new pair only once the
    remote upsert has gone through.
    """

    DEFAULT_JSON_PATH = ID_MAP_JSON_PATH

    def __init__(self, json_path: str = None):
        self.json_path = json_path or self.DEFAULT_JSON_PATH
        self._lock = Lock()

    def get_all(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._load())

    def lookup(self, local_id: str) -> Optional[str]:
        return self.get_all().get(local_id)

    def remote_id_for(self, local_id: str) -> str:
        known = self.lookup(local_id)
        if known:
            return known
        # rows that came from the server already carry their UUID
        if is_uuid(local_id):
            return str(local_id)
        return str(uuid.uuid4())

    def local_id_for(self, remote_id: str) -> Optional[str]:
        for local_id, rid in self.get_all().items():
            if rid == remote_id:
                return local_id
        return None

    def remember(self, local_id: str, remote_id: str) -> None:
        if local_id == remote_id:
            return
        with self._lock:
            data = self._load()
            if data.get(local_id) == remote_id:
                return
            data[local_id] = remote_id
            write_json_blob(self.json_path, data)

    def forget(self, local_id: str) -> None:
        with self._lock:
            data = self._load()
            if local_id in data:
                del data[local_id]
                write_json_blob(self.json_path, data)

    def _load(self) -> Dict[str, str]:
        raw = read_json_blob(self.json_path, {})
        return {str(k): str(v) for k, v in raw.items() if v}
