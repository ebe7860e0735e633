import copy
from collections import defaultdict

import pytest

from id_map import TripIdMap
from persistence import TripRepo
from remote_store import RemoteStoreError
from trip_store import LocalTripStore


class FakeRemote:
    """In-memory stand-in for RemoteTableStore with switchable failures."""

    def __init__(self):
        self.tables = defaultdict(list)
        self.fail = set()
        self.calls = []

    def _check(self, op, table):
        self.calls.append((op, table))
        if op in self.fail or (op, table) in self.fail:
            raise RemoteStoreError(f"{op} {table} unavailable", 503)

    @staticmethod
    def _matches(row, filters):
        return all(row.get(k) == v for k, v in (filters or {}).items())

    def select(self, table, filters=None, order=None, limit=None):
        self._check("select", table)
        rows = [r for r in self.tables[table] if self._matches(r, filters)]
        if order:
            col, _, direction = order.partition(".")
            rows = sorted(rows, key=lambda r: r.get(col) or "", reverse=direction == "desc")
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    def upsert(self, table, rows, on_conflict="id"):
        self._check("upsert", table)
        if isinstance(rows, dict):
            rows = [rows]
        existing = self.tables[table]
        for row in rows:
            for i, r in enumerate(existing):
                if r.get(on_conflict) == row.get(on_conflict):
                    existing[i] = copy.deepcopy(row)
                    break
            else:
                existing.append(copy.deepcopy(row))

    def delete(self, table, filters):
        self._check("delete", table)
        self.tables[table] = [r for r in self.tables[table] if not self._matches(r, filters)]


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def local(tmp_path):
    return LocalTripStore(json_path=str(tmp_path / "fishing_trips.json"))


@pytest.fixture
def id_map(tmp_path):
    return TripIdMap(json_path=str(tmp_path / "trip_id_map.json"))


@pytest.fixture
def offline_repo(local, id_map):
    """Repo with nobody signed in."""
    return TripRepo(local, id_map)


@pytest.fixture
def repo(local, id_map, remote):
    """Repo for a signed-in user backed by the fake remote."""
    return TripRepo(local, id_map, remote, user_id="user-1")


@pytest.fixture
def make_trip():
    """Factory for trip dicts in the local shape."""
    def _make(trip_id="trip-1700000000000-abc123xyz", **overrides):
        trip = {
            "id": trip_id,
            "date": "2025-03-01",
            "crew": ["Ali", "Hassan", "Moosa", "Ibrahim"],
            "expenses": {"fuel": 200, "food": 100, "other": 50},
            "fishSales": [],
            "tripType": "Yellow Fin Tuna",
            "totalCatch": 120.0,
            "totalSales": 1000.0,
            "ownerSharePercent": 20,
            "profit": 650.0,
            "ownerProfit": 130.0,
            "profitPerCrew": 130.0,
        }
        trip.update(overrides)
        return trip
    return _make
