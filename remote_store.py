# remote_store.py
import os
from typing import Any, Dict, List, Optional

import requests

SUPABASE_URL = os.environ.get("SUPABASE_URL", "").rstrip("/")
SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")
SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")


class RemoteStoreError(RuntimeError):
    """Raised when the hosted table store can't be reached or rejects a call."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def _eq_params(filters: Optional[Dict[str, Any]]) -> Dict[str, str]:
    return {col: f"eq.{val}" for col, val in (filters or {}).items()}


class RemoteTableStore:
    """
    Generic CRUD over the hosted PostgREST endpoint (/rest/v1/<table>).

    Only equality filters are supported. There is no retry and, unless a
    `timeout` is given, no deadline: a hung request blocks the caller.
    """

    def __init__(self,
                 url: str = None,
                 key: str = None,
                 access_token: str = None,
                 session: requests.Session = None,
                 timeout: float = None):
        self.url = (url or SUPABASE_URL).rstrip("/")
        self.key = key or SUPABASE_ANON_KEY
        self.access_token = access_token or self.key
        self.session = session or requests.Session()
        self.timeout = timeout

    # ===== API =====

    def select(self,
               table: str,
               filters: Optional[Dict[str, Any]] = None,
               order: Optional[str] = None,
               limit: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {"select": "*", **_eq_params(filters)}
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = str(int(limit))
        resp = self._request("GET", table, params=params)
        try:
            data = resp.json()
        except ValueError:
            raise RemoteStoreError(f"select {table}: response is not JSON", resp.status_code, resp.text)
        return data if isinstance(data, list) else []

    def upsert(self, table: str, rows, on_conflict: str = "id") -> None:
        """Insert-or-replace rows keyed by `on_conflict`."""
        if isinstance(rows, dict):
            rows = [rows]
        self._request(
            "POST", table,
            params={"on_conflict": on_conflict},
            json=list(rows),
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )

    def delete(self, table: str, filters: Dict[str, Any]) -> None:
        if not filters:
            # PostgREST refuses unfiltered deletes anyway
            raise ValueError("delete requires at least one filter")
        self._request("DELETE", table, params=_eq_params(filters))

    # ===== Internals =====

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        h = {
            "apikey": self.key,
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        h.update(extra or {})
        return h

    def _request(self, method: str, table: str, params=None, json=None, headers=None) -> requests.Response:
        if not self.url:
            raise RemoteStoreError("SUPABASE_URL is not configured")
        endpoint = f"{self.url}/rest/v1/{table}"
        try:
            resp = self.session.request(
                method, endpoint,
                params=params,
                json=json,
                headers=self._headers(headers),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RemoteStoreError(f"{method} {table} failed: {e}") from e
        if resp.status_code >= 400:
            raise RemoteStoreError(
                f"{method} {table} failed: {resp.status_code}",
                resp.status_code,
                resp.text,
            )
        return resp


def service_client() -> RemoteTableStore:
    """Client for server-side jobs; the service role key bypasses row-level security."""
    return RemoteTableStore(key=SUPABASE_SERVICE_ROLE_KEY or SUPABASE_ANON_KEY)
