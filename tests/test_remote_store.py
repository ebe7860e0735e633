import pytest
import requests

from remote_store import RemoteStoreError, RemoteTableStore


class _Resp:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class _Session:
    """Records requests and replays canned responses."""

    def __init__(self, response=None, error=None):
        self.response = response or _Resp(200, [])
        self.error = error
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error:
            raise self.error
        return self.response


def _store(session):
    return RemoteTableStore(url="https://db.example/", key="anon", access_token="jwt", session=session)


def test_select_builds_postgrest_query():
    session = _Session(_Resp(200, [{"id": "1"}]))
    rows = _store(session).select("fishing_trips", {"user_id": "u1"}, order="date.desc", limit=5)
    assert rows == [{"id": "1"}]
    method, url, kwargs = session.calls[0]
    assert method == "GET"
    assert url == "https://db.example/rest/v1/fishing_trips"
    assert kwargs["params"] == {"select": "*", "user_id": "eq.u1", "order": "date.desc", "limit": "5"}
    assert kwargs["headers"]["apikey"] == "anon"
    assert kwargs["headers"]["Authorization"] == "Bearer jwt"
    assert kwargs["timeout"] is None


def test_upsert_merges_on_conflict_column():
    session = _Session(_Resp(201))
    _store(session).upsert("user_settings", {"user_id": "u1"}, on_conflict="user_id")
    method, _, kwargs = session.calls[0]
    assert method == "POST"
    assert kwargs["params"] == {"on_conflict": "user_id"}
    assert kwargs["json"] == [{"user_id": "u1"}]
    assert "merge-duplicates" in kwargs["headers"]["Prefer"]


def test_delete_needs_filter():
    with pytest.raises(ValueError):
        _store(_Session()).delete("fishing_trips", {})


def test_delete_by_filter():
    session = _Session(_Resp(204))
    _store(session).delete("fishing_trips", {"id": "abc", "user_id": "u1"})
    method, _, kwargs = session.calls[0]
    assert method == "DELETE"
    assert kwargs["params"] == {"id": "eq.abc", "user_id": "eq.u1"}


def test_http_error_raises_remote_store_error():
    session = _Session(_Resp(401, text="JWT expired"))
    with pytest.raises(RemoteStoreError) as exc:
        _store(session).select("fishing_trips")
    assert exc.value.status_code == 401
    assert exc.value.body == "JWT expired"


def test_transport_error_is_wrapped():
    session = _Session(error=requests.ConnectionError("offline"))
    with pytest.raises(RemoteStoreError):
        _store(session).upsert("fishing_trips", [{"id": "1"}])


def test_non_json_select_is_an_error():
    with pytest.raises(RemoteStoreError):
        _store(_Session(_Resp(200, None, "<html>"))).select("fishing_trips")


def test_missing_url_is_an_error():
    store = RemoteTableStore(url="", key="anon", session=_Session())
    store.url = ""
    with pytest.raises(RemoteStoreError):
        store.select("fishing_trips")
