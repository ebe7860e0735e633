import pytest

from remote_store import RemoteStoreError
from settings_store import BoatSettingsStore

SETTINGS = {
    "boatName": "Dhoni One",
    "ownerName": "Ahmed",
    "contactNumber": "7770000",
    "email": "boat@example.com",
    "address": "Male",
    "registrationNumber": "REG-42",
    "bankName": "BML",
    "accountNumber": "7701",
    "accountName": "Ahmed",
}


@pytest.fixture
def settings_path(tmp_path):
    return str(tmp_path / "boat_settings.json")


def test_defaults_when_nothing_saved(settings_path):
    out = BoatSettingsStore(json_path=settings_path).get()
    assert out["boatName"] == ""
    assert "logoUrl" not in out


def test_local_round_trip(settings_path):
    store = BoatSettingsStore(json_path=settings_path)
    store.save({**SETTINGS, "unknownField": "dropped"})
    out = store.get()
    assert out == SETTINGS


def test_corrupt_blob_gives_defaults(tmp_path):
    path = tmp_path / "boat_settings.json"
    path.write_text("nope", encoding="utf-8")
    assert BoatSettingsStore(json_path=str(path)).get()["ownerName"] == ""


def test_signed_in_save_upserts_by_user(settings_path, remote):
    store = BoatSettingsStore(json_path=settings_path, remote=remote, user_id="user-1")
    store.save(SETTINGS)
    store.save({**SETTINGS, "boatName": "Dhoni Two", "logoUrl": "https://cdn/logo.png"})
    rows = remote.tables["user_settings"]
    assert len(rows) == 1
    assert rows[0]["boat_name"] == "Dhoni Two"
    assert rows[0]["logo_url"] == "https://cdn/logo.png"
    assert store.get()["boatName"] == "Dhoni Two"


def test_signed_in_get_falls_back_to_local(settings_path, remote):
    BoatSettingsStore(json_path=settings_path).save(SETTINGS)
    store = BoatSettingsStore(json_path=settings_path, remote=remote, user_id="user-1")
    # no remote row yet
    assert store.get()["boatName"] == "Dhoni One"
    remote.fail.add("select")
    assert store.get()["boatName"] == "Dhoni One"


def test_failed_remote_save_keeps_local_copy(settings_path, remote):
    remote.fail.add("upsert")
    store = BoatSettingsStore(json_path=settings_path, remote=remote, user_id="user-1")
    with pytest.raises(RemoteStoreError):
        store.save(SETTINGS)
    assert BoatSettingsStore(json_path=settings_path).get() == SETTINGS
