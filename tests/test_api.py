from __future__ import annotations

import logging
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from callisto.config_store import ConfigStore
from callisto.errors import DecodeError
from callisto.main import create_app
from callisto.notifier import ChangeNotifier


@pytest.fixture()
def client(config_path: Path):
    with TestClient(create_app(config_path=config_path)) as c:
        yield c


def test_startup_creates_config(client: TestClient, config_path: Path):
    assert config_path.exists()
    r = client.get("/config")
    assert r.status_code == 200
    assert r.json() == {"version": "1.0", "workspaces": [], "environments": []}


def test_startup_fails_on_corrupt_config(config_path: Path):
    config_path.parent.mkdir(parents=True)
    config_path.write_text("not json", encoding="utf-8")

    with pytest.raises(DecodeError):
        with TestClient(create_app(config_path=config_path)):
            pass


def test_workspace_collection_request_routes(client: TestClient):
    r = client.post("/workspaces", json={"name": "Personal"})
    assert r.status_code == 200
    ws = r.json()["workspaces"][0]["id"]

    r = client.post(f"/workspaces/{ws}/collections", json={"name": "Auth"})
    coll = r.json()["workspaces"][0]["collections"][0]["id"]

    r = client.patch(f"/workspaces/{ws}/collections/{coll}", json={"name": "Accounts"})
    assert r.json()["workspaces"][0]["collections"][0]["name"] == "Accounts"

    body = {"name": "Login", "req_type": "http", "method": "POST", "curl": "curl -X POST x"}
    r = client.post(f"/workspaces/{ws}/collections/{coll}/requests", json=body)
    req = r.json()["workspaces"][0]["collections"][0]["requests"][0]
    assert req["name"] == "Login"

    body["method"] = "PUT"
    r = client.put(f"/workspaces/{ws}/collections/{coll}/requests/{req['id']}", json=body)
    assert r.json()["workspaces"][0]["collections"][0]["requests"][0]["method"] == "PUT"

    r = client.delete(f"/workspaces/{ws}/collections/{coll}/requests/{req['id']}")
    assert r.json()["workspaces"][0]["collections"][0]["requests"] == []

    r = client.delete(f"/workspaces/{ws}/collections/{coll}")
    assert r.json()["workspaces"][0]["collections"] == []

    r = client.delete(f"/workspaces/{ws}")
    assert r.json()["workspaces"] == []


def test_missing_parent_maps_to_404(client: TestClient):
    r = client.post("/workspaces/nope/collections", json={"name": "Auth"})
    assert r.status_code == 404
    assert r.json() == {"detail": "Workspace not found"}

    r = client.put("/environments/nope", json={"name": "x", "variables": []})
    assert r.status_code == 404
    assert r.json() == {"detail": "Environment not found"}


def test_delete_missing_workspace_is_ok(client: TestClient):
    client.post("/workspaces", json={"name": "a"})
    before = client.post("/workspaces", json={"name": "b"}).json()

    r = client.delete("/workspaces/nope")
    assert r.status_code == 200
    assert r.json() == before


def test_environment_routes(client: TestClient):
    r = client.post("/environments", json={"name": "dev", "variables": [
        {"key": "a", "value": "1"}, {"key": "b", "value": "2"}, {"key": "c", "value": "3"},
    ]})
    env = r.json()["environments"][0]
    assert len(env["variables"]) == 3

    r = client.put(f"/environments/{env['id']}", json={"name": "prod", "variables": [{"key": "a", "value": "9"}]})
    assert r.json()["environments"][0] == {"id": env["id"], "name": "prod", "variables": [{"key": "a", "value": "9"}]}

    r = client.delete(f"/environments/{env['id']}")
    assert r.json()["environments"] == []


def test_unsupported_relay_method_maps_to_502(client: TestClient):
    r = client.post("/http/send", json={"method": "BREW", "url": "http://localhost/", "headers": {}})
    assert r.status_code == 502
    assert r.json() == {"detail": "Unsupported HTTP method: BREW"}


def test_events_socket_streams_config(client: TestClient):
    with client.websocket_connect("/events") as ws:
        first = ws.receive_json()
        assert first == {
            "event": "callisto-config",
            "payload": {"version": "1.0", "workspaces": [], "environments": []},
        }

        client.post("/workspaces", json={"name": "Personal"})
        msg = ws.receive_json()
        assert msg["event"] == "callisto-config"
        assert [w["name"] for w in msg["payload"]["workspaces"]] == ["Personal"]


def test_clean_startup_logs_no_warning(config_path: Path, caplog):
    with caplog.at_level(logging.DEBUG, logger="callisto"):
        with TestClient(create_app(config_path=config_path)):
            pass
    assert not [r for r in caplog.records if r.name.startswith("callisto") and r.levelno >= logging.WARNING]


def test_startup_publishes_to_attached_listener(config_path: Path):
    notifier = ChangeNotifier()
    seen: list[str] = []
    notifier.subscribe(lambda e, c: seen.append(e))

    with TestClient(create_app(config_path=config_path, store=ConfigStore(notifier))):
        assert seen == ["callisto-config"]
