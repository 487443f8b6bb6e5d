import json
import time
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from backend.web.main import create_app
from config.schema import CallbackSettings, KeeperSettings
from core.errors import ErrorCode


class CallbackSink:
    """MockTransport handler collecting webhook deliveries."""

    def __init__(self, status: int = 200):
        self.status = status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status)

    def wait_for(self, count: int, timeout: float = 5.0) -> None:
        deadline = time.monotonic() + timeout
        while len(self.requests) < count and time.monotonic() < deadline:
            time.sleep(0.01)


@pytest.fixture
def sink() -> CallbackSink:
    return CallbackSink()


@pytest.fixture
def client(tmp_path: Path, sink: CallbackSink):
    app = create_app()
    app.state.settings = KeeperSettings(
        db_path=tmp_path / "keeper.db",
        callback=CallbackSettings(base_delay_ms=1, max_delay_ms=5),
    )
    app.state.http_client = httpx.AsyncClient(transport=httpx.MockTransport(sink))
    with TestClient(app) as c:
        yield c


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "callback_queue": {"queued": 0, "capacity": 100, "waiting": 0}}


def test_folder_tree(client):
    top = client.post("/api/folders", json={"name": "services"}).json()
    child = client.post("/api/folders", json={"name": "billing", "parent_id": top["id"]}).json()
    client.post("/api/files", json={"name": "db.yaml", "folder_id": child["id"]})

    root = client.get("/api/folders/root").json()
    assert [f["name"] for f in root["folders"]] == ["services"]

    loaded = client.get(f"/api/folders/{child['id']}").json()
    assert loaded["path"] == "services/billing"
    assert [f["name"] for f in loaded["files"]] == ["db.yaml"]

    renamed = client.patch(f"/api/folders/{child['id']}", json={"name": "payments"})
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "payments"

    assert client.delete(f"/api/folders/{top['id']}").json() == {"status": True}
    assert client.get(f"/api/folders/{child['id']}").status_code == 404


def test_error_body_shape(client):
    resp = client.get("/api/files/missing")

    assert resp.status_code == 404
    assert resp.json() == {
        "error": {"code": int(ErrorCode.NOT_FOUND), "message": "file does not exist", "details": {}},
    }


def test_status_mapping(client):
    assert client.post("/api/folders", json={"name": "///"}).status_code == 400

    client.post("/api/folders", json={"name": "dup"})
    conflict = client.post("/api/folders", json={"name": "dup"})
    assert conflict.status_code == 409
    assert conflict.json()["error"]["code"] == int(ErrorCode.EXISTS)

    required = client.post("/api/aliases", json={})
    assert required.status_code == 400
    assert required.json()["error"]["details"] == {"key": "required", "value": "required"}


def test_file_contents_listeners_and_formats(client):
    file = client.post("/api/files", json={"name": "app.json"}).json()

    created = client.post(
        f"/api/files/{file['id']}/contents",
        json={"version": "v1", "content": "{}", "format": "json"},
    )
    assert created.status_code == 200
    assert client.get(f"/api/files/{file['id']}/contents", params={"version": "v1"}).json()[0]["version"] == "v1"

    listener = client.post(
        f"/api/files/{file['id']}/listeners",
        json={"name": "svc", "callback_endpoint": "http://svc.test/hook"},
    ).json()
    assert client.get(f"/api/listeners/{listener['id']}").json()["name"] == "svc"
    assert len(client.get(f"/api/files/{file['id']}/listeners").json()) == 1
    assert client.patch(f"/api/listeners/{listener['id']}", json={"name": "svc-2"}).json()["name"] == "svc-2"
    assert client.delete(f"/api/listeners/{listener['id']}").json() == {"status": True}

    formats = [f["name"] for f in client.get("/api/content-formats").json()]
    assert "toml" in formats


def test_aliases_endpoints(client):
    file = client.post("/api/files", json={"name": "app.json"}).json()
    alias = client.post("/api/aliases", json={"key": "env", "value": "prod", "color": "red"}).json()

    assert client.get("/api/aliases", params={"key": "env"}).json()[0]["id"] == alias["id"]
    assert client.patch(f"/api/aliases/{alias['id']}", json={"color": "blue"}).json()["color"] == "blue"

    added = client.post(f"/api/files/{file['id']}/aliases", json={"aliases": [alias["id"]]})
    assert added.json() == {"added": 1}
    again = client.post(f"/api/files/{file['id']}/aliases", json={"aliases": [alias["id"]]})
    assert again.status_code == 409
    assert again.json()["error"]["message"] == "provided aliases already exists"

    assert [a["id"] for a in client.get(f"/api/files/{file['id']}/aliases").json()] == [alias["id"]]
    removed = client.request("DELETE", f"/api/files/{file['id']}/aliases", json={"aliases": [alias["id"]]})
    assert removed.json() == {"removed": 1}
    assert client.delete(f"/api/aliases/{alias['id']}").json() == {"status": True}


def test_editing_content_notifies_listeners(client, sink):
    file = client.post("/api/files", json={"name": "app.json"}).json()
    content = client.post(
        f"/api/files/{file['id']}/contents",
        json={"version": "v1", "content": "{}", "format": "json"},
    ).json()
    for name in ("a", "b"):
        client.post(
            f"/api/files/{file['id']}/listeners",
            json={"name": name, "callback_endpoint": f"http://{name}.test/hook"},
        )

    resp = client.patch(f"/api/contents/{content['id']}", json={"content": '{"feature": true}'})
    assert resp.status_code == 200

    sink.wait_for(2)
    assert sorted(str(r.url) for r in sink.requests) == ["http://a.test/hook", "http://b.test/hook"]
    body = json.loads(sink.requests[0].content)
    assert body["id"] == file["id"]
    assert body["file_contents"][0]["content"] == '{"feature": true}'
    assert sink.requests[0].headers["content-type"] == "application/json"


def test_creating_content_does_not_notify(client, sink):
    file = client.post("/api/files", json={"name": "app.json"}).json()
    client.post(
        f"/api/files/{file['id']}/listeners",
        json={"name": "a", "callback_endpoint": "http://a.test/hook"},
    )
    client.post(f"/api/files/{file['id']}/contents", json={"version": "v1", "content": "{}", "format": "json"})

    time.sleep(0.1)
    assert sink.requests == []
