"""单文件详情、重命名、删除以及公开访问的集成测试。"""

import hashlib
import io
import time

from fastapi.testclient import TestClient

from app.main import app
from app.packages.media.core.dependencies import get_storage
from app.packages.media.core.exceptions import StorageError
from app.packages.media.models import FileRecord
from app.packages.media.services.storage_backends import LocalBackend

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x07" * 512


def _create(client: TestClient, headers, *, name: str = "photo.png", data: bytes = PNG_BYTES, **extra) -> dict:
    resp = client.post(
        "/api/upload",
        files=[("file", (name, io.BytesIO(data), "image/png"))],
        data=extra or None,
        headers=headers,
    )
    assert resp.status_code == 201
    return resp.json()["file"]


def test_get_file_detail(client: TestClient, auth_headers):
    created = _create(client, auth_headers)
    resp = client.get(f"/api/file/{created['id']}", headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["file"] == created
    assert set(body["file"]) >= {"stored_path", "width", "height", "duration", "updated_at"}


def test_get_unknown_file(client: TestClient, auth_headers):
    resp = client.get("/api/file/does-not-exist", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "File not found"}


def test_rename_file(client: TestClient, auth_headers, db_session_fixture):
    created = _create(client, auth_headers)
    time.sleep(0.01)

    resp = client.patch(f"/api/file/{created['id']}", json={"original_name": "Renamed.png"}, headers=auth_headers)
    assert resp.status_code == 200
    file = resp.json()["file"]
    assert file["original_name"] == "Renamed.png"
    assert file["stored_path"] == created["stored_path"]
    assert file["created_at"] == created["created_at"]
    assert file["updated_at"] > created["updated_at"]

    again = client.get(f"/api/file/{created['id']}", headers=auth_headers).json()["file"]
    assert again["original_name"] == "Renamed.png"


def test_rename_keeps_name_verbatim(client: TestClient, auth_headers):
    created = _create(client, auth_headers)
    resp = client.patch(f"/api/file/{created['id']}", json={"original_name": "  spaced.png "}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["file"]["original_name"] == "  spaced.png "


def test_rename_without_field_is_noop(client: TestClient, auth_headers):
    created = _create(client, auth_headers)
    resp = client.patch(f"/api/file/{created['id']}", json={"unrelated": 1}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["file"] == created


def test_rename_rejects_invalid_names(client: TestClient, auth_headers):
    created = _create(client, auth_headers)
    url = f"/api/file/{created['id']}"
    for payload in ({"original_name": ""}, {"original_name": "   "}, {"original_name": None}, {"original_name": 42}):
        resp = client.patch(url, json=payload, headers=auth_headers)
        assert resp.status_code == 400, payload
        assert resp.json() == {"success": False, "error": "original_name must be a non-empty string"}

    assert client.get(url, headers=auth_headers).json()["file"]["original_name"] == "photo.png"


def test_rename_rejects_malformed_json(client: TestClient, auth_headers):
    created = _create(client, auth_headers)
    url = f"/api/file/{created['id']}"
    headers = {**auth_headers, "Content-Type": "application/json"}

    resp = client.patch(url, content=b"{broken", headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid JSON body"

    resp = client.patch(url, content=b"[1, 2]", headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid JSON body"


def test_rename_unknown_file_is_404_before_body_checks(client: TestClient, auth_headers):
    resp = client.patch(
        "/api/file/missing",
        content=b"{broken",
        headers={**auth_headers, "Content-Type": "application/json"},
    )
    assert resp.status_code == 404
    assert resp.json()["error"] == "File not found"


def test_delete_file(client: TestClient, auth_headers, storage: LocalBackend, db_session_fixture):
    created = _create(client, auth_headers)
    assert storage.get(created["stored_path"]) is not None

    resp = client.delete(f"/api/file/{created['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "File deleted successfully"}

    assert storage.get(created["stored_path"]) is None
    assert db_session_fixture.get(FileRecord, created["id"]) is None
    assert client.get(f"/api/file/{created['id']}", headers=auth_headers).status_code == 404
    assert client.delete(f"/api/file/{created['id']}", headers=auth_headers).status_code == 404


class RecordingBackend(LocalBackend):
    def __init__(self, root, record_check):
        super().__init__(root)
        self.record_check = record_check
        self.deleted: list[tuple[str, bool]] = []

    def delete(self, path: str) -> None:
        # 记录删除对象时元数据记录是否仍然存在
        self.deleted.append((path, self.record_check()))
        super().delete(path)


def test_delete_removes_objects_before_record(client: TestClient, auth_headers, tmp_path, db_session_fixture):
    def record_exists() -> bool:
        db_session_fixture.expire_all()
        return db_session_fixture.query(FileRecord).count() > 0

    backend = RecordingBackend(tmp_path / "recorded", record_exists)
    app.dependency_overrides[get_storage] = lambda: backend

    created = _create(client, auth_headers, thumbnail="dGh1bWI=")
    digest = hashlib.sha256(PNG_BYTES).hexdigest()[:16]
    thumb_path = created["stored_path"].replace(f"{digest}.png", f"{digest}_thumb.jpg")
    assert created["thumbnail_url"].endswith(thumb_path)

    resp = client.delete(f"/api/file/{created['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert backend.deleted == [(created["stored_path"], True), (thumb_path, True)]
    assert backend.get(thumb_path) is None
    assert record_exists() is False


def test_unknown_api_path(client: TestClient, auth_headers):
    resp = client.get("/api/nothing/here", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "API endpoint not found"}

    resp = client.get("/api/nothing/here")
    assert resp.status_code == 401


def test_public_serving(client: TestClient, auth_headers):
    created = _create(client, auth_headers)
    resp = client.get(f"/{created['stored_path']}")
    assert resp.status_code == 200
    assert resp.content == PNG_BYTES
    assert resp.headers["content-type"] == "image/png"
    assert resp.headers["cache-control"] == "public, max-age=31536000, immutable"
    assert resp.headers["content-length"] == str(len(PNG_BYTES))
    assert resp.headers["etag"].startswith('"') and resp.headers["etag"].endswith('"')


def test_public_serving_unknown_object(client: TestClient):
    resp = client.get("/202601/0000000000000000.png")
    assert resp.status_code == 404
    assert resp.text == "File not found"
    assert resp.headers["content-type"].startswith("text/plain")


def test_public_serving_rejects_bad_paths(client: TestClient):
    assert client.get("/2026-1/abc.png").status_code == 404
    assert client.get("/202601/..png").status_code == 404


def test_root_and_health(client: TestClient):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"

    resp = client.get("/health")
    assert resp.json() == {"success": True, "status": "healthy"}


def test_unmatched_route_uses_error_envelope(client: TestClient):
    resp = client.get("/only-one-segment")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Not Found"}


def test_request_id_is_echoed(client: TestClient):
    resp = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert resp.headers["x-request-id"] == "req-123"
    assert client.get("/health").headers["x-request-id"]


class UndeletableBackend(LocalBackend):
    def delete(self, path: str) -> None:
        raise StorageError("Failed to delete object")


def test_storage_delete_failure_keeps_record(client: TestClient, auth_headers, tmp_path):
    backend = UndeletableBackend(tmp_path / "sticky")
    app.dependency_overrides[get_storage] = lambda: backend
    created = _create(client, auth_headers)

    resp = client.delete(f"/api/file/{created['id']}", headers=auth_headers)
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Failed to delete file from storage"}

    resp = client.get(f"/api/file/{created['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["file"]["id"] == created["id"]
