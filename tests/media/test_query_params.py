"""列表查询参数规整与分页的测试。"""

import uuid
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from app.packages.media.crud.file_record import file_record_crud
from app.packages.media.services.query_service import FileQuery, parse_query_params, total_pages


def _seed(db, name: str, *, file_type: str = "image", size: int = 10, created_at=None) -> None:
    digest = uuid.uuid4().hex[:16]
    data = {
        "id": str(uuid.uuid4()),
        "original_name": name,
        "stored_path": f"202610/{digest}.{'mp4' if file_type == 'video' else 'png'}",
        "mime_type": "video/mp4" if file_type == "video" else "image/png",
        "file_size": size,
        "file_type": file_type,
    }
    if created_at is not None:
        data["created_at"] = created_at
        data["updated_at"] = created_at
    file_record_crud.create(db, data)


def test_parse_defaults():
    assert parse_query_params({}) == FileQuery()
    query = parse_query_params({})
    assert (query.page, query.limit, query.sort, query.order, query.type) == (1, 20, "created_at", "desc", "all")
    assert query.search is None


def test_parse_invalid_values_fall_back():
    query = parse_query_params(
        {"page": "0", "limit": "abc", "sort": "password", "order": "sideways", "type": "audio", "search": ""}
    )
    assert query.page == 1
    assert query.limit == 20
    assert query.sort == "created_at"
    assert query.order == "desc"
    assert query.type == "all"
    assert query.search is None


def test_parse_limit_is_clamped():
    assert parse_query_params({"limit": "500"}).limit == 100
    assert parse_query_params({"limit": "0"}).limit == 1
    assert parse_query_params({"limit": "-3"}).limit == 1
    assert parse_query_params({"page": "-2"}).page == 1
    assert parse_query_params({"page": "3", "limit": "5"}).offset == 10


def test_total_pages():
    assert total_pages(0, 20) == 0
    assert total_pages(1, 20) == 1
    assert total_pages(12, 5) == 3
    assert total_pages(40, 20) == 2


def test_video_filter_pagination(client: TestClient, auth_headers, db_session_fixture):
    base = datetime(2026, 10, 1, tzinfo=timezone.utc)
    for i in range(12):
        _seed(db_session_fixture, f"clip{i:02d}.mp4", file_type="video", created_at=base + timedelta(minutes=i))
    for i in range(3):
        _seed(db_session_fixture, f"pic{i}.png", created_at=base + timedelta(hours=1, minutes=i))

    resp = client.get("/api/files", params={"type": "video", "page": 3, "limit": 5}, headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["pagination"] == {"page": 3, "limit": 5, "total": 12, "total_pages": 3}
    assert [f["original_name"] for f in body["files"]] == ["clip01.mp4", "clip00.mp4"]
    assert all(f["file_type"] == "video" for f in body["files"])

    resp = client.get("/api/files", params={"type": "video", "limit": 5, "page": 2}, headers=auth_headers)
    body = resp.json()
    assert body["pagination"] == {"page": 2, "limit": 5, "total": 12, "total_pages": 3}
    assert len(body["files"]) == 5


def test_page_beyond_range_returns_empty(client: TestClient, auth_headers, db_session_fixture):
    _seed(db_session_fixture, "only.png")
    resp = client.get("/api/files", params={"page": 9}, headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["files"] == []
    assert body["pagination"]["total"] == 1
    assert body["pagination"]["total_pages"] == 1


def test_empty_listing(client: TestClient, auth_headers):
    resp = client.get("/api/files", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["pagination"] == {"page": 1, "limit": 20, "total": 0, "total_pages": 0}


def test_search_is_case_insensitive_and_literal(client: TestClient, auth_headers, db_session_fixture):
    _seed(db_session_fixture, "Holiday_2026.png")
    _seed(db_session_fixture, "holidayX2026.png")
    _seed(db_session_fixture, "100%.png")
    _seed(db_session_fixture, "other.png")

    resp = client.get("/api/files", params={"search": "HOLIDAY"}, headers=auth_headers)
    assert resp.json()["pagination"]["total"] == 2

    resp = client.get("/api/files", params={"search": "y_2"}, headers=auth_headers)
    names = [f["original_name"] for f in resp.json()["files"]]
    assert names == ["Holiday_2026.png"]

    resp = client.get("/api/files", params={"search": "%"}, headers=auth_headers)
    names = [f["original_name"] for f in resp.json()["files"]]
    assert names == ["100%.png"]

    resp = client.get("/api/files", params={"search": "'; DROP TABLE files; --"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["pagination"]["total"] == 0


def test_sort_by_size_and_name(client: TestClient, auth_headers, db_session_fixture):
    _seed(db_session_fixture, "b.png", size=300)
    _seed(db_session_fixture, "a.png", size=100)
    _seed(db_session_fixture, "c.png", size=200)

    resp = client.get("/api/files", params={"sort": "file_size", "order": "asc"}, headers=auth_headers)
    assert [f["file_size"] for f in resp.json()["files"]] == [100, 200, 300]

    resp = client.get("/api/files", params={"sort": "original_name", "order": "desc"}, headers=auth_headers)
    assert [f["original_name"] for f in resp.json()["files"]] == ["c.png", "b.png", "a.png"]

    resp = client.get("/api/files", params={"sort": "id; DROP", "limit": "x"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["pagination"]["limit"] == 20


def test_list_summary_shape(client: TestClient, auth_headers, db_session_fixture):
    _seed(db_session_fixture, "shape.png")
    item = client.get("/api/files", headers=auth_headers).json()["files"][0]
    assert set(item) == {
        "id",
        "url",
        "thumbnail_url",
        "original_name",
        "mime_type",
        "file_size",
        "file_type",
        "created_at",
    }
    assert item["url"].startswith("https://cdn.example.com/202610/")
    assert item["thumbnail_url"] is None
    assert item["created_at"].endswith("Z")


def test_huge_page_returns_empty_page(client: TestClient, auth_headers, db_session_fixture):
    _seed(db_session_fixture, "only.png")
    resp = client.get("/api/files", params={"page": "99999999999999999999"}, headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["files"] == []
    assert body["pagination"] == {"page": 99999999999999999999, "limit": 20, "total": 1, "total_pages": 1}


def test_whitespace_search_is_kept(client: TestClient, auth_headers, db_session_fixture):
    assert parse_query_params({"search": " "}).search == " "

    _seed(db_session_fixture, "my photo.png")
    _seed(db_session_fixture, "nospace.png")
    resp = client.get("/api/files", params={"search": " "}, headers=auth_headers)
    assert [f["original_name"] for f in resp.json()["files"]] == ["my photo.png"]
