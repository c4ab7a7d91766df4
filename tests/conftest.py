"""测试夹具：为 pytest 提供数据库、对象存储与客户端的共享配置。"""

import os
import shutil
import tempfile
from typing import Generator

TEST_ROOT = tempfile.mkdtemp(prefix="media_cdn_tests_")
TEST_DB_PATH = os.path.join(TEST_ROOT, "test.db")
TEST_DATABASE_URL = f"sqlite:///{TEST_DB_PATH}"

# 必须在导入应用之前写入，配置对象会被缓存
os.environ.update(
    {
        "API_KEY": "test-api-key",
        "ADMIN_USERNAME": "admin",
        "ADMIN_PASSWORD": "admin123",
        "CDN_BASE_URL": "https://cdn.example.com",
        "DATABASE_URL": TEST_DATABASE_URL,
        "STORAGE_BACKEND": "local",
        "LOCAL_STORAGE_ROOT": os.path.join(TEST_ROOT, "storage"),
        "LOG_DIR": os.path.join(TEST_ROOT, "logs"),
        "TIMEZONE": "UTC",
    }
)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from app.main import app  # noqa: E402
from app.packages.media.core.dependencies import get_db, get_storage  # noqa: E402
from app.packages.media.db import session as db_session  # noqa: E402
from app.packages.media.models import Base, FileRecord  # noqa: E402
from app.packages.media.services.storage_backends import LocalBackend  # noqa: E402

API_KEY = "test-api-key"


@pytest.fixture(scope="session", autouse=True)
def setup_test_database() -> Generator[None, None, None]:
    """创建隔离的 SQLite 测试数据库，并在会话结束后清理。"""
    engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    db_session.engine = engine
    db_session.SessionLocal = TestingSessionLocal

    Base.metadata.create_all(bind=engine)
    yield

    engine.dispose()
    shutil.rmtree(TEST_ROOT, ignore_errors=True)


@pytest.fixture(autouse=True)
def clean_files_table() -> Generator[None, None, None]:
    """每个用例结束后清空文件表，用例之间互不影响。"""
    yield
    session = db_session.SessionLocal()
    try:
        session.query(FileRecord).delete()
        session.commit()
    finally:
        session.close()


@pytest.fixture()
def db_session_fixture() -> Generator[Session, None, None]:
    """提供给测试用例使用的数据库会话。"""
    session = db_session.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def storage(tmp_path) -> LocalBackend:
    """每个用例独立的本地对象存储目录。"""
    return LocalBackend(tmp_path / "objects")


@pytest.fixture()
def client(storage) -> Generator[TestClient, None, None]:
    """构建 FastAPI TestClient，并注入测试专用的数据库与存储依赖。"""
    def override_get_db() -> Generator[Session, None, None]:
        session = db_session.SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {API_KEY}"}
