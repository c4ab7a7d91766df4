"""依赖注入模块：封装 FastAPI 中复用度高的依赖函数。"""

from collections.abc import Generator
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.packages.media.core.config import Settings, get_settings
from app.packages.media.core.security import verify_api_key
from app.packages.media.db import session as db_session
from app.packages.media.services.storage_backends import StorageBackend, build_backend


def get_db() -> Generator[Session, None, None]:
    """生成一个数据库会话，并在请求结束后自动关闭。"""
    db = db_session.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@lru_cache
def _configured_backend() -> StorageBackend:
    return build_backend(get_settings())


def get_storage() -> StorageBackend:
    """返回按配置构建的对象存储后端。"""
    return _configured_backend()


def require_api_key(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """校验 ``Authorization: Bearer <token>``，失败时抛出 401。"""
    verify_api_key(authorization, settings)
