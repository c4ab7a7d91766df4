"""存储后端抽象与实现：统一封装本地目录与 S3 兼容对象存储的读写删。

后端只认识“相对路径 -> 字节”，不关心业务含义：
- put：写入对象，并附带内容类型与长期缓存指令（后端支持元数据时）；
- get：读取对象，返回内容、大小与 ETag，不存在时返回 ``None``；
- delete：删除对象，幂等（目标不存在不视为错误）。
所有底层失败统一转换为 ``StorageError``。
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from app.packages.media.core.config import Settings
from app.packages.media.core.constants import DEFAULT_CONTENT_TYPE, EXTENSION_TO_MIME, IMMUTABLE_CACHE_CONTROL
from app.packages.media.core.exceptions import StorageError, ValidationError
from app.packages.media.core.logger import logger


def content_type_for_path(path: str) -> str:
    """根据扩展名推断内容类型，未知扩展名回退为 ``application/octet-stream``。"""
    extension = Path(path).suffix.lower().lstrip(".")
    return EXTENSION_TO_MIME.get(extension, DEFAULT_CONTENT_TYPE)


# ------------------------------------------
# 公共数据结构
# ------------------------------------------

@dataclass(frozen=True)
class StoredObject:
    body: bytes
    size: int
    etag: str
    content_type: str


class StorageBackend:
    """存储后端接口。"""

    def put(self, path: str, data: bytes, content_type: str) -> None:
        raise NotImplementedError

    def get(self, path: str) -> Optional[StoredObject]:
        raise NotImplementedError

    def delete(self, path: str) -> None:
        raise NotImplementedError


# ------------------------------------------
# 本地文件系统实现
# ------------------------------------------


class LocalBackend(StorageBackend):
    """本地目录实现。缓存指令由公开访问路由在响应时附加。"""

    def __init__(self, root: str | os.PathLike[str]):
        self.root = Path(root).resolve()
        if not self.root.exists():
            try:
                self.root.mkdir(parents=True, exist_ok=True)
            except OSError as exc:  # pragma: no cover - 极端情况下可能失败
                raise StorageError("Storage root is not available") from exc

    # 统一的安全路径拼接，防止路径遍历
    def _resolve(self, rel: str) -> Path:
        rel_norm = (rel or "").strip().lstrip("/")
        if not rel_norm:
            raise ValidationError("Invalid storage path")
        candidate = (self.root / rel_norm).resolve()
        try:
            candidate.relative_to(self.root)
        except ValueError as exc:
            raise ValidationError("Invalid storage path") from exc
        return candidate

    def put(self, path: str, data: bytes, content_type: str) -> None:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as f:
                f.write(data)
        except OSError as exc:
            logger.exception("Local put failed: %s", path)
            raise StorageError("Failed to write object") from exc

    def get(self, path: str) -> Optional[StoredObject]:
        target = self._resolve(path)
        if not target.is_file():
            return None
        try:
            with open(target, "rb") as f:
                body = f.read()
        except OSError as exc:
            logger.exception("Local get failed: %s", path)
            raise StorageError("Failed to read object") from exc
        return StoredObject(
            body=body,
            size=len(body),
            etag=hashlib.md5(body).hexdigest(),
            content_type=content_type_for_path(path),
        )

    def delete(self, path: str) -> None:
        target = self._resolve(path)
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            logger.exception("Local delete failed: %s", path)
            raise StorageError("Failed to delete object") from exc


# ------------------------------------------
# S3 实现（boto3），兼容 R2/MinIO 等 S3 协议存储
# ------------------------------------------


class S3Backend(StorageBackend):
    def __init__(
        self,
        *,
        bucket: str,
        region: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        prefix: Optional[str] = None,
        client: Any = None,
    ):
        try:
            from botocore.exceptions import BotoCoreError, ClientError
        except ImportError as exc:
            raise StorageError("S3 storage is not available: boto3 is not installed") from exc

        self._client_errors = (BotoCoreError, ClientError)
        self.bucket = bucket
        self.prefix = (prefix or "").strip("/")
        if client is None:
            import boto3

            client = boto3.client(
                "s3",
                region_name=region,
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
            )
        self._client = client

    # 拼接基于 path_prefix 的对象 key
    def _join_key(self, rel: str) -> str:
        rel_norm = (rel or "").lstrip("/")
        if self.prefix:
            return f"{self.prefix}/{rel_norm}"
        return rel_norm

    @staticmethod
    def _is_missing(exc: Exception) -> bool:
        response = getattr(exc, "response", None) or {}
        code = str(response.get("Error", {}).get("Code", ""))
        return code in {"NoSuchKey", "404", "NotFound"}

    def put(self, path: str, data: bytes, content_type: str) -> None:
        key = self._join_key(path)
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                CacheControl=IMMUTABLE_CACHE_CONTROL,
            )
        except self._client_errors as exc:
            logger.exception("S3 put failed: %s", key)
            raise StorageError("Failed to write object") from exc

    def get(self, path: str) -> Optional[StoredObject]:
        key = self._join_key(path)
        try:
            resp = self._client.get_object(Bucket=self.bucket, Key=key)
            body_stream = resp["Body"]
            try:
                body = body_stream.read()
            finally:
                body_stream.close()
        except self._client_errors as exc:
            if self._is_missing(exc):
                return None
            logger.exception("S3 get failed: %s", key)
            raise StorageError("Failed to read object") from exc
        return StoredObject(
            body=body,
            size=int(resp.get("ContentLength") or len(body)),
            etag=str(resp.get("ETag") or "").strip('"'),
            content_type=resp.get("ContentType") or content_type_for_path(path),
        )

    def delete(self, path: str) -> None:
        key = self._join_key(path)
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except self._client_errors as exc:
            if self._is_missing(exc):
                return
            logger.exception("S3 delete failed: %s", key)
            raise StorageError("Failed to delete object") from exc


def build_backend(settings: Settings) -> StorageBackend:
    backend_type = (settings.storage_backend or "").upper()
    if backend_type == "LOCAL":
        return LocalBackend(settings.local_storage_path)
    if backend_type == "S3":
        if not settings.s3_bucket:
            raise StorageError("S3 storage is not configured")
        return S3Backend(
            bucket=settings.s3_bucket,
            region=settings.s3_region,
            access_key_id=settings.s3_access_key_id,
            secret_access_key=settings.s3_secret_access_key,
            endpoint_url=settings.s3_endpoint_url,
            prefix=settings.s3_path_prefix,
        )
    raise StorageError(f"Unsupported storage backend: {settings.storage_backend}")
