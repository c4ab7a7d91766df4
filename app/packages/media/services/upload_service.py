"""上传流程：校验 -> 内容寻址 -> 写入对象存储 -> 写入元数据 -> 回读确认。

校验按顺序进行，任一失败立即返回 400：
1. 请求必须是 multipart/form-data；
2. 必须包含 ``file`` 字段；
3. MIME 类型必须在图片/视频白名单内；
4. 大小不得超过对应类型的上限（图片 5MB，视频 15MB）。

缩略图是尽力而为的附加步骤：解码或写入失败只记录日志，上传本身仍然成功。
元数据写入后会重新读取一次，读取不到按失败处理（500），即使插入已经成功。
"""

from __future__ import annotations

import base64
import binascii
import re
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from app.packages.media.api.v1.schemas.files import FileDetail
from app.packages.media.core.constants import (
    ALLOWED_IMAGE_TYPES,
    ALLOWED_MIME_TYPES,
    ALLOWED_VIDEO_TYPES,
    MAX_IMAGE_SIZE,
    MAX_VIDEO_SIZE,
    THUMBNAIL_CONTENT_TYPE,
)
from app.packages.media.core.exceptions import StorageError, ValidationError
from app.packages.media.core.logger import logger
from app.packages.media.crud.file_record import file_record_crud
from app.packages.media.services.content_address import ContentAddress, address_for
from app.packages.media.services.projector import to_detail
from app.packages.media.services.storage_backends import StorageBackend

_DATA_URL_PREFIX = re.compile(r"^data:[\w.+-]+/[\w.+-]+;base64,", re.IGNORECASE)


@dataclass(frozen=True)
class UploadPayload:
    filename: str
    mime_type: str
    data: bytes
    thumbnail: Optional[str] = None

    @property
    def file_type(self) -> str:
        return file_type_for(self.mime_type)


def file_type_for(mime_type: str) -> str:
    if mime_type in ALLOWED_IMAGE_TYPES:
        return "image"
    if mime_type in ALLOWED_VIDEO_TYPES:
        return "video"
    raise ValidationError(
        f"Invalid file type: {mime_type}. Allowed: {', '.join(ALLOWED_MIME_TYPES)}"
    )


def max_size_for(file_type: str) -> int:
    return MAX_IMAGE_SIZE if file_type == "image" else MAX_VIDEO_SIZE


def decode_thumbnail(raw: str) -> bytes:
    """解码缩略图字符串，可带 ``data:image/...;base64,`` 前缀。"""
    encoded = _DATA_URL_PREFIX.sub("", raw.strip(), count=1)
    data = base64.b64decode(encoded, validate=True)
    if not data:
        raise ValueError("empty thumbnail payload")
    return data


class UploadService:
    def ensure_multipart(self, content_type: Optional[str]) -> None:
        if "multipart/form-data" not in (content_type or "").lower():
            raise ValidationError("Content-Type must be multipart/form-data")

    async def collect(self, form: Any) -> UploadPayload:
        """从已解析的表单中取出上传文件并完成类型与大小校验。"""
        upload = form.get("file")
        if not isinstance(upload, UploadFile):
            raise ValidationError("File is required")

        mime_type = upload.content_type or ""
        file_type = file_type_for(mime_type)
        max_size = max_size_for(file_type)

        # 表单解析器已给出大小时先行判断
        if upload.size is not None and upload.size > max_size:
            raise ValidationError(f"File too large. Maximum size: {max_size // (1024 * 1024)}MB")
        data = await upload.read()
        if len(data) > max_size:
            raise ValidationError(f"File too large. Maximum size: {max_size // (1024 * 1024)}MB")

        thumbnail = form.get("thumbnail")
        if thumbnail is not None and not isinstance(thumbnail, str):
            logger.warning("Ignoring non-text thumbnail field for %s", upload.filename)
            thumbnail = None

        return UploadPayload(
            filename=upload.filename or "unnamed",
            mime_type=mime_type,
            data=data,
            thumbnail=thumbnail or None,
        )

    def process(
        self,
        db: Session,
        storage: StorageBackend,
        payload: UploadPayload,
        *,
        base_url: str,
    ) -> FileDetail:
        address = address_for(payload.data, payload.mime_type)

        try:
            storage.put(address.stored_path, payload.data, payload.mime_type)
        except StorageError as exc:
            raise StorageError("Failed to store file") from exc

        thumbnail_path = None
        if payload.thumbnail:
            thumbnail_path = self._store_thumbnail(storage, payload.thumbnail, address)

        file_id = str(uuid.uuid4())
        try:
            file_record_crud.create(
                db,
                {
                    "id": file_id,
                    "original_name": payload.filename,
                    "stored_path": address.stored_path,
                    "mime_type": payload.mime_type,
                    "file_size": len(payload.data),
                    "file_type": payload.file_type,
                    "width": None,
                    "height": None,
                    "duration": None,
                    "thumbnail_path": thumbnail_path,
                },
            )
        except SQLAlchemyError as exc:
            logger.exception("Failed to insert file record for %s", address.stored_path)
            raise StorageError("Failed to save file metadata") from exc

        try:
            record = file_record_crud.get(db, file_id)
        except SQLAlchemyError as exc:
            logger.exception("Failed to confirm file record %s", file_id)
            raise StorageError("Failed to retrieve uploaded file") from exc
        if record is None:
            logger.error("File record %s missing right after insert", file_id)
            raise StorageError("Failed to retrieve uploaded file")

        logger.info(
            "Uploaded %s -> %s (%s bytes, thumbnail=%s)",
            payload.filename,
            address.stored_path,
            len(payload.data),
            bool(thumbnail_path),
        )
        return to_detail(record, base_url)

    def _store_thumbnail(
        self, storage: StorageBackend, raw: str, address: ContentAddress
    ) -> Optional[str]:
        """写入缩略图，失败返回 ``None`` 并记录日志。"""
        try:
            data = decode_thumbnail(raw)
            storage.put(address.thumbnail_path, data, THUMBNAIL_CONTENT_TYPE)
        except (binascii.Error, ValueError, StorageError):
            logger.warning("Thumbnail upload failed for %s", address.stored_path, exc_info=True)
            return None
        return address.thumbnail_path


upload_service = UploadService()
