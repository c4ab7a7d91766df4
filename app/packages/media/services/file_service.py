"""单文件操作：详情、重命名与删除。"""

from __future__ import annotations

import json

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.packages.media.api.v1.schemas.files import FileDetail, RenameBody
from app.packages.media.core.exceptions import NotFoundError, StorageError, ValidationError
from app.packages.media.core.logger import logger
from app.packages.media.crud.file_record import file_record_crud
from app.packages.media.models.file_record import FileRecord
from app.packages.media.services.projector import to_detail
from app.packages.media.services.storage_backends import StorageBackend

INVALID_NAME_MESSAGE = "original_name must be a non-empty string"


class FileService:
    def _get_or_404(self, db: Session, file_id: str) -> FileRecord:
        record = file_record_crud.get(db, file_id)
        if record is None:
            raise NotFoundError("File not found")
        return record

    def get_file(self, db: Session, file_id: str, *, base_url: str) -> FileDetail:
        return to_detail(self._get_or_404(db, file_id), base_url)

    def rename_file(self, db: Session, file_id: str, raw_body: bytes, *, base_url: str) -> FileDetail:
        """更新 ``original_name``；请求体未携带该字段时原样返回。

        先确认记录存在，再解析请求体，因此未知 ID 总是返回 404。
        """
        record = self._get_or_404(db, file_id)

        try:
            body = json.loads(raw_body or b"null")
        except ValueError as exc:
            raise ValidationError("Invalid JSON body") from exc
        if not isinstance(body, dict):
            raise ValidationError("Invalid JSON body")
        try:
            payload = RenameBody.model_validate(body)
        except PydanticValidationError as exc:
            raise ValidationError(INVALID_NAME_MESSAGE) from exc

        if "original_name" not in payload.model_fields_set:
            return to_detail(record, base_url)
        if payload.original_name is None:
            raise ValidationError(INVALID_NAME_MESSAGE)

        try:
            record = file_record_crud.rename(db, record, original_name=payload.original_name)
        except SQLAlchemyError as exc:
            logger.exception("Failed to rename file %s", file_id)
            raise StorageError("Failed to update file") from exc
        logger.info("Renamed file %s to %r", file_id, payload.original_name)
        return to_detail(record, base_url)

    def delete_file(self, db: Session, storage: StorageBackend, file_id: str) -> None:
        """先删对象存储中的主文件与缩略图，再删除元数据记录。

        中途失败时记录保留，最多留下孤立对象，不会出现指向已删除对象的记录。
        """
        record = self._get_or_404(db, file_id)

        paths = [record.stored_path]
        if record.thumbnail_path:
            paths.append(record.thumbnail_path)
        for path in paths:
            try:
                storage.delete(path)
            except StorageError as exc:
                raise StorageError("Failed to delete file from storage") from exc

        try:
            file_record_crud.hard_delete(db, record)
        except SQLAlchemyError as exc:
            logger.exception("Failed to delete file record %s", file_id)
            raise StorageError("Failed to delete file record") from exc
        logger.info("Deleted file %s (%s)", file_id, ", ".join(paths))


file_service = FileService()
