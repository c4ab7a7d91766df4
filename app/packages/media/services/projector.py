"""记录投影：将 ``FileRecord`` 转换为对外的摘要/详情结构。"""

from __future__ import annotations

from typing import Optional

from app.packages.media.api.v1.schemas.files import FileDetail, FileSummary
from app.packages.media.core.timezone import format_iso
from app.packages.media.models.file_record import FileRecord


def build_file_url(base_url: str, stored_path: str) -> str:
    return f"{base_url.rstrip('/')}/{stored_path.lstrip('/')}"


def _optional_url(base_url: str, path: Optional[str]) -> Optional[str]:
    return build_file_url(base_url, path) if path else None


def to_summary(record: FileRecord, base_url: str) -> FileSummary:
    return FileSummary(
        id=record.id,
        url=build_file_url(base_url, record.stored_path),
        thumbnail_url=_optional_url(base_url, record.thumbnail_path),
        original_name=record.original_name,
        mime_type=record.mime_type,
        file_size=record.file_size,
        file_type=record.file_type,
        created_at=format_iso(record.created_at),
    )


def to_detail(record: FileRecord, base_url: str) -> FileDetail:
    summary = to_summary(record, base_url)
    return FileDetail(
        **summary.model_dump(),
        stored_path=record.stored_path,
        width=record.width,
        height=record.height,
        duration=record.duration,
        updated_at=format_iso(record.updated_at),
    )
