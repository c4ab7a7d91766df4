"""文件相关的请求/响应模型。"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, field_validator

FileType = Literal["image", "video"]


class FileSummary(BaseModel):
    """列表场景下返回的文件信息。"""

    id: str
    url: str
    thumbnail_url: Optional[str] = None
    original_name: str
    mime_type: str
    file_size: int
    file_type: FileType
    created_at: str


class FileDetail(FileSummary):
    """单文件场景下返回的完整信息。"""

    stored_path: str
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[float] = None
    updated_at: str


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class RenameBody(BaseModel):
    """``original_name`` 可省略；出现时必须是非空白字符串。"""

    original_name: Optional[Any] = None

    @field_validator("original_name")
    @classmethod
    def _non_empty_string(cls, value: Any) -> Any:
        if value is None:
            return value
        if not isinstance(value, str) or not value.strip():
            raise ValueError("original_name must be a non-empty string")
        return value


class FilesListResponse(BaseModel):
    success: bool
    files: list[FileSummary]
    pagination: Pagination


class FileDetailResponse(BaseModel):
    success: bool
    file: FileDetail


class MessageResponse(BaseModel):
    success: bool
    message: str
