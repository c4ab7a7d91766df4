"""文件元数据路由：列表、详情、重命名与删除。"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.packages.media.api.v1.schemas.common import ErrorResponse
from app.packages.media.api.v1.schemas.files import FileDetailResponse, FilesListResponse, MessageResponse
from app.packages.media.core.config import Settings, get_settings
from app.packages.media.core.dependencies import get_db, get_storage, require_api_key
from app.packages.media.core.responses import create_response
from app.packages.media.services.file_service import file_service
from app.packages.media.services.query_service import parse_query_params, query_service
from app.packages.media.services.storage_backends import StorageBackend

router = APIRouter(
    tags=["files"],
    dependencies=[Depends(require_api_key)],
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


@router.get("/files", response_model=FilesListResponse)
def list_files(
    page: Optional[str] = Query(None, description="页码，默认 1"),
    limit: Optional[str] = Query(None, description="每页数量，1-100，默认 20"),
    sort: Optional[str] = Query(None, description="created_at | file_size | original_name"),
    order: Optional[str] = Query(None, description="asc | desc"),
    type: Optional[str] = Query(None, description="image | video | all"),
    search: Optional[str] = Query(None, description="按原始文件名模糊搜索"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    """分页列出文件；非法参数静默回退为默认值。"""
    query = parse_query_params(
        {"page": page, "limit": limit, "sort": sort, "order": order, "type": type, "search": search}
    )
    result = query_service.list_files(db, query, base_url=settings.cdn_base_url)
    return create_response(**result)


@router.get("/file/{file_id}", response_model=FileDetailResponse, responses={404: {"model": ErrorResponse}})
def get_file(
    file_id: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    return create_response(file=file_service.get_file(db, file_id, base_url=settings.cdn_base_url))


@router.patch(
    "/file/{file_id}",
    response_model=FileDetailResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_file(
    file_id: str,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    """目前仅支持修改 ``original_name``。"""
    raw_body = await request.body()
    detail = file_service.rename_file(db, file_id, raw_body, base_url=settings.cdn_base_url)
    return create_response(file=detail)


@router.delete("/file/{file_id}", response_model=MessageResponse, responses={404: {"model": ErrorResponse}})
def delete_file(
    file_id: str,
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
) -> dict:
    file_service.delete_file(db, storage, file_id)
    return create_response(message="File deleted successfully")

