"""上传路由。"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from starlette.formparsers import MultiPartException

from app.packages.media.api.v1.schemas.common import ErrorResponse
from app.packages.media.api.v1.schemas.files import FileDetailResponse
from app.packages.media.core.config import Settings, get_settings
from app.packages.media.core.dependencies import get_db, get_storage, require_api_key
from app.packages.media.core.exceptions import ValidationError
from app.packages.media.core.responses import create_response
from app.packages.media.services.storage_backends import StorageBackend
from app.packages.media.services.upload_service import upload_service

router = APIRouter(tags=["upload"], dependencies=[Depends(require_api_key)])


@router.post(
    "/upload",
    status_code=status.HTTP_201_CREATED,
    response_model=FileDetailResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_file(
    request: Request,
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> dict:
    """接收 multipart 表单中的 ``file`` 与可选的 ``thumbnail``（base64 字符串）。"""
    upload_service.ensure_multipart(request.headers.get("content-type"))
    try:
        async with request.form() as form:
            payload = await upload_service.collect(form)
    except MultiPartException as exc:
        raise ValidationError("Invalid multipart body") from exc

    detail = upload_service.process(db, storage, payload, base_url=settings.cdn_base_url)
    return create_response(file=detail)
