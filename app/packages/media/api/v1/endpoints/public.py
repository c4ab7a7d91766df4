"""公开访问路由：按内容寻址路径直接返回对象字节，无需认证。"""

import re

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response

from app.packages.media.core.constants import IMMUTABLE_CACHE_CONTROL
from app.packages.media.core.dependencies import get_storage
from app.packages.media.core.exceptions import NotFoundError
from app.packages.media.core.logger import logger
from app.packages.media.services.storage_backends import StorageBackend, content_type_for_path

router = APIRouter(tags=["public"])

_YEAR_MONTH = re.compile(r"^\d{6}$")
_OBJECT_NAME = re.compile(r"^[\w-]+\.\w+$")


@router.get("/{year_month}/{filename}", include_in_schema=False)
def serve_file(
    year_month: str,
    filename: str,
    storage: StorageBackend = Depends(get_storage),
) -> Response:
    if not _YEAR_MONTH.match(year_month) or not _OBJECT_NAME.match(filename):
        raise NotFoundError("Not found")

    stored_path = f"{year_month}/{filename}"
    obj = storage.get(stored_path)
    if obj is None:
        logger.info("Public object not found: %s", stored_path)
        return PlainTextResponse("File not found", status_code=404)

    return Response(
        content=obj.body,
        media_type=content_type_for_path(stored_path),
        headers={
            "Cache-Control": IMMUTABLE_CACHE_CONTROL,
            "ETag": f'"{obj.etag}"',
        },
    )
