"""未匹配的 API 路径统一返回 404，必须最后挂载。"""

from fastapi import APIRouter, Depends

from app.packages.media.core.dependencies import require_api_key
from app.packages.media.core.exceptions import NotFoundError

router = APIRouter(dependencies=[Depends(require_api_key)])


@router.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"],
    include_in_schema=False,
)
def api_not_found(path: str) -> None:
    raise NotFoundError("API endpoint not found")
