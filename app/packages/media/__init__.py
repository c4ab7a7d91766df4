"""媒体业务包：文件上传、内容寻址存储、元数据查询与公开访问。"""

from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.packages.types import AppPackage, RouterMount

from .api.v1 import api_router, public_router
from .core.config import get_settings
from .core.exceptions import generic_exception_handler, http_exception_handler, validation_exception_handler
from .core.logger import logger, setup_logging
from .core.responses import create_response
from .db.init_db import init_db

package = AppPackage(
    name="media",
    # /api 下的路由（含兜底 404）先于根路径的公开访问路由注册
    mounts=(
        RouterMount(api_router, prefix=get_settings().api_prefix),
        RouterMount(public_router),
    ),
    exception_handlers={
        StarletteHTTPException: http_exception_handler,
        RequestValidationError: validation_exception_handler,
        Exception: generic_exception_handler,
    },
    get_settings=get_settings,
    setup_logging=setup_logging,
    logger=logger,
    init_db=init_db,
    create_response=create_response,
)

__all__ = ["package", "api_router", "public_router", "get_settings"]
