"""异常处理模块：定义统一的业务异常与错误响应格式。

业务异常按 HTTP 状态分为四类：
- ValidationError：请求格式、字段、类型或大小不合法（400）；
- AuthError：缺失/格式错误/不匹配的 Bearer 令牌，或管理员凭证错误（401）；
- NotFoundError：记录或公开路径不存在（404）；
- StorageError：对象存储或元数据存储操作失败（500）。
"""

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.packages.media.core.logger import logger
from app.packages.media.core.responses import error_response


class AppException(HTTPException):
    """携带统一响应结构的业务异常，方便在全局处理中转换响应体。"""

    def __init__(self, msg: str, code: int = status.HTTP_400_BAD_REQUEST, data=None) -> None:
        super().__init__(status_code=code, detail=msg)
        self.data = data


class ValidationError(AppException):
    def __init__(self, msg: str) -> None:
        super().__init__(msg, status.HTTP_400_BAD_REQUEST)


class AuthError(AppException):
    def __init__(self, msg: str) -> None:
        super().__init__(msg, status.HTTP_401_UNAUTHORIZED)


class NotFoundError(AppException):
    def __init__(self, msg: str = "File not found") -> None:
        super().__init__(msg, status.HTTP_404_NOT_FOUND)


class StorageError(AppException):
    """存储层失败。消息会返回给调用方，因此只放可公开的描述。"""

    def __init__(self, msg: str = "Storage operation failed") -> None:
        super().__init__(msg, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """将 ``HTTPException``（含路由未匹配的 404/405）转换为统一响应格式。"""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """请求参数校验失败统一按 400 返回。"""
    logger.info("Request validation failed on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_response("Invalid request"))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """兜底处理：将未捕获异常转换为标准的 500 响应结构，细节只写日志。"""
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response("Internal server error"),
    )
