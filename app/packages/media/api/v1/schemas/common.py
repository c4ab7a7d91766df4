"""通用响应封装模型。"""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """系统统一的失败响应结构。"""

    success: bool = False
    error: str
