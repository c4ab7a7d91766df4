"""认证相关的请求与响应模型。"""

from typing import Optional

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """登录请求体，缺失字段由路由返回 400。"""

    username: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    """登录成功后返回共享密钥作为 Bearer 令牌。"""

    success: bool
    token: str
    message: str
