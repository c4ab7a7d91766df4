"""认证相关路由定义。"""

import json

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError

from app.packages.media.api.v1.schemas.auth import LoginRequest, LoginResponse
from app.packages.media.api.v1.schemas.common import ErrorResponse
from app.packages.media.core.config import Settings, get_settings
from app.packages.media.core.exceptions import AuthError, ValidationError
from app.packages.media.core.logger import logger
from app.packages.media.core.responses import create_response
from app.packages.media.core.security import verify_admin_credentials

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def login(request: Request, settings: Settings = Depends(get_settings)) -> dict:
    """校验管理员凭证，成功后返回共享 API Key 作为 Bearer 令牌。"""
    try:
        payload = LoginRequest.model_validate(await request.json())
    except (json.JSONDecodeError, UnicodeDecodeError, PydanticValidationError) as exc:
        raise ValidationError("Invalid request body") from exc

    if not payload.username or not payload.password:
        raise ValidationError("Username and password are required")

    if not verify_admin_credentials(payload.username, payload.password, settings):
        logger.warning("Failed admin login for username %r", payload.username)
        raise AuthError("Invalid credentials")

    logger.info("Admin login succeeded for %r", payload.username)
    return create_response(token=settings.api_key, message="Login successful")
