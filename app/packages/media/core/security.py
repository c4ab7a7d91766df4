"""安全模块：校验 Bearer 能力令牌与管理员凭证。

系统只有一个共享密钥（``API_KEY``）。管理员账号密码仅用于换取该密钥，
不产生任何会话状态，令牌也不会过期。所有比较均为无状态的精确匹配。
"""

import hmac
from typing import Optional

from .config import Settings
from .constants import BEARER_SCHEME
from .exceptions import AuthError
from .logger import logger

MISSING_HEADER_MESSAGE = "Authorization header is required"
INVALID_FORMAT_MESSAGE = "Invalid authorization format. Use: Bearer <token>"
INVALID_KEY_MESSAGE = "Invalid API key"


def _secure_equals(candidate: str, expected: str) -> bool:
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def parse_bearer_token(authorization: Optional[str]) -> str:
    """从 ``Authorization`` 头部提取令牌，头部缺失或格式不符时抛出 401。"""
    if not authorization:
        raise AuthError(MISSING_HEADER_MESSAGE)

    scheme, _, token = authorization.partition(" ")
    if scheme != BEARER_SCHEME or not token:
        raise AuthError(INVALID_FORMAT_MESSAGE)
    return token


def verify_api_key(authorization: Optional[str], settings: Settings) -> None:
    """校验请求携带的令牌与配置的共享密钥一致，不一致统一返回 ``Invalid API key``。"""
    try:
        token = parse_bearer_token(authorization)
    except AuthError as exc:
        logger.warning("Rejected request: %s", exc.detail)
        raise

    if not _secure_equals(token, settings.api_key):
        logger.warning("Rejected request: API key mismatch")
        raise AuthError(INVALID_KEY_MESSAGE)


def verify_admin_credentials(username: str, password: str, settings: Settings) -> bool:
    """比对管理员账号密码，两项都会参与比较。"""
    username_ok = _secure_equals(username, settings.admin_username)
    password_ok = _secure_equals(password, settings.admin_password)
    return username_ok and password_ok
