"""响应封装：构建系统统一的返回结构。"""

from typing import Any


def create_response(**fields: Any) -> dict[str, Any]:
    """成功响应：``{"success": true, ...}``，其余字段原样展开。"""
    payload: dict[str, Any] = {"success": True}
    payload.update(fields)
    return payload


def error_response(message: str) -> dict[str, Any]:
    """失败响应：``{"success": false, "error": message}``。"""
    return {"success": False, "error": message}
