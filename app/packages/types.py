"""业务包元数据定义：描述一个业务包如何挂载到主应用。"""

from __future__ import annotations

from dataclasses import dataclass
from logging import Logger
from typing import Any, Awaitable, Callable, Mapping, Sequence

from fastapi import APIRouter, Request
from fastapi.responses import Response

ExceptionHandler = Callable[[Request, Any], Awaitable[Response]]


@dataclass(frozen=True)
class RouterMount:
    """一组路由及其挂载前缀，按声明顺序依次注册。"""

    router: APIRouter
    prefix: str = ""


@dataclass(frozen=True)
class AppPackage:
    name: str
    mounts: Sequence[RouterMount]
    exception_handlers: Mapping[Any, ExceptionHandler]
    get_settings: Callable[[], Any]
    setup_logging: Callable[[], None]
    logger: Logger
    init_db: Callable[[], None]
    create_response: Callable[..., dict]
