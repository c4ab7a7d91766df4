"""业务包加载入口：按名称导入 ``app.packages.<name>`` 并读取其 ``package`` 描述。"""

from __future__ import annotations

import importlib
import os

from .types import AppPackage, RouterMount

DEFAULT_PACKAGE = "media"


def load_package(name: str) -> AppPackage:
    try:
        module = importlib.import_module(f"{__name__}.{name}")
    except ModuleNotFoundError as exc:
        raise RuntimeError(f"业务包 '{name}' 不存在") from exc

    package = getattr(module, "package", None)
    if not isinstance(package, AppPackage):
        raise RuntimeError(f"业务包 '{name}' 未导出 AppPackage 实例")
    return package


def get_active_package() -> AppPackage:
    """读取 ``APP_ACTIVE_PACKAGE`` 环境变量，缺省加载媒体业务包。"""
    return load_package(os.getenv("APP_ACTIVE_PACKAGE", DEFAULT_PACKAGE))


__all__ = ["AppPackage", "RouterMount", "DEFAULT_PACKAGE", "load_package", "get_active_package"]
