"""日志配置模块：控制台彩色输出、按天滚动的文件日志，以及可选的 JSON 行格式。

每条日志都会带上当前请求的 ``request_id``（由 ``RequestIdMiddleware`` 写入上下文），
便于把一次上传或删除涉及的多条日志串起来。
"""

from __future__ import annotations

import json
import logging
import logging.config
import sys
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Optional

from .config import Settings, get_settings

LOGGER_NAME = "app"
TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(request_id)s] %(message)s"
LOG_BACKUP_DAYS = 14

_current_request_id: ContextVar[Optional[str]] = ContextVar("media_request_id", default=None)


def set_request_id(request_id: Optional[str]) -> None:
    _current_request_id.set(request_id)


def get_request_id() -> Optional[str]:
    return _current_request_id.get()


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


class LocalTimeFormatter(logging.Formatter):
    """按配置时区输出日志时间（毫秒精度）。"""

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        moment = datetime.fromtimestamp(record.created, get_settings().timezone_info)
        if datefmt:
            return moment.strftime(datefmt)
        return moment.isoformat(sep=" ", timespec="milliseconds")


class LevelColorFormatter(LocalTimeFormatter):
    """终端输出时按级别着色；非 TTY 环境自动关闭颜色。"""

    RESET = "\033[0m"
    LEVEL_COLORS = {
        logging.DEBUG: "\033[2m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }

    def __init__(self, fmt: str, datefmt: Optional[str] = None, use_colors: Optional[bool] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_colors = sys.stderr.isatty() if use_colors is None else use_colors

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno) if self.use_colors else None
        return f"{color}{text}{self.RESET}" if color else text


class JsonLineFormatter(LocalTimeFormatter):
    """每条日志输出为一行 JSON，方便日志平台采集。"""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", None),
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _build_config(settings: Settings) -> dict[str, Any]:
    console_formatter = "json" if settings.log_json else "console"
    file_formatter = "json" if settings.log_json else "text"
    level = settings.log_level.upper()
    handler_names = ["console", "file"]

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_id": {"()": f"{__name__}.RequestIdFilter"}},
        "formatters": {
            "console": {"()": f"{__name__}.LevelColorFormatter", "fmt": TEXT_FORMAT},
            "text": {"()": f"{__name__}.LocalTimeFormatter", "fmt": TEXT_FORMAT},
            "json": {"()": f"{__name__}.JsonLineFormatter"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": console_formatter,
                "filters": ["request_id"],
            },
            "file": {
                "class": "logging.handlers.TimedRotatingFileHandler",
                "level": level,
                "formatter": file_formatter,
                "filters": ["request_id"],
                "filename": str(settings.log_file_path),
                "when": "midnight",
                "backupCount": LOG_BACKUP_DAYS,
                "encoding": "utf-8",
                "delay": True,
            },
        },
        "loggers": {
            name: {"handlers": handler_names, "level": level, "propagate": False}
            for name in (LOGGER_NAME, "uvicorn", "uvicorn.error", "uvicorn.access")
        },
        "root": {"handlers": handler_names, "level": level},
    }


def setup_logging() -> None:
    """按当前配置初始化全局日志；日志目录不存在时自动创建。"""
    settings = get_settings()
    settings.log_directory.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(_build_config(settings))


logger = logging.getLogger(LOGGER_NAME)
