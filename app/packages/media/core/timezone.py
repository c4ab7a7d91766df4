"""时间工具方法：统一记录时间戳与内容寻址使用的年月分桶。"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from zoneinfo import ZoneInfo

from app.packages.media.core.config import get_settings


def get_timezone() -> ZoneInfo:
    """返回配置指定的时区信息。"""
    return get_settings().timezone_info


def now() -> datetime:
    """返回当前时区的时间。"""
    return datetime.now(get_timezone())


def utc_now() -> datetime:
    """记录时间戳一律使用 UTC。"""
    return datetime.now(timezone.utc)


def year_month(value: Optional[datetime] = None) -> str:
    """返回 ``YYYYMM`` 分桶，默认取配置时区下的当前时间。"""
    moment = value if value is not None else now()
    return f"{moment.year:04d}{moment.month:02d}"


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """将 ``datetime`` 转为 UTC；无时区对象（SQLite 读回）按 UTC 处理。"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_iso(value: Optional[datetime]) -> Optional[str]:
    """格式化为 ``2026-10-17T08:15:00.123Z`` 形式，可直接按字符串排序。"""
    utc_value = to_utc(value)
    if utc_value is None:
        return None
    return utc_value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_value.microsecond // 1000:03d}Z"
