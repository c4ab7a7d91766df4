"""内容寻址：根据文件字节与上传年月推导稳定的存储路径。

- 标识：SHA-256 十六进制小写摘要的前 16 位；
- 主文件路径：``{yyyymm}/{hash}.{ext}``，扩展名由 MIME 类型反查，未知时为 ``bin``；
- 缩略图路径：``{yyyymm}/{hash}_thumb.jpg``。

同月内上传相同内容得到相同路径，后一次写入会覆盖前一次的对象。
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from app.packages.media.core.constants import (
    DEFAULT_EXTENSION,
    MIME_TO_EXTENSION,
    SHORT_HASH_LENGTH,
    THUMBNAIL_EXTENSION,
    THUMBNAIL_SUFFIX,
)
from app.packages.media.core.timezone import year_month


@dataclass(frozen=True)
class ContentAddress:
    short_hash: str
    stored_path: str
    thumbnail_path: str


def short_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()[:SHORT_HASH_LENGTH]


def extension_for(mime_type: str) -> str:
    return MIME_TO_EXTENSION.get(mime_type, DEFAULT_EXTENSION)


def storage_path(digest: str, extension: str, bucket: str) -> str:
    return f"{bucket}/{digest}.{extension}"


def thumbnail_path(digest: str, bucket: str) -> str:
    return f"{bucket}/{digest}{THUMBNAIL_SUFFIX}.{THUMBNAIL_EXTENSION}"


def address_for(data: bytes, mime_type: str, *, at: Optional[datetime] = None) -> ContentAddress:
    """计算上传内容的寻址结果；``at`` 缺省为当前时间（配置时区）。"""
    digest = short_hash(data)
    bucket = year_month(at)
    return ContentAddress(
        short_hash=digest,
        stored_path=storage_path(digest, extension_for(mime_type), bucket),
        thumbnail_path=thumbnail_path(digest, bucket),
    )
