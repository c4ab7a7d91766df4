"""文件列表查询：把不可信的查询参数规整为安全、有界的分页查询。

非法的 ``sort``/``order``/``type`` 静默回退到默认值，从不报错；
空的 ``search`` 视为未提供，其余值（含纯空白）原样参与匹配；
``page`` 下限为 1 且不设上限，超出结果范围时返回空页；``limit`` 限制在 [1, 100]。
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from app.packages.media.api.v1.schemas.files import Pagination
from app.packages.media.crud.file_record import file_record_crud
from app.packages.media.services.projector import to_summary

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

SORT_FIELDS = ("created_at", "file_size", "original_name")
SORT_ORDERS = ("asc", "desc")
TYPE_FILTERS = ("image", "video", "all")

DEFAULT_SORT = "created_at"
DEFAULT_ORDER = "desc"
DEFAULT_TYPE = "all"


@dataclass(frozen=True)
class FileQuery:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    sort: str = DEFAULT_SORT
    order: str = DEFAULT_ORDER
    type: str = DEFAULT_TYPE
    search: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _parse_int(raw: Optional[str], default: int) -> int:
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


def _choice(raw: Optional[str], allowed: tuple[str, ...], default: str) -> str:
    return raw if raw in allowed else default


def parse_query_params(params: Mapping[str, Any]) -> FileQuery:
    page = max(_parse_int(params.get("page"), DEFAULT_PAGE), 1)
    limit = min(max(_parse_int(params.get("limit"), DEFAULT_LIMIT), 1), MAX_LIMIT)
    search = params.get("search") or None
    return FileQuery(
        page=page,
        limit=limit,
        sort=_choice(params.get("sort"), SORT_FIELDS, DEFAULT_SORT),
        order=_choice(params.get("order"), SORT_ORDERS, DEFAULT_ORDER),
        type=_choice(params.get("type"), TYPE_FILTERS, DEFAULT_TYPE),
        search=search,
    )


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


class QueryService:
    def list_files(self, db: Session, query: FileQuery, *, base_url: str) -> dict:
        items, total = file_record_crud.list_with_filters(
            db,
            file_type=None if query.type == "all" else query.type,
            search=query.search,
            sort=query.sort,
            order=query.order,
            skip=query.offset,
            limit=query.limit,
        )
        pagination = Pagination(
            page=query.page,
            limit=query.limit,
            total=total,
            total_pages=total_pages(total, query.limit),
        )
        return {
            "files": [to_summary(item, base_url) for item in items],
            "pagination": pagination,
        }


query_service = QueryService()
