"""文件记录 CRUD。"""

from __future__ import annotations

from typing import Optional, Tuple

from sqlalchemy.orm import Session

from app.packages.media.core.timezone import utc_now
from app.packages.media.crud.base import CRUDBase
from app.packages.media.models.file_record import FileRecord

# 排序字段只能来自这张表，用户输入不会进入 ORDER BY 子句
SORTABLE_COLUMNS = {
    "created_at": FileRecord.created_at,
    "file_size": FileRecord.file_size,
    "original_name": FileRecord.original_name,
}


class CRUDFileRecord(CRUDBase[FileRecord]):
    def list_with_filters(
        self,
        db: Session,
        *,
        file_type: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = "created_at",
        order: str = "desc",
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[list[FileRecord], int]:
        """按类型与名称过滤后分页返回记录，以及过滤后的总数。

        ``search`` 以绑定参数做大小写不敏感的子串匹配，``%`` 与 ``_`` 会被转义按字面匹配。
        """
        query = self.query(db)

        if file_type:
            query = query.filter(self.model.file_type == file_type)
        if search:
            query = query.filter(self.model.original_name.icontains(search, autoescape=True))

        total = query.count()
        # 偏移越过结果集时不再发起查询，超大页码也不会进入 OFFSET 绑定参数
        if skip >= total:
            return [], total

        column = SORTABLE_COLUMNS.get(sort, self.model.created_at)
        if order == "asc":
            ordering = (column.asc(), self.model.id.asc())
        else:
            ordering = (column.desc(), self.model.id.desc())

        items = query.order_by(*ordering).offset(skip).limit(limit).all()
        return items, total

    def rename(self, db: Session, db_obj: FileRecord, *, original_name: str) -> FileRecord:
        db_obj.original_name = original_name
        db_obj.updated_at = utc_now()
        return self.save(db, db_obj)


file_record_crud = CRUDFileRecord(FileRecord)
