"""模型汇总导出。"""

from app.packages.media.models.base import Base
from app.packages.media.models.file_record import FileRecord

__all__ = ["Base", "FileRecord"]
