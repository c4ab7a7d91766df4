"""Database bootstrapping utilities."""

from __future__ import annotations

import logging

from app.packages.media.db import session as db_session
from app.packages.media.models.base import Base
from app.packages.media.models.file_record import FileRecord  # noqa: F401 - register table metadata

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Create all database tables if they do not exist."""
    try:
        Base.metadata.create_all(bind=db_session.engine)
    except Exception:  # pragma: no cover
        logger.exception("Failed to create database schema")
        raise
