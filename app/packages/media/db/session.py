"""Database engine and session factory configuration."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.packages.media.core.config import get_settings

settings = get_settings()

# SQLite connections are handed across FastAPI's threadpool, so the same-thread
# check is disabled for that dialect only.
_connect_args = {"check_same_thread": False} if settings.is_sqlite else {}

engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    echo=settings.database_echo,
    connect_args=_connect_args,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
