"""配置模块：从环境变量（以及项目根目录下的 ``.env`` 文件）加载应用设置。

加载顺序：
1. 设置了 ``ENV_FILE`` 时只加载该文件，并覆盖已有变量；
2. 否则先加载 ``.env``（不覆盖进程环境），再按 ``ENVIRONMENT`` 加载 ``.env.<environment>`` 覆盖之。
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Iterator, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "app").is_dir()),
    Path.cwd(),
)


def _env_files() -> Iterator[tuple[Path, bool]]:
    """依次给出待加载的环境文件及其是否覆盖已有变量。"""
    explicit = os.getenv("ENV_FILE")
    if explicit:
        yield PROJECT_ROOT / explicit, True
        return

    yield PROJECT_ROOT / ".env", False
    environment = os.getenv("ENVIRONMENT")
    if environment:
        name = environment if environment.startswith(".env") else f".env.{environment}"
        yield PROJECT_ROOT / name, True


for _env_path, _override in _env_files():
    if _env_path.is_file():
        load_dotenv(_env_path, override=_override, encoding="utf-8")


class Settings(BaseSettings):
    """
    封装应用运行所需的所有配置项，每个字段都可以通过同名的大写环境变量重写。
    共享密钥、管理员凭证与存储后端参数都从这里注入，业务代码不直接读取环境变量。
    """

    project_name: str = Field(default="My CDN API", alias="PROJECT_NAME")
    api_version: str = Field(default="1.0.0", alias="API_VERSION")
    api_prefix: str = Field(default="/api", alias="API_PREFIX")
    debug: bool = Field(default=False, alias="DEBUG")

    # 认证：单一共享密钥 + 用于换取该密钥的管理员账号
    api_key: str = Field(default="changeme", alias="API_KEY")
    admin_username: str = Field(default="admin", alias="ADMIN_USERNAME")
    admin_password: str = Field(default="changeme", alias="ADMIN_PASSWORD")

    cdn_base_url: str = Field(default="http://127.0.0.1:8000", alias="CDN_BASE_URL")

    database_url: str = Field(default="sqlite:///./media.db", alias="DATABASE_URL")
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    # 对象存储：local | s3
    storage_backend: str = Field(default="local", alias="STORAGE_BACKEND")
    local_storage_root: str = Field(default="storage", alias="LOCAL_STORAGE_ROOT")
    s3_bucket: Optional[str] = Field(default=None, alias="S3_BUCKET")
    s3_region: Optional[str] = Field(default=None, alias="S3_REGION")
    s3_access_key_id: Optional[str] = Field(default=None, alias="S3_ACCESS_KEY_ID")
    s3_secret_access_key: Optional[str] = Field(default=None, alias="S3_SECRET_ACCESS_KEY")
    s3_endpoint_url: Optional[str] = Field(default=None, alias="S3_ENDPOINT_URL")
    s3_path_prefix: Optional[str] = Field(default=None, alias="S3_PATH_PREFIX")

    cors_origins_raw: str = Field(default="*", alias="CORS_ORIGINS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default="log", alias="LOG_DIR")
    log_file_name: str = Field(default="app.log", alias="LOG_FILE_NAME")
    log_json: bool = Field(default=False, alias="LOG_JSON")
    app_port: int = Field(default=8000, alias="APP_PORT")
    timezone: str = Field(default="UTC", alias="TIMEZONE")

    model_config = SettingsConfigDict(extra="ignore")

    def _absolute(self, raw: str) -> Path:
        path = Path(raw).expanduser()
        return path if path.is_absolute() else PROJECT_ROOT / path

    @property
    def log_directory(self) -> Path:
        return self._absolute(self.log_dir)

    @property
    def log_file_path(self) -> Path:
        return self.log_directory / self.log_file_name

    @property
    def local_storage_path(self) -> Path:
        """本地对象存储根目录（相对路径按项目根目录解析）。"""
        return self._absolute(self.local_storage_root)

    @property
    def timezone_info(self) -> ZoneInfo:
        """配置的时区名无法识别时按 UTC 处理。"""
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            return ZoneInfo("UTC")

    @property
    def cors_origins(self) -> list[str]:
        """``CORS_ORIGINS`` 以逗号分隔，缺省 ``*``。"""
        origins = [origin.strip() for origin in self.cors_origins_raw.split(",")]
        return [origin for origin in origins if origin] or ["*"]

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    return Settings()
