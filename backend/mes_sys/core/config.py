# 项目核心配置文件，包含数据库、日志、时区、初始化数据等全局配置，支持从.env文件加载环境变量
# backend/mes_sys/core/config.py
#  - DEFAULT_TIMEZONE：全局时区，导出DEFAULT_TZ供Service层统一使用
#  - DATABASE_URL：可直接指定（桌面端/测试用sqlite），未指定时由POSTGRES_*拼接为SQLALCHEMY_DATABASE_URI
#  - LOG_TO_FILE_FLAG / LOG_FILE_PATH：日志落文件开关与路径，日志初始化见core/logging.py

import os
import warnings
from typing import Any, Literal, Optional
from zoneinfo import ZoneInfo

from pydantic import Field, computed_field, model_validator
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE_PATH", ".env"),  # 关键：动态路径
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "MES System Management"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    # 密码加密
    BCRYPT_ROUNDS: int = 12

    # 日志配置
    LOG_LEVEL: Optional[str] = Field(
        default=None,
        description="根日志级别，未设置时本地环境DEBUG，其他环境INFO"
    )
    LOG_TO_FILE_FLAG: bool = Field(
        default=False,
        description="日志落文件开关（True：控制台+文件输出；False：仅控制台输出）"
    )
    LOG_FILE_PATH: str = Field(
        default="logs/mes_sys.log",
        description="日志文件存储路径"
    )

    # 数据库配置：优先使用DATABASE_URL，否则由POSTGRES_*拼接
    DATABASE_URL: Optional[str] = Field(
        default=None,
        description="完整的异步数据库连接串，如 sqlite+aiosqlite:///./mes.db"
    )
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "mes"
    DB_ECHO: bool = False

    # 数据库连接池配置（sqlite不使用）
    DB_POOL_SIZE: int = Field(20, description="数据库连接池大小")
    DB_MAX_OVERFLOW: int = Field(100, description="最大溢出连接数")
    DB_POOL_RECYCLE: int = Field(3600, description="连接回收时间(秒)")
    DB_POOL_PRE_PING: bool = Field(True, description="连接有效性检查")

    # 全局时区配置，默认北京时间（Asia/Shanghai），支持从.env覆盖
    DEFAULT_TIMEZONE: str = Field(
        "Asia/Shanghai",
        description="项目全局默认时区（如Asia/Shanghai、UTC等）"
    )

    # 初始化数据
    FIRST_SUPERUSER: str = "admin"
    FIRST_SUPERUSER_PASSWORD: str = "changethis"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return str(MultiHostUrl.build(
            scheme="postgresql+psycopg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        ))

    @property
    def is_sqlite(self) -> bool:
        return self.SQLALCHEMY_DATABASE_URI.startswith("sqlite")

    def engine_options(self) -> dict[str, Any]:
        """create_async_engine参数，sqlite不支持连接池参数"""
        options: dict[str, Any] = {"echo": self.DB_ECHO}
        if not self.is_sqlite:
            options.update(
                pool_pre_ping=self.DB_POOL_PRE_PING,
                pool_size=self.DB_POOL_SIZE,
                max_overflow=self.DB_MAX_OVERFLOW,
                pool_recycle=self.DB_POOL_RECYCLE,
            )
        return options

    def _check_default_secret(self, var_name: str, value: str | None) -> None:
        if value == "changethis":
            message = (
                f'The value of {var_name} is "changethis", '
                "for security, please change it, at least for deployments."
            )
            if self.ENVIRONMENT == "local":
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        if self.ENVIRONMENT != "local":
            self._check_default_secret("FIRST_SUPERUSER_PASSWORD", self.FIRST_SUPERUSER_PASSWORD)
        return self


# 全局settings对象
settings = Settings()  # type: ignore

# 导出全局时区对象
DEFAULT_TZ = ZoneInfo(settings.DEFAULT_TIMEZONE)
