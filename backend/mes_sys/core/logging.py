"""
全局日志初始化
backend/mes_sys/core/logging.py
- 复用settings现有配置，支持日志落文件开关
- 控制台Handler + 轮转文件Handler（50MB/文件，保留10个备份）
- SQLAlchemy引擎日志级别随环境调整
"""
import logging
import os
from logging import Logger
from logging.handlers import RotatingFileHandler

from mes_sys.core.config import settings

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s | %(module)s:%(funcName)s | %(name)s | %(levelname)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"


def _resolve_level() -> int:
    if settings.LOG_LEVEL:
        return logging.getLevelName(settings.LOG_LEVEL.upper())
    return logging.DEBUG if settings.ENVIRONMENT == "local" else logging.INFO


def init_sqlalchemy_logger() -> Logger:
    """初始化SQLAlchemy日志（DB_ECHO开启时INFO，否则WARNING）"""
    logger = logging.getLogger("sqlalchemy.engine")
    logger.setLevel(logging.INFO if settings.DB_ECHO else logging.WARNING)
    return logger


def init_global_logger() -> None:
    """
    初始化全局日志（幂等）
    - 根Logger已有Handler时直接返回，防止日志重复输出
    - LOG_TO_FILE_FLAG=True时追加轮转文件Handler
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(_resolve_level())

    if len(root_logger.handlers) > 0:
        return

    # 1. 控制台Handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console_handler)

    # 2. 文件Handler（仅当LOG_TO_FILE_FLAG=True时添加）
    if settings.LOG_TO_FILE_FLAG:
        log_dir = os.path.dirname(os.path.abspath(settings.LOG_FILE_PATH))
        os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            filename=settings.LOG_FILE_PATH,
            maxBytes=50 * 1024 * 1024,
            backupCount=10,
            encoding="utf-8"
        )
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        file_handler.setLevel(logging.INFO)
        root_logger.addHandler(file_handler)
        root_logger.info(f"日志文件初始化完成 | 日志路径：{settings.LOG_FILE_PATH}")

    init_sqlalchemy_logger()
