"""
SQLAlchemy Declarative Base
backend/mes_sys/models/base.py
"""
from sqlalchemy import Column, DateTime, Integer, SmallInteger, text
from sqlalchemy.orm import declarative_base

# 创建DeclarativeBase实例
Base = declarative_base()


def int_pk_column():
    """生成自增整型主键列的辅助函数（tree_path按ID拼接，保持路径短小）"""
    return Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )


def create_time_column():
    return Column(DateTime, server_default=text('CURRENT_TIMESTAMP'), comment='创建时间')


def update_time_column():
    return Column(
        DateTime,
        server_default=text('CURRENT_TIMESTAMP'),
        onupdate=text('CURRENT_TIMESTAMP'),
        comment='更新时间'
    )


def status_column():
    return Column(SmallInteger, nullable=False, default=1, comment='状态(1-正常 0-停用)')


def is_deleted_column():
    return Column(SmallInteger, nullable=False, default=0, comment='逻辑删除标识(1-已删除 0-未删除)')


__all__ = [
    'Base',
    'int_pk_column',
    'create_time_column',
    'update_time_column',
    'status_column',
    'is_deleted_column',
]
