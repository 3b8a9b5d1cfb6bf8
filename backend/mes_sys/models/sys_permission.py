"""
系统权限模型
backend/mes_sys/models/sys_permission.py
权限按 菜单(1)/按钮(2)/数据(3) 三类组织成独立的权限树
"""
from sqlalchemy import Boolean, Column, String, SmallInteger, Integer, ForeignKey
from sqlalchemy.orm import relationship

from mes_sys.models.base import (
    Base, int_pk_column, create_time_column, update_time_column,
    status_column, is_deleted_column,
)


class SysPermission(Base):
    __tablename__ = "sys_permission"
    __table_args__ = {'comment': '系统权限表'}

    id = int_pk_column()
    code = Column(String(100), nullable=False, unique=True, comment='权限编码')
    name = Column(String(64), nullable=False, comment='权限名称')
    kind = Column(SmallInteger, nullable=False, default=1, comment='权限类型(1-菜单 2-按钮 3-数据)')

    parent_id = Column(
        Integer,
        ForeignKey('sys_permission.id', ondelete='SET NULL'),
        nullable=True,
        comment='父权限ID（NULL表示顶级）'
    )
    # 仅由TreePathMaintainer写入
    tree_path = Column(String(255), nullable=False, default='', comment='父节点ID路径')

    route_path = Column(String(200), nullable=True, comment='【菜单】路由/页面路径')
    component = Column(String(200), nullable=True, comment='【菜单】视图组件')
    icon = Column(String(64), nullable=True, comment='菜单图标')
    is_visible = Column(Boolean, nullable=False, default=True, comment='是否显示')

    sort = Column(SmallInteger, default=0, comment='显示顺序')
    status = status_column()
    remark = Column(String(500), nullable=True, comment='备注')

    # 审计字段
    create_by = Column(Integer, nullable=True, comment='创建人 ID')
    create_time = create_time_column()
    update_by = Column(Integer, nullable=True, comment='更新人ID')
    update_time = update_time_column()
    is_deleted = is_deleted_column()

    # 关联行只由AssignmentService写入
    roles = relationship(
        "SysRole", secondary="sys_role_permission", viewonly=True
    )

    def __repr__(self):
        return f"<SysPermission(id={self.id}, name={self.name}, code={self.code})>"
