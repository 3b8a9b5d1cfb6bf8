"""
系统角色模型
backend/mes_sys/models/sys_role.py
"""
from sqlalchemy import Column, String, SmallInteger, Integer, DateTime, ForeignKey, Table, text
from sqlalchemy.orm import relationship

from mes_sys.models.base import (
    Base, int_pk_column, create_time_column, update_time_column,
    status_column, is_deleted_column,
)


class SysRole(Base):
    __tablename__ = 'sys_role'
    __table_args__ = {'comment': '系统角色表'}

    id = int_pk_column()
    code = Column(String(50), nullable=False, unique=True, comment='角色编码')
    name = Column(String(64), nullable=False, comment='角色名称')
    kind = Column(SmallInteger, nullable=False, default=2, comment='角色类型(1-系统角色 2-业务角色)')
    sort = Column(SmallInteger, default=0, comment='显示顺序')
    status = status_column()
    remark = Column(String(500), nullable=True, comment='备注')

    # 审计字段
    create_by = Column(Integer, nullable=True, comment='创建人 ID')
    create_time = create_time_column()
    update_by = Column(Integer, nullable=True, comment='更新人ID')
    update_time = update_time_column()
    is_deleted = is_deleted_column()

    # 关系定义（只读，关联行由AssignmentService维护）
    users = relationship('SysUser', secondary='sys_user_role', viewonly=True)
    permissions = relationship(
        "SysPermission", secondary="sys_role_permission", viewonly=True
    )

    def __repr__(self):
        return f"<SysRole(id={self.id}, name={self.name}, code={self.code})>"


# 角色权限关联表（多对多），(role_id, permission_id)联合主键保证不重复
sys_role_permission = Table(
    'sys_role_permission',
    Base.metadata,
    Column('role_id', Integer, ForeignKey('sys_role.id'), primary_key=True, comment='角色ID'),
    Column('permission_id', Integer, ForeignKey('sys_permission.id'), primary_key=True, comment='权限ID'),
    Column('create_by', Integer, nullable=True, comment='创建人ID'),
    Column('create_time', DateTime, server_default=text('CURRENT_TIMESTAMP'), comment='创建时间'),
    comment='角色权限关联表'
)
