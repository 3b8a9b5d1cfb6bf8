"""
系统用户模型
backend/mes_sys/models/sys_user.py
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Table, text
from sqlalchemy.orm import relationship

from mes_sys.models.base import (
    Base, int_pk_column, create_time_column, update_time_column,
    status_column, is_deleted_column,
)


class SysUser(Base):
    __tablename__ = 'sys_user'
    __table_args__ = {'comment': '系统用户表'}

    id = int_pk_column()
    username = Column(String(64), unique=True, index=True, nullable=False, comment='用户名')
    password = Column(String(100), nullable=False, comment='密码')
    real_name = Column(String(64), nullable=True, comment='真实姓名')
    email = Column(String(128), nullable=True, comment='用户邮箱')
    mobile = Column(String(20), nullable=True, comment='联系方式')
    avatar = Column(String(255), nullable=True, comment='用户头像')

    # 部门ID（不设置外键约束，保持与原始设计一致）
    dept_id = Column(Integer, nullable=True, comment='部门ID')
    status = status_column()

    last_login_time = Column(DateTime, nullable=True, comment='最后登录时间')
    last_login_ip = Column(String(50), nullable=True, comment='最后登录IP')
    password_update_time = Column(DateTime, nullable=True, comment='密码修改时间')
    remark = Column(String(500), nullable=True, comment='备注')

    # 时间戳和审计字段
    create_time = create_time_column()
    create_by = Column(Integer, nullable=True, comment='创建人ID')
    update_time = update_time_column()
    update_by = Column(Integer, nullable=True, comment='修改人ID')
    is_deleted = is_deleted_column()

    # 与角色的多对多关系（只读）
    roles = relationship('SysRole', secondary='sys_user_role', viewonly=True)

    def __repr__(self):
        return f"<SysUser(id={self.id}, username={self.username})>"


# 用户角色关联表（多对多），(user_id, role_id)联合主键保证不重复
sys_user_role = Table(
    'sys_user_role',
    Base.metadata,
    Column('user_id', Integer, ForeignKey('sys_user.id'), primary_key=True, comment='用户ID'),
    Column('role_id', Integer, ForeignKey('sys_role.id'), primary_key=True, comment='角色ID'),
    Column('create_by', Integer, nullable=True, comment='创建人ID'),
    Column('create_time', DateTime, server_default=text('CURRENT_TIMESTAMP'), comment='创建时间'),
    comment='用户角色关联表'
)
