"""
部门管理模型
backend/mes_sys/models/sys_dept.py
"""
from sqlalchemy import Column, String, SmallInteger, Integer, ForeignKey

from mes_sys.models.base import (
    Base, int_pk_column, create_time_column, update_time_column,
    status_column, is_deleted_column,
)


class SysDept(Base):
    __tablename__ = 'sys_dept'
    __table_args__ = {'comment': '部门管理表'}

    id = int_pk_column()
    code = Column(String(50), nullable=False, unique=True, comment='部门编号')
    name = Column(String(100), nullable=False, comment='部门名称')

    # 自关联外键
    parent_id = Column(
        Integer,
        ForeignKey('sys_dept.id', ondelete='SET NULL'),
        nullable=True,
        comment='父节点id'
    )

    # 仅由TreePathMaintainer写入
    tree_path = Column(String(255), nullable=False, default='', comment='父节点id路径(如1,5,12)')
    sort = Column(SmallInteger, default=0, comment='显示顺序')
    status = status_column()

    leader = Column(String(50), nullable=True, comment='负责人')
    phone = Column(String(20), nullable=True, comment='联系电话')
    email = Column(String(100), nullable=True, comment='邮箱')
    remark = Column(String(500), nullable=True, comment='备注')

    # 审计字段
    create_by = Column(Integer, nullable=True, comment='创建人ID')
    create_time = create_time_column()
    update_by = Column(Integer, nullable=True, comment='修改人ID')
    update_time = update_time_column()
    is_deleted = is_deleted_column()

    def __repr__(self):
        return f"<SysDept(id={self.id}, name={self.name}, code={self.code}, tree_path={self.tree_path})>"
