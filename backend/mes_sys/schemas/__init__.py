# 功能：统一导出所有Schema模型，对外提供一致的导入入口
# backend/mes_sys/schemas/__init__.py
from mes_sys.schemas.base import BaseSchema, AuditSchema, IDSchema
from mes_sys.schemas.sys_dept import DeptBase, DeptCreate, DeptUpdate, DeptOut
from mes_sys.schemas.sys_permission import (
    PermissionBase, PermissionCreate, PermissionUpdate, PermissionOut
)
from mes_sys.schemas.sys_role import RoleBase, RoleCreate, RoleUpdate, RoleOut
from mes_sys.schemas.sys_user import UserBase, UserCreate, UserUpdate, UpdatePassword, UserOut

__all__ = [
    # Base
    'BaseSchema', 'AuditSchema', 'IDSchema',

    # Dept
    'DeptBase', 'DeptCreate', 'DeptUpdate', 'DeptOut',

    # Permission
    'PermissionBase', 'PermissionCreate', 'PermissionUpdate', 'PermissionOut',

    # Role
    'RoleBase', 'RoleCreate', 'RoleUpdate', 'RoleOut',

    # User
    'UserBase', 'UserCreate', 'UserUpdate', 'UpdatePassword', 'UserOut',
]
