"""
系统管理通用枚举
backend/mes_sys/enums/sys_status.py
"""
from enum import IntEnum


class Status(IntEnum):
    """启用状态（部门/权限/角色/用户共用）"""
    INACTIVE = 0
    ACTIVE = 1


class PermissionKind(IntEnum):
    """权限类型(1:菜单,2:按钮,3:数据)"""
    MENU = 1
    BUTTON = 2
    DATA = 3


class RoleKind(IntEnum):
    """角色类型(1:系统角色-内置不可删除,2:业务角色-用户自定义)"""
    SYSTEM = 1
    BUSINESS = 2

