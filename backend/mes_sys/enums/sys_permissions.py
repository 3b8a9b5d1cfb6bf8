"""
内置权限枚举
backend/mes_sys/enums/sys_permissions.py
初始化数据（scripts/init_data.py）按此枚举生成权限树，菜单在前、按钮挂在对应菜单下
"""
from enum import Enum
from typing import Optional

from mes_sys.enums.sys_status import PermissionKind


class PermissionCode(Enum):
    """
    系统权限枚举类
    每个枚举值格式: (权限代码, 显示名称, 权限类型, 父权限代码)
    """

    def __new__(cls, code: str, name: str, kind: PermissionKind, parent: Optional[str]):
        obj = object.__new__(cls)
        obj._value_ = code
        obj.display_name = name
        obj.kind = kind
        obj.parent_code = parent
        return obj

    # 系统管理
    SYSTEM = ("system", "系统管理", PermissionKind.MENU, None)
    SYSTEM_USER = ("system:user", "用户管理", PermissionKind.MENU, "system")
    USER_CREATE = ("system:user:create", "创建用户", PermissionKind.BUTTON, "system:user")
    USER_UPDATE = ("system:user:update", "更新用户", PermissionKind.BUTTON, "system:user")
    USER_DELETE = ("system:user:delete", "删除用户", PermissionKind.BUTTON, "system:user")
    USER_ASSIGN_ROLE = ("system:user:assign-role", "分配角色", PermissionKind.BUTTON, "system:user")

    SYSTEM_ROLE = ("system:role", "角色管理", PermissionKind.MENU, "system")
    ROLE_MANAGE = ("system:role:manage", "角色维护", PermissionKind.BUTTON, "system:role")
    ROLE_ASSIGN_PERMISSION = ("system:role:assign-permission", "分配权限", PermissionKind.BUTTON, "system:role")

    SYSTEM_DEPT = ("system:dept", "部门管理", PermissionKind.MENU, "system")
    DEPT_CREATE = ("system:dept:create", "创建部门", PermissionKind.BUTTON, "system:dept")
    DEPT_UPDATE = ("system:dept:update", "更新部门", PermissionKind.BUTTON, "system:dept")
    DEPT_DELETE = ("system:dept:delete", "删除部门", PermissionKind.BUTTON, "system:dept")

    SYSTEM_PERMISSION = ("system:permission", "权限管理", PermissionKind.MENU, "system")

    # 基础信息
    BASIC = ("basic", "基础信息", PermissionKind.MENU, None)
    BASIC_PRODUCT = ("basic:product", "产品管理", PermissionKind.MENU, "basic")
    BASIC_BOM = ("basic:bom", "BOM管理", PermissionKind.MENU, "basic")
    BASIC_ROUTE = ("basic:route", "工艺路线", PermissionKind.MENU, "basic")
    BASIC_EQUIPMENT = ("basic:equipment", "设备管理", PermissionKind.MENU, "basic")

    # 设备维护
    EQUIPMENT = ("equipment", "设备维护", PermissionKind.MENU, None)
    MAINTENANCE_ORDER = ("equipment:maintenance-order", "维护工单", PermissionKind.MENU, "equipment")
    MAINTENANCE_ORDER_EXECUTE = (
        "equipment:maintenance-order:execute", "执行工单", PermissionKind.BUTTON, "equipment:maintenance-order"
    )
    SPARE = ("equipment:spare", "备件管理", PermissionKind.MENU, "equipment")

    # 数据权限
    DATA_ALL = ("data:all", "全部数据", PermissionKind.DATA, None)
    DATA_DEPT = ("data:dept", "本部门及子部门数据", PermissionKind.DATA, None)
