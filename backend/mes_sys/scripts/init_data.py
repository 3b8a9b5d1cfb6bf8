"""
初始化基础数据
backend/mes_sys/scripts/init_data.py

1. 建表（create_all，已存在的表跳过）
2. 部门树、权限树（按PermissionCode枚举生成）、管理员/操作员角色、首个超级管理员
3. 可重复执行：按编码/用户名判断是否已存在，已存在则跳过；角色权限为整体替换，重复执行不产生写入

用法：python -m mes_sys.scripts.init_data
"""
import asyncio
import logging
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from mes_sys.core.config import settings
from mes_sys.core.logging import init_global_logger
from mes_sys.di.container import Container
from mes_sys.enums.sys_permissions import PermissionCode
from mes_sys.enums.sys_status import PermissionKind, RoleKind
from mes_sys.models import Base, validate_models
from mes_sys.schemas.sys_dept import DeptCreate
from mes_sys.schemas.sys_permission import PermissionCreate
from mes_sys.schemas.sys_role import RoleCreate
from mes_sys.schemas.sys_user import UserCreate

logger = logging.getLogger(__name__)

# (编码, 名称, 父部门编码)，父部门在前
DEPT_DATA = [
    ("HQ", "总公司", None),
    ("PROD", "生产部", "HQ"),
    ("WS1", "一车间", "PROD"),
    ("WS2", "二车间", "PROD"),
    ("QA", "质量部", "HQ"),
    ("EQ", "设备部", "HQ"),
]

# 操作员角色的权限
OPERATOR_PERMISSIONS = [
    PermissionCode.BASIC,
    PermissionCode.BASIC_PRODUCT,
    PermissionCode.BASIC_ROUTE,
    PermissionCode.EQUIPMENT,
    PermissionCode.MAINTENANCE_ORDER,
    PermissionCode.MAINTENANCE_ORDER_EXECUTE,
    PermissionCode.DATA_DEPT,
]


async def create_schema(engine: AsyncEngine) -> None:
    validate_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_depts(container: Container) -> Dict[str, int]:
    logger.info("📁 初始化部门数据...")
    dept_service = container.dept_service()
    ids: Dict[str, int] = {}
    for sort, (code, name, parent_code) in enumerate(DEPT_DATA, start=1):
        dept = await dept_service.get_by_code(code)
        if dept is None:
            dept = await dept_service.create_dept(DeptCreate(
                code=code,
                name=name,
                parent_id=ids[parent_code] if parent_code else None,
                sort=sort,
            ))
        ids[code] = dept.id
    return ids


async def init_permissions(container: Container) -> Dict[str, int]:
    logger.info("🔐 初始化权限数据...")
    permission_service = container.permission_service()
    ids: Dict[str, int] = {}
    for sort, item in enumerate(PermissionCode, start=1):
        permission = await permission_service.get_permission_by_code(item.value)
        if permission is None:
            permission = await permission_service.create_permission(PermissionCreate(
                code=item.value,
                name=item.display_name,
                kind=item.kind,
                parent_id=ids[item.parent_code] if item.parent_code else None,
                route_path=_route_path(item),
                sort=sort,
            ))
        ids[item.value] = permission.id
    return ids


async def init_roles(container: Container, permission_ids: Dict[str, int]) -> Dict[str, int]:
    logger.info("👥 初始化角色数据...")
    role_service = container.role_service()
    role_data = [
        ("admin", "系统管理员", RoleKind.SYSTEM, list(permission_ids.values())),
        ("operator", "生产操作员", RoleKind.BUSINESS, [permission_ids[p.value] for p in OPERATOR_PERMISSIONS]),
    ]
    ids: Dict[str, int] = {}
    for sort, (code, name, kind, perm_ids) in enumerate(role_data, start=1):
        role = await role_service.get_role_by_code(code)
        if role is None:
            role = await role_service.create_role(RoleCreate(code=code, name=name, kind=kind, sort=sort))
        await role_service.assign_permissions(role.id, perm_ids)
        ids[code] = role.id
    return ids


async def init_superuser(container: Container, dept_id: Optional[int], role_ids: List[int]) -> int:
    logger.info("👤 初始化超级管理员...")
    user_service = container.user_service()
    user = await user_service.get_by_username(settings.FIRST_SUPERUSER)
    if user is None:
        user = await user_service.create_user(UserCreate(
            username=settings.FIRST_SUPERUSER,
            password=settings.FIRST_SUPERUSER_PASSWORD,
            real_name="超级管理员",
            dept_id=dept_id,
            role_ids=role_ids,
        ))
    return user.id


async def init_data(container: Container) -> Dict[str, Dict[str, int]]:
    """初始化全部基础数据，返回各类数据的 编码 → ID 映射"""
    await create_schema(container.async_engine())
    dept_ids = await init_depts(container)
    permission_ids = await init_permissions(container)
    role_ids = await init_roles(container, permission_ids)
    user_id = await init_superuser(container, dept_ids["HQ"], [role_ids["admin"]])
    logger.info(
        f"✅ 基础数据初始化完成 | 部门：{len(dept_ids)} | 权限：{len(permission_ids)} | 角色：{len(role_ids)}"
    )
    return {
        "depts": dept_ids,
        "permissions": permission_ids,
        "roles": role_ids,
        "users": {settings.FIRST_SUPERUSER: user_id},
    }


def _route_path(item: PermissionCode) -> Optional[str]:
    if item.kind != PermissionKind.MENU:
        return None
    return "/" + item.value.replace(":", "/")


async def main() -> None:
    init_global_logger()
    container = Container()
    try:
        await init_data(container)
    finally:
        await container.async_engine().dispose()


if __name__ == "__main__":
    asyncio.run(main())
