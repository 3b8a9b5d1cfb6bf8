"""
权限解析服务
backend/mes_sys/services/sys_authorization_service.py
核心功能：
1. 用户有效权限 = 用户所有启用角色的权限并集（按ID去重，仅保留启用且未删除的权限）
2. 权限码校验为精确匹配，无角色/无权限时返回空集合、校验结果为False
3. 每次调用重新读取数据库，不缓存，关联关系变更后立即生效
4. 数据库异常记录日志后向上抛出，不按"无权限"静默处理
"""
import logging
from typing import Any, Dict, List, Set

from sqlalchemy.exc import SQLAlchemyError

from mes_sys.core.exceptions import PermissionDenied
from mes_sys.enums.sys_status import PermissionKind
from mes_sys.models import SysPermission, SysRole
from mes_sys.repositories.sys_association_repository import AssociationRepository
from mes_sys.repositories.sys_permission_repository import PermissionRepository
from mes_sys.repositories.sys_role_repository import RoleRepository
from mes_sys.utils.tree_builder import TreeNode, build_forest

logger = logging.getLogger(__name__)


class AuthorizationService:
    """权限解析：只读，不写任何表"""

    def __init__(
            self,
            role_repository: RoleRepository,
            permission_repository: PermissionRepository,
            user_role_repository: AssociationRepository,
            role_permission_repository: AssociationRepository):
        self.role_repository = role_repository
        self.permission_repository = permission_repository
        self.user_role_repository = user_role_repository
        self.role_permission_repository = role_permission_repository

    # ------------------------------
    # 核心业务：有效权限
    # ------------------------------
    async def get_user_roles(self, user_id: int) -> List[SysRole]:
        """用户已分配且启用的角色"""
        role_ids = await self.user_role_repository.get_target_ids(user_id)
        return await self.role_repository.get_active_by_ids(role_ids)

    async def get_effective_permissions(self, user_id: int) -> List[SysPermission]:
        """
        用户有效权限列表（按sort、id排序）

        用户 → 启用的角色 → 角色权限并集 → 启用且未删除的权限
        """
        try:
            async with self.permission_repository.transaction() as session:
                # 同一会话内读取，保证三次查询基于同一快照
                role_ids = await self.user_role_repository.get_target_ids(user_id, session=session)
                active_roles = await self.role_repository.get_active_by_ids(role_ids, session=session)
                if not active_roles:
                    logger.debug(f"用户无启用角色 | 用户ID：{user_id}", extra={"user_id": user_id})
                    return []

                permission_ids = await self.role_permission_repository.get_target_ids_for_owners(
                    [role.id for role in active_roles], session=session
                )
                permissions = await self.permission_repository.get_active_by_ids(permission_ids, session=session)
        except SQLAlchemyError as e:
            logger.error(
                f"查询用户权限数据库异常 | 用户ID：{user_id} | 错误：{e}",
                extra={"user_id": user_id}
            )
            raise

        # 按ID去重（查询已distinct，这里兜底保持首次出现顺序）
        seen: Set[int] = set()
        result = []
        for permission in permissions:
            if permission.id in seen:
                continue
            seen.add(permission.id)
            result.append(permission)

        logger.debug(
            f"用户权限解析完成 | 用户ID：{user_id} | 角色数：{len(active_roles)} | 权限数：{len(result)}",
            extra={"user_id": user_id, "permission_count": len(result)}
        )
        return result

    async def get_permission_codes(self, user_id: int) -> Set[str]:
        """用户有效权限码集合"""
        permissions = await self.get_effective_permissions(user_id)
        return {permission.code for permission in permissions}

    async def has_permission(self, user_id: int, permission_code: str) -> bool:
        """校验用户是否拥有指定权限码（精确匹配）"""
        if not permission_code:
            return False
        codes = await self.get_permission_codes(user_id)
        granted = permission_code in codes
        logger.debug(
            f"权限校验 | 用户ID：{user_id} | 权限码：{permission_code} | 结果：{granted}",
            extra={"user_id": user_id, "permission_code": permission_code, "granted": granted}
        )
        return granted

    async def require_permission(self, user_id: int, permission_code: str) -> None:
        """校验权限，不满足时抛出PermissionDenied"""
        if not await self.has_permission(user_id, permission_code):
            logger.warning(
                f"权限不足 | 用户ID：{user_id} | 所需权限：{permission_code}",
                extra={"user_id": user_id, "permission_code": permission_code}
            )
            raise PermissionDenied(detail=f"缺少权限：{permission_code}")

    async def role_has_permission(self, role_id: int, permission_code: str) -> bool:
        """校验角色是否直接拥有指定权限码（启用的权限）"""
        permission = await self.permission_repository.get_by_code(permission_code)
        if permission is None or permission.status != 1:
            return False
        return await self.role_permission_repository.exists(role_id, permission.id)

    # ------------------------------
    # 基础业务：权限树
    # ------------------------------
    async def get_user_permission_tree(self, user_id: int) -> List[TreeNode[SysPermission]]:
        """用户有效权限组装为树（父权限未授权时子权限作为根节点）"""
        permissions = await self.get_effective_permissions(user_id)
        return build_forest(permissions)

    async def get_user_menu_tree(self, user_id: int) -> List[Dict[str, Any]]:
        """用户可见菜单树（仅菜单类型且可见），前端菜单格式"""
        permissions = await self.get_effective_permissions(user_id)
        menus = [p for p in permissions if p.kind == PermissionKind.MENU and p.is_visible]
        return [node.to_dict(_menu_mapper) for node in build_forest(menus)]


def _menu_mapper(permission: SysPermission) -> Dict[str, Any]:
    return {
        "id": permission.id,
        "code": permission.code,
        "name": permission.name,
        "path": permission.route_path,
        "component": permission.component,
        "icon": permission.icon,
    }
