# mes_sys/services/sys_permission_service.py
import logging
from typing import List, Optional

from mes_sys.core.exceptions import BadRequest, CircularReference, ResourceNotFound
from mes_sys.enums.sys_status import PermissionKind, Status
from mes_sys.models import SysPermission
from mes_sys.repositories.sys_permission_repository import PermissionRepository
from mes_sys.schemas.sys_permission import PermissionCreate, PermissionUpdate
from mes_sys.services.tree_path_service import PathCascadeReport, TreePathMaintainer
from mes_sys.utils.tree_builder import TreeNode, build_forest

logger = logging.getLogger(__name__)


class PermissionService:
    """权限Service层：权限树维护、按类型查询"""

    def __init__(self, permission_repository: PermissionRepository, path_maintainer: TreePathMaintainer):
        self.permission_repository = permission_repository
        self.path_maintainer = path_maintainer

    # ------------------------------
    # 基础业务：查询权限
    # ------------------------------
    async def get_permission_by_id(self, permission_id: int) -> SysPermission:
        """按ID查询权限（不存在则抛异常）"""
        permission = await self.permission_repository.get_by_id(permission_id)
        if not permission:
            raise ResourceNotFound(detail=f"权限ID '{permission_id}' 不存在")
        return permission

    async def get_permission_by_code(self, code: str) -> Optional[SysPermission]:
        return await self.permission_repository.get_by_code(code)

    async def get_permissions_by_kind(self, kind: int) -> List[SysPermission]:
        return await self.permission_repository.get_by_kind(kind)

    async def get_menu_permissions(self) -> List[SysPermission]:
        return await self.get_permissions_by_kind(PermissionKind.MENU)

    async def get_button_permissions(self) -> List[SysPermission]:
        return await self.get_permissions_by_kind(PermissionKind.BUTTON)

    async def get_data_permissions(self) -> List[SysPermission]:
        return await self.get_permissions_by_kind(PermissionKind.DATA)

    async def get_child_permissions(self, parent_id: int) -> List[SysPermission]:
        return await self.permission_repository.get_children(parent_id)

    async def get_permission_tree(self) -> List[TreeNode[SysPermission]]:
        """全部启用权限组成的权限树（角色授权界面使用）"""
        permissions = await self.permission_repository.get_enabled_nodes()
        return build_forest(permissions)

    async def get_menu_tree(self) -> List[TreeNode[SysPermission]]:
        """仅菜单类型的权限树"""
        menus = await self.get_menu_permissions()
        return build_forest(menus)

    # ------------------------------
    # 核心业务：权限维护
    # ------------------------------
    async def create_permission(self, permission_in: PermissionCreate, actor_id: Optional[int] = None) -> SysPermission:
        """创建权限，并在同一事务内写入tree_path"""
        if await self.permission_repository.get_by_code(permission_in.code, include_deleted=True):
            raise BadRequest(detail=f"权限编码 '{permission_in.code}' 已存在")

        if permission_in.parent_id is not None:
            parent = await self.permission_repository.get_by_id(permission_in.parent_id)
            if not parent:
                raise BadRequest(detail=f"父权限ID '{permission_in.parent_id}' 不存在")
            if parent.kind == PermissionKind.BUTTON:
                raise BadRequest(detail="按钮权限下不能再挂子权限")

        async with self.permission_repository.transaction() as session:
            data = permission_in.model_dump()
            data.update(kind=int(permission_in.kind), create_by=actor_id, update_by=actor_id)
            permission = await self.permission_repository.add(data, session)
            await self.path_maintainer.stamp_new_node(session, permission)

        logger.info(f"权限创建成功 | ID：{permission.id} | 编码：{permission.code} | 路径：{permission.tree_path}")
        return permission

    async def update_permission(
            self,
            permission_id: int,
            permission_update: PermissionUpdate,
            actor_id: Optional[int] = None) -> SysPermission:
        """更新权限（父权限变更时级联重算tree_path）"""
        permission = await self.get_permission_by_id(permission_id)
        update_data = permission_update.model_dump(exclude_unset=True)

        new_code = update_data.get("code")
        if new_code and new_code != permission.code:
            if await self.permission_repository.get_by_code(new_code, include_deleted=True):
                raise BadRequest(detail=f"权限编码 '{new_code}' 已存在")

        parent_changed = "parent_id" in update_data and update_data["parent_id"] != permission.parent_id
        if parent_changed and update_data["parent_id"] is not None:
            new_parent_id = update_data["parent_id"]
            if new_parent_id == permission_id:
                raise CircularReference(detail="不能将自己设为父权限")
            new_parent = await self.permission_repository.get_by_id(new_parent_id)
            if not new_parent:
                raise BadRequest(detail=f"父权限ID '{new_parent_id}' 不存在")
            if new_parent.kind == PermissionKind.BUTTON:
                raise BadRequest(detail="按钮权限下不能再挂子权限")
            if await self._is_descendant(new_parent_id, permission_id):
                raise CircularReference(detail="不能将子权限设为父权限，避免循环引用")

        new_kind = update_data.get("kind")
        if new_kind == PermissionKind.BUTTON and permission.kind != PermissionKind.BUTTON:
            if await self.permission_repository.check_has_children(permission_id):
                raise BadRequest(detail="存在子权限，不能改为按钮权限")

        if "kind" in update_data and update_data["kind"] is not None:
            update_data["kind"] = int(update_data["kind"])
        for key, value in update_data.items():
            setattr(permission, key, value)
        permission.update_by = actor_id
        updated = await self.permission_repository.update(permission)

        if parent_changed:
            report = await self.path_maintainer.recompute_path(permission_id)
            if not report.ok:
                logger.warning(
                    f"权限路径级联存在失败节点 | 权限ID：{permission_id} | 失败：{[f.node_id for f in report.failures]}"
                )
            updated = await self.get_permission_by_id(permission_id)
        return updated

    async def set_status(self, permission_id: int, status: int, actor_id: Optional[int] = None) -> SysPermission:
        """启用/停用权限（停用后立即从用户有效权限中移除）"""
        if status not in (Status.ACTIVE, Status.INACTIVE):
            raise BadRequest(detail=f"无效的状态值: {status}")
        permission = await self.get_permission_by_id(permission_id)
        permission.status = int(status)
        permission.update_by = actor_id
        return await self.permission_repository.update(permission)

    async def delete_permission(self, permission_id: int, actor_id: Optional[int] = None) -> None:
        """删除权限（逻辑删除，存在子权限时拒绝）"""
        permission = await self.get_permission_by_id(permission_id)
        if await self.permission_repository.check_has_children(permission_id):
            raise BadRequest(detail="存在子权限，无法删除")
        permission.update_by = actor_id
        await self.permission_repository.delete(permission)
        logger.info(f"权限已删除 | ID：{permission_id} | 编码：{permission.code}")

    async def recompute_path(self, permission_id: int) -> PathCascadeReport:
        return await self.path_maintainer.recompute_path(permission_id)

    async def _is_descendant(self, candidate_id: int, ancestor_id: int) -> bool:
        """candidate是否处于ancestor的子树中（沿父链向上查找）"""
        parents = {p.id: p.parent_id for p in await self.permission_repository.get_all_nodes()}
        visited = set()
        current_id: Optional[int] = candidate_id
        while current_id is not None and current_id not in visited:
            if current_id == ancestor_id:
                return True
            visited.add(current_id)
            current_id = parents.get(current_id)
        return False
