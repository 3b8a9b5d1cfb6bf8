# mes_sys/services/sys_role_service.py
import logging
from typing import List, Optional

from mes_sys.core.exceptions import BadRequest, ResourceNotFound
from mes_sys.enums.sys_status import RoleKind, Status
from mes_sys.models import SysPermission, SysRole
from mes_sys.repositories.sys_association_repository import AssociationRepository
from mes_sys.repositories.sys_permission_repository import PermissionRepository
from mes_sys.repositories.sys_role_repository import RoleRepository
from mes_sys.schemas.sys_role import RoleCreate, RoleUpdate
from mes_sys.services.sys_assignment_service import AssignmentResult, AssignmentService

logger = logging.getLogger(__name__)


class RoleService:
    """角色Service层：仅管业务逻辑"""
    def __init__(
            self,
            role_repository: RoleRepository,
            permission_repository: PermissionRepository,
            role_permission_repository: AssociationRepository,
            user_role_repository: AssociationRepository,
            assignment_service: AssignmentService):
        self.role_repository = role_repository
        self.permission_repository = permission_repository
        self.role_permission_repository = role_permission_repository
        self.user_role_repository = user_role_repository
        self.assignment_service = assignment_service

    # ------------------------------
    # 核心业务：创建角色
    # ------------------------------
    async def create_role(self, role_in: RoleCreate, actor_id: Optional[int] = None) -> SysRole:
        """创建角色（含初始权限分配）"""
        # 1. 业务校验1：角色编码唯一性
        existing_role = await self.role_repository.get_by_code(role_in.code, include_deleted=True)
        if existing_role:
            raise BadRequest(detail=f"角色编码 '{role_in.code}' 已存在")

        # 2. 业务校验2：权限ID有效性（若传了权限），校验通过后才创建角色
        if role_in.permission_ids:
            valid_perm_ids = await self.permission_repository.get_existing_ids(role_in.permission_ids)
            invalid_ids = set(role_in.permission_ids) - valid_perm_ids
            if invalid_ids:
                raise BadRequest(detail=f"无效的权限ID: {', '.join(str(i) for i in sorted(invalid_ids))}")

        # 3. 创建角色与分配初始权限在同一事务内，分配失败时角色一并回滚
        role_data = role_in.model_dump(exclude={"permission_ids"})
        role_data.update(kind=int(role_in.kind), create_by=actor_id, update_by=actor_id)
        async with self.role_repository.transaction() as session:
            new_role = await self.role_repository.add(role_data, session)
            if role_in.permission_ids:
                await self.assignment_service.assign_permissions(
                    new_role.id, role_in.permission_ids, actor_id, session=session
                )

        logger.info(f"角色创建成功 | ID：{new_role.id} | 编码：{new_role.code}")
        return new_role

    # ------------------------------
    # 基础业务：查询角色
    # ------------------------------
    async def get_role_by_id(self, role_id: int) -> SysRole:
        """按ID查询角色（不存在则抛异常）"""
        role = await self.role_repository.get_by_id(role_id)
        if not role:
            raise ResourceNotFound(detail=f"角色ID '{role_id}' 不存在")
        return role

    async def get_role_by_code(self, code: str) -> Optional[SysRole]:
        """按编码查询角色（不存在返回None）"""
        return await self.role_repository.get_by_code(code)

    async def list_roles(self, offset: int = 0, limit: int = 100) -> List[SysRole]:
        """分页查询角色列表"""
        return await self.role_repository.list_all(offset=offset, limit=limit)

    async def count_roles(self) -> int:
        return await self.role_repository.count_total()

    async def get_system_roles(self) -> List[SysRole]:
        return await self.role_repository.get_by_kind(RoleKind.SYSTEM)

    async def get_business_roles(self) -> List[SysRole]:
        return await self.role_repository.get_by_kind(RoleKind.BUSINESS)

    async def get_role_options(self) -> List[dict]:
        """
        获取角色下拉选项

        返回格式：
        [
            {
                "value": 角色ID,
                "label": "角色名称",
                "tag": "角色编码"
            }
        ]
        """
        roles = await self.role_repository.get_options()
        return [{"value": role.id, "label": role.name, "tag": role.code} for role in roles]

    async def get_role_permissions(self, role_id: int) -> List[SysPermission]:
        """角色已分配的启用权限"""
        await self.get_role_by_id(role_id)
        permission_ids = await self.role_permission_repository.get_target_ids(role_id)
        return await self.permission_repository.get_active_by_ids(permission_ids)

    # ------------------------------
    # 基础业务：更新角色
    # ------------------------------
    async def assign_permissions(
            self,
            role_id: int,
            permission_ids: List[int],
            actor_id: Optional[int] = None) -> AssignmentResult:
        """为角色分配权限（整体替换）"""
        return await self.assignment_service.assign_permissions(role_id, permission_ids, actor_id)

    async def update_role(self, role_id: int, role_update: RoleUpdate, actor_id: Optional[int] = None) -> SysRole:
        """更新角色信息"""
        # 1. 业务校验1：角色存在
        role = await self.get_role_by_id(role_id)

        # 2. 业务校验2：角色编码唯一性（若更新编码）
        update_data = role_update.model_dump(exclude_unset=True)
        new_code = update_data.get("code")
        if new_code and new_code != role.code:
            existing_role = await self.role_repository.get_by_code(new_code, include_deleted=True)
            if existing_role and existing_role.id != role_id:
                raise BadRequest(detail=f"角色编码 '{new_code}' 已存在")

        # 3. 调用Repo更新
        for key, value in update_data.items():
            setattr(role, key, value)
        role.update_by = actor_id
        return await self.role_repository.update(role)

    async def set_status(self, role_id: int, status: int, actor_id: Optional[int] = None) -> SysRole:
        """启用/停用角色（停用后该角色的权限不再计入用户有效权限）"""
        if status not in (Status.ACTIVE, Status.INACTIVE):
            raise BadRequest(detail=f"无效的状态值: {status}")
        role = await self.get_role_by_id(role_id)
        role.status = int(status)
        role.update_by = actor_id
        return await self.role_repository.update(role)

    # ------------------------------
    # 基础业务：删除角色
    # ------------------------------
    async def delete_role(self, role_id: int, actor_id: Optional[int] = None) -> None:
        """删除角色（系统角色不可删除；需校验是否被用户使用）"""
        # 1. 业务校验1：角色存在
        role = await self.get_role_by_id(role_id)

        # 2. 业务校验2：系统内置角色不可删除
        if role.kind == RoleKind.SYSTEM:
            raise BadRequest(detail=f"系统角色 '{role.code}' 不可删除")

        # 3. 业务校验3：角色未被用户使用
        if await self.user_role_repository.check_target_in_use(role_id):
            raise BadRequest(detail=f"角色 '{role.code}' 已分配给用户，无法删除")

        # 4. 同一事务内清理角色权限并逻辑删除
        role.update_by = actor_id
        async with self.role_repository.transaction() as session:
            await self.role_permission_repository.delete_by_owner(role_id, session)
            await self.role_repository.delete(role, session)
        logger.info(f"角色已删除 | ID：{role_id} | 编码：{role.code}")
