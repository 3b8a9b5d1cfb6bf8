# mes_sys/services/sys_user_service.py
import logging
from datetime import datetime
from typing import List, Optional

from mes_sys.core.config import DEFAULT_TZ
from mes_sys.core.exceptions import BadRequest, ResourceNotFound
from mes_sys.core.security import get_password_hash, verify_password
from mes_sys.enums.sys_status import Status
from mes_sys.models import SysUser
from mes_sys.repositories.sys_association_repository import AssociationRepository
from mes_sys.repositories.sys_dept_repository import DeptRepository
from mes_sys.repositories.sys_role_repository import RoleRepository
from mes_sys.repositories.sys_user_repository import UserRepository
from mes_sys.schemas.sys_user import UpdatePassword, UserCreate, UserUpdate
from mes_sys.services.sys_assignment_service import AssignmentResult, AssignmentService

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(DEFAULT_TZ).replace(tzinfo=None)


class UserService:
    """用户Service层：仅管业务逻辑"""

    def __init__(
            self,
            user_repository: UserRepository,
            role_repository: RoleRepository,
            dept_repository: DeptRepository,
            user_role_repository: AssociationRepository,
            assignment_service: AssignmentService):
        self.user_repository = user_repository
        self.role_repository = role_repository
        self.dept_repository = dept_repository
        self.user_role_repository = user_role_repository
        self.assignment_service = assignment_service

    # ------------------------------
    # 核心业务：创建用户
    # ------------------------------
    async def create_user(self, user_in: UserCreate, actor_id: Optional[int] = None) -> SysUser:
        """创建用户（含初始角色分配）"""
        # 1. 业务校验1：用户名唯一
        if await self.user_repository.get_by_username(user_in.username, include_deleted=True):
            raise BadRequest(detail=f"用户名 '{user_in.username}' 已存在")

        # 2. 业务校验2：部门存在
        if user_in.dept_id is not None and not await self.dept_repository.get_by_id(user_in.dept_id):
            raise BadRequest(detail=f"部门ID '{user_in.dept_id}' 不存在")

        # 3. 业务校验3：角色ID有效
        if user_in.role_ids:
            valid_role_ids = await self.role_repository.get_existing_ids(user_in.role_ids)
            invalid_ids = set(user_in.role_ids) - valid_role_ids
            if invalid_ids:
                raise BadRequest(detail=f"无效的角色ID: {', '.join(str(i) for i in sorted(invalid_ids))}")

        # 4. 密码加密+创建
        user_data = user_in.model_dump(exclude={"password", "role_ids"})
        user_data.update(
            password=get_password_hash(user_in.password),
            password_update_time=_now(),
            create_by=actor_id,
            update_by=actor_id,
        )

        # 5. 创建用户并分配初始角色（同一事务）
        async with self.user_repository.transaction() as session:
            user = await self.user_repository.add(user_data, session)
            if user_in.role_ids:
                await self.assignment_service.assign_roles(user.id, user_in.role_ids, actor_id, session=session)

        logger.info(f"用户创建成功 | ID：{user.id} | 用户名：{user.username}")
        return user

    # ------------------------------
    # 基础业务：查询用户
    # ------------------------------
    async def get_user_by_id(self, user_id: int) -> SysUser:
        """按ID查询用户（不存在则抛异常）"""
        user = await self.user_repository.get_by_id(user_id)
        if not user:
            raise ResourceNotFound(detail=f"用户ID '{user_id}' 不存在")
        return user

    async def get_by_username(self, username: str) -> Optional[SysUser]:
        return await self.user_repository.get_by_username(username)

    async def list_users(self, offset: int = 0, limit: int = 100) -> List[SysUser]:
        return await self.user_repository.list_all(offset=offset, limit=limit)

    # ------------------------------
    # 基础业务：更新用户
    # ------------------------------
    async def update_user(self, user_id: int, user_update: UserUpdate, actor_id: Optional[int] = None) -> SysUser:
        user = await self.get_user_by_id(user_id)
        update_data = user_update.model_dump(exclude_unset=True)

        new_dept_id = update_data.get("dept_id")
        if new_dept_id is not None and not await self.dept_repository.get_by_id(new_dept_id):
            raise BadRequest(detail=f"部门ID '{new_dept_id}' 不存在")

        for key, value in update_data.items():
            setattr(user, key, value)
        user.update_by = actor_id
        return await self.user_repository.update(user)

    async def set_status(self, user_id: int, status: int, actor_id: Optional[int] = None) -> SysUser:
        """启用/停用用户"""
        if status not in (Status.ACTIVE, Status.INACTIVE):
            raise BadRequest(detail=f"无效的状态值: {status}")
        user = await self.get_user_by_id(user_id)
        user.status = int(status)
        user.update_by = actor_id
        return await self.user_repository.update(user)

    async def change_password(self, user_id: int, password_in: UpdatePassword) -> SysUser:
        """修改个人密码（带旧密码校验）"""
        user = await self.get_user_by_id(user_id)
        if user.status != Status.ACTIVE:
            raise BadRequest(detail=f"用户 '{user.username}' 已停用，无法修改密码")
        if not verify_password(password_in.current_password, user.password):
            raise BadRequest(detail="原密码错误")
        if password_in.current_password == password_in.new_password:
            raise BadRequest(detail="新密码不能与原密码相同")

        user.password = get_password_hash(password_in.new_password)
        user.password_update_time = _now()
        user.update_by = user_id
        return await self.user_repository.update(user)

    async def reset_password(self, user_id: int, new_password: str, actor_id: Optional[int] = None) -> SysUser:
        """管理员重置密码（不校验旧密码）"""
        if len(new_password) < 6:
            raise BadRequest(detail="密码长度不能少于6位")
        user = await self.get_user_by_id(user_id)
        user.password = get_password_hash(new_password)
        user.password_update_time = _now()
        user.update_by = actor_id
        return await self.user_repository.update(user)

    async def assign_roles(
            self,
            user_id: int,
            role_ids: List[int],
            actor_id: Optional[int] = None) -> AssignmentResult:
        """为用户分配角色（整体替换）"""
        return await self.assignment_service.assign_roles(user_id, role_ids, actor_id)

    # ------------------------------
    # 基础业务：删除用户
    # ------------------------------
    async def delete_user(self, user_id: int, actor_id: Optional[int] = None) -> None:
        """删除用户（逻辑删除，同时清理用户角色关联）"""
        if actor_id is not None and actor_id == user_id:
            raise BadRequest(detail="不能删除当前登录用户")
        user = await self.get_user_by_id(user_id)
        user.update_by = actor_id
        async with self.user_repository.transaction() as session:
            await self.user_role_repository.delete_by_owner(user_id, session)
            await self.user_repository.delete(user, session)
        logger.info(f"用户已删除 | ID：{user_id} | 用户名：{user.username}")
