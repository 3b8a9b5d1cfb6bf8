"""
关联关系分配服务（角色→权限、用户→角色）
backend/mes_sys/services/sys_assignment_service.py

整体替换语义：传入的ID集合即为最终关联集合
1. 所属方存在性校验、目标ID有效性校验、读取现有关联、差异计算、删除、新增，全部在同一事务内完成
2. 只删除被移除的关联、只新增新增的关联，未变化的关联行（含create_by/create_time）保持不动
. 传入session时加入调用方事务（如创建角色/用户时的初始分配），由调用方提交或回滚
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Optional, Set, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from mes_sys.core.config import DEFAULT_TZ
from mes_sys.core.exceptions import AppException, AssignmentFailed, BadRequest, ResourceNotFound
from mes_sys.repositories.base_repository import BaseRepository
from mes_sys.repositories.sys_association_repository import AssociationRepository

logger = logging.getLogger(__name__)


def diff_ids(existing: Iterable[Any], desired: Iterable[Any]) -> Tuple[Set[Any], Set[Any]]:
    """差异计算：返回 (待新增, 待删除)"""
    existing_set = set(existing)
    desired_set = set(desired)
    return desired_set - existing_set, existing_set - desired_set


@dataclass
class AssignmentResult:
    added: List[Any] = field(default_factory=list)
    removed: List[Any] = field(default_factory=list)
    unchanged: List[Any] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


class AssignmentService:
    """关联关系写入的唯一入口"""

    def __init__(
            self,
            role_repository: BaseRepository,
            permission_repository: BaseRepository,
            user_repository: BaseRepository,
            role_permission_repository: AssociationRepository,
            user_role_repository: AssociationRepository):
        self.role_repository = role_repository
        self.permission_repository = permission_repository
        self.user_repository = user_repository
        self.role_permission_repository = role_permission_repository
        self.user_role_repository = user_role_repository

    # ------------------------------
    # 核心业务：整体替换
    # ------------------------------
    async def assign_permissions(
            self,
            role_id: int,
            permission_ids: Iterable[int],
            actor_id: Optional[int] = None,
            session: Optional[AsyncSession] = None) -> AssignmentResult:
        """为角色分配权限（整体替换，传入session时加入调用方事务）"""
        return await self._replace(
            owner_label="角色",
            target_label="权限",
            owner_id=role_id,
            desired_ids=permission_ids,
            actor_id=actor_id,
            owner_repository=self.role_repository,
            target_repository=self.permission_repository,
            association=self.role_permission_repository,
            session=session,
        )

    async def assign_roles(
            self,
            user_id: int,
            role_ids: Iterable[int],
            actor_id: Optional[int] = None,
            session: Optional[AsyncSession] = None) -> AssignmentResult:
        """为用户分配角色（整体替换，传入session时加入调用方事务）"""
        return await self._replace(
            owner_label="用户",
            target_label="角色",
            owner_id=user_id,
            desired_ids=role_ids,
            actor_id=actor_id,
            owner_repository=self.user_repository,
            target_repository=self.role_repository,
            association=self.user_role_repository,
            session=session,
        )

    # ------------------------------
    # 基础业务：查询关联
    # ------------------------------
    async def get_permission_ids(self, role_id: int) -> List[int]:
        return sorted(await self.role_permission_repository.get_target_ids(role_id))

    async def get_role_ids(self, user_id: int) -> List[int]:
        return sorted(await self.user_role_repository.get_target_ids(user_id))

    async def has_role(self, user_id: int, role_id: int) -> bool:
        return await self.user_role_repository.exists(user_id, role_id)

    # ==================== 辅助方法 ====================

    async def _replace(
            self,
            owner_label: str,
            target_label: str,
            owner_id: Any,
            desired_ids: Iterable[Any],
            actor_id: Optional[int],
            owner_repository: BaseRepository,
            target_repository: BaseRepository,
            association: AssociationRepository,
            session: Optional[AsyncSession] = None) -> AssignmentResult:
        desired = set(desired_ids)

        async def action(session: AsyncSession) -> AssignmentResult:
            # 1. 所属方存在
            owner = await owner_repository.get_by_id(owner_id, session=session)
            if owner is None:
                raise ResourceNotFound(detail=f"{owner_label}ID '{owner_id}' 不存在")

            # 2. 目标ID有效
            valid_ids = await target_repository.get_existing_ids(list(desired), session=session)
            invalid_ids = desired - valid_ids
            if invalid_ids:
                raise BadRequest(
                    detail=f"无效的{target_label}ID: {', '.join(str(i) for i in sorted(invalid_ids))}"
                )

            # 3. 差异计算
            existing = await association.get_target_ids(owner_id, session=session)
            to_add, to_remove = diff_ids(existing, desired)

            # 4. 先删后增
            await association.delete_pairs(owner_id, to_remove, session)
            await association.insert_pairs(
                owner_id,
                sorted(to_add),
                actor_id,
                datetime.now(DEFAULT_TZ).replace(tzinfo=None),
                session
            )
            return AssignmentResult(
                added=sorted(to_add),
                removed=sorted(to_remove),
                unchanged=sorted(existing & desired),
            )

        try:
            if session is not None:
                result = await action(session)
            else:
                result = await association.run_in_transaction(action)
        except AppException:
            raise
        except Exception as e:
            logger.error(
                f"{owner_label}{target_label}分配失败，已回滚 | {owner_label}ID：{owner_id} | 错误：{e}",
                extra={"owner_id": owner_id, "actor_id": actor_id}
            )
            raise AssignmentFailed(detail=f"{owner_label} '{owner_id}' 的{target_label}分配失败: {e}") from e

        logger.info(
            f"{owner_label}{target_label}分配完成 | {owner_label}ID：{owner_id} | "
            f"新增：{result.added} | 移除：{result.removed}",
            extra={"owner_id": owner_id, "actor_id": actor_id, "added": result.added, "removed": result.removed}
        )
        return result
