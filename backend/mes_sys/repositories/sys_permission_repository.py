"""
权限模块数据访问层
backend/mes_sys/repositories/sys_permission_repository.py
"""
import logging
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from mes_sys.models import SysPermission
from mes_sys.repositories.tree_repository import TreeRepository

logger = logging.getLogger(__name__)


class PermissionRepository(TreeRepository[SysPermission]):
    """权限Repo层"""
    model = SysPermission

    async def get_by_kind(self, kind: int) -> List[SysPermission]:
        """按权限类型查询启用的权限(1:菜单,2:按钮,3:数据)"""
        return await self.find(SysPermission.kind == kind, SysPermission.status == 1)

    async def get_active_by_ids(
        self,
        permission_ids: Iterable[int],
        session: Optional[AsyncSession] = None
    ) -> List[SysPermission]:
        """按ID批量查询启用的权限，按显示顺序排序"""
        permission_ids = list(permission_ids)
        if not permission_ids:
            logger.debug("No permission IDs provided, returning empty list")
            return []
        return await self.find(
            SysPermission.id.in_(permission_ids),
            SysPermission.status == 1,
            session=session
        )
