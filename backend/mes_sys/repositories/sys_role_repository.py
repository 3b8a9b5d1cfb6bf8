"""
角色模块数据访问层
backend/mes_sys/repositories/sys_role_repository.py
"""
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, func

from mes_sys.models import SysRole
from mes_sys.repositories.base_repository import BaseRepository


class RoleRepository(BaseRepository[SysRole]):
    """角色Repo层"""
    model = SysRole

    async def get_by_code(
        self,
        code: str,
        include_deleted: bool = False,
        session: Optional[AsyncSession] = None
    ) -> Optional[SysRole]:
        """按角色编码查询（编码唯一，唯一性校验时include_deleted=True）"""
        criteria = [] if include_deleted else self._alive_criteria()
        async with self.session_scope(session) as s:
            stmt = select(SysRole).where(SysRole.code == code, *criteria)
            result = await s.execute(stmt)
            return result.scalars().first()

    async def get_by_kind(self, kind: int) -> List[SysRole]:
        """按角色类型查询启用的角色(1:系统角色,2:业务角色)"""
        return await self.find(SysRole.kind == kind, SysRole.status == 1)

    async def get_active_by_ids(
        self,
        role_ids: Iterable[int],
        session: Optional[AsyncSession] = None
    ) -> List[SysRole]:
        """按ID批量查询启用的角色"""
        role_ids = list(role_ids)
        if not role_ids:
            return []
        return await self.find(SysRole.id.in_(role_ids), SysRole.status == 1, session=session)

    async def list_all(self, offset: int = 0, limit: int = 100) -> List[SysRole]:
        """分页查询角色列表"""
        async with self.transaction() as session:
            stmt = (
                select(SysRole)
                .where(SysRole.is_deleted == 0)
                .offset(offset)
                .limit(limit)
                .order_by(SysRole.sort, SysRole.id)
            )
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def count_total(self) -> int:
        """查询角色总数"""
        async with self.transaction() as session:
            stmt = select(func.count(SysRole.id)).where(SysRole.is_deleted == 0)
            result = await session.execute(stmt)
            return result.scalar() or 0

    async def get_options(self) -> List[SysRole]:
        """获取角色选项（启用状态且未删除的角色）"""
        return await self.find(SysRole.status == 1)
