"""
用户模块数据访问层
backend/mes_sys/repositories/sys_user_repository.py
"""
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, func

from mes_sys.models import SysUser
from mes_sys.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[SysUser]):
    """用户Repo层：纯DB操作，无业务逻辑"""
    model = SysUser

    async def get_by_username(
        self,
        username: str,
        include_deleted: bool = False,
        session: Optional[AsyncSession] = None
    ) -> Optional[SysUser]:
        """按用户名查询用户（用户名唯一，唯一性校验时include_deleted=True）"""
        criteria = [] if include_deleted else self._alive_criteria()
        async with self.session_scope(session) as s:
            stmt = select(SysUser).where(SysUser.username == username, *criteria)
            result = await s.execute(stmt)
            return result.scalars().first()

    async def list_all(self, offset: int = 0, limit: int = 100) -> List[SysUser]:
        """分页查询用户列表"""
        async with self.transaction() as session:
            stmt = (
                select(SysUser)
                .where(SysUser.is_deleted == 0)
                .offset(offset)
                .limit(limit)
                .order_by(SysUser.id)
            )
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def count_total(self) -> int:
        """查询用户总数（仅计数）"""
        async with self.transaction() as session:
            stmt = select(func.count(SysUser.id)).where(SysUser.is_deleted == 0)
            result = await session.execute(stmt)
            return result.scalar() or 0
