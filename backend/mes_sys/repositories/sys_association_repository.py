"""
关联表数据访问层（用户-角色、角色-权限）
backend/mes_sys/repositories/sys_association_repository.py

同一个类按 关联表 + 所属方列 + 目标方列 参数化，容器中分别实例化：
- user_role_repository：sys_user_role(user_id → role_id)
- role_permission_repository：sys_role_permission(role_id → permission_id)
关联行只由AssignmentService写入，写方法需传入调用方事务的session
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy import Table, delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from mes_sys.repositories.base_repository import SessionRepository


class AssociationRepository(SessionRepository):
    """多对多关联表Repo层"""

    def __init__(self, async_session_factory: sessionmaker, table: Table, owner_column: str, target_column: str):
        super().__init__(async_session_factory)
        self.table = table
        self.owner_col = table.c[owner_column]
        self.target_col = table.c[target_column]

    # ------------------------------
    # 查询类方法
    # ------------------------------
    async def get_target_ids(self, owner_id: Any, session: Optional[AsyncSession] = None) -> Set[int]:
        """查询所属方当前关联的目标ID集合"""
        async with self.session_scope(session) as s:
            stmt = select(self.target_col).where(self.owner_col == owner_id)
            result = await s.execute(stmt)
            return set(result.scalars().all())

    async def get_target_ids_for_owners(
        self,
        owner_ids: Iterable[Any],
        session: Optional[AsyncSession] = None
    ) -> Set[int]:
        """查询多个所属方关联的目标ID并集（去重）"""
        owner_ids = list(owner_ids)
        if not owner_ids:
            return set()
        async with self.session_scope(session) as s:
            stmt = select(self.target_col).where(self.owner_col.in_(owner_ids)).distinct()
            result = await s.execute(stmt)
            return set(result.scalars().all())

    async def exists(self, owner_id: Any, target_id: Any) -> bool:
        async with self.transaction() as session:
            stmt = select(func.count()).select_from(self.table).where(
                self.owner_col == owner_id,
                self.target_col == target_id
            )
            result = await session.execute(stmt)
            return (result.scalar() or 0) > 0

    async def check_target_in_use(self, target_id: Any) -> bool:
        """检查目标是否仍被关联（如角色是否已分配给用户）"""
        async with self.transaction() as session:
            stmt = select(func.count()).select_from(self.table).where(self.target_col == target_id)
            result = await session.execute(stmt)
            return (result.scalar() or 0) > 0

    async def get_rows(self, owner_id: Any) -> List[Dict[str, Any]]:
        """查询所属方的完整关联行（含create_by/create_time审计字段）"""
        async with self.transaction() as session:
            stmt = select(self.table).where(self.owner_col == owner_id).order_by(self.target_col)
            result = await session.execute(stmt)
            return [dict(row) for row in result.mappings().all()]

    # ------------------------------
    # 写操作类方法
    # ------------------------------
    async def delete_pairs(self, owner_id: Any, target_ids: Iterable[Any], session: AsyncSession) -> int:
        """删除指定的关联行，返回删除行数"""
        target_ids = list(target_ids)
        if not target_ids:
            return 0
        stmt = delete(self.table).where(
            self.owner_col == owner_id,
            self.target_col.in_(target_ids)
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def insert_pairs(
        self,
        owner_id: Any,
        target_ids: Iterable[Any],
        actor_id: Optional[int],
        created_at: datetime,
        session: AsyncSession
    ) -> int:
        """批量新增关联行，写入create_by/create_time"""
        rows = [
            {
                self.owner_col.key: owner_id,
                self.target_col.key: target_id,
                "create_by": actor_id,
                "create_time": created_at,
            }
            for target_id in target_ids
        ]
        if not rows:
            return 0
        await session.execute(insert(self.table), rows)
        return len(rows)

    async def delete_by_owner(self, owner_id: Any, session: AsyncSession) -> int:
        """删除所属方的全部关联（所属方被删除时调用）"""
        stmt = delete(self.table).where(self.owner_col == owner_id)
        result = await session.execute(stmt)
        return result.rowcount
