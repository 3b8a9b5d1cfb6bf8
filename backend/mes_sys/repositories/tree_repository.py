"""
树形数据仓储基类（部门、权限共用）
backend/mes_sys/repositories/tree_repository.py
模型需具备 id / parent_id / tree_path / sort / status / is_deleted 字段
"""
from typing import Any, List, Optional

from sqlalchemy import func, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from mes_sys.repositories.base_repository import BaseRepository, ModelT


class TreeRepository(BaseRepository[ModelT]):

    async def get_by_code(
        self,
        code: str,
        include_deleted: bool = False,
        session: Optional[AsyncSession] = None
    ) -> Optional[ModelT]:
        """根据编码获取（编码唯一，已逻辑删除的记录仍占用编码，唯一性校验需include_deleted=True）"""
        criteria = [] if include_deleted else self._alive_criteria()
        async with self.session_scope(session) as s:
            stmt = select(self.model).where(self.model.code == code, *criteria)
            result = await s.execute(stmt)
            return result.scalars().first()

    async def get_all_nodes(self, session: Optional[AsyncSession] = None) -> List[ModelT]:
        """获取全部节点（含停用，不含已删除），路径维护需要完整的父子关系"""
        return await self.find(session=session)

    async def get_enabled_nodes(self, session: Optional[AsyncSession] = None) -> List[ModelT]:
        """获取所有启用的节点（状态为1，未删除）"""
        return await self.find(self.model.status == 1, session=session)

    async def get_children(self, parent_id: Any) -> List[ModelT]:
        """获取指定父节点下启用的直接子节点（仅一级）"""
        return await self.find(self.model.parent_id == parent_id, self.model.status == 1)

    async def get_by_path_prefix(self, tree_path: str) -> List[ModelT]:
        """根据tree_path查找节点本身及全部子孙节点"""
        return await self.find(
            or_(self.model.tree_path == tree_path, self.model.tree_path.like(f"{tree_path},%"))
        )

    async def check_has_children(self, node_id: Any) -> bool:
        """检查是否有子节点（含停用）"""
        async with self.transaction() as session:
            stmt = select(func.count(self.model.id)).where(
                self.model.parent_id == node_id,
                *self._alive_criteria()
            )
            result = await session.execute(stmt)
            count = result.scalar() or 0
            return count > 0

    async def update_path(self, node_id: Any, tree_path: str, session: Optional[AsyncSession] = None) -> int:
        """写入tree_path，返回受影响行数（仅供TreePathMaintainer调用）"""
        async with self.session_scope(session) as s:
            stmt = (
                update(self.model)
                .where(self.model.id == node_id)
                .values(tree_path=tree_path)
                .execution_options(synchronize_session=False)
            )
            result = await s.execute(stmt)
            return result.rowcount
