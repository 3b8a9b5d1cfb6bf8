"""
仓储层基类
backend/mes_sys/repositories/base_repository.py

标准Repo层实现：
1. 注入会话工厂，自主创建事务会话
2. 事务上下文统一管理会话生命周期（创建→提交/回滚→关闭）
3. 写方法可接收外部session，与调用方共用同一事务；不传则自开事务
4. 纯DB操作，无业务逻辑
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, Generic, List, Optional, Type, TypeVar, Union

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlmodel import select

ModelT = TypeVar("ModelT")
R = TypeVar("R")


class SessionRepository:
    """会话/事务管理（与具体表无关）"""

    def __init__(self, async_session_factory: sessionmaker):
        self.async_session_factory = async_session_factory

    # ------------------------------
    # 核心：标准异步事务上下文
    # ------------------------------
    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        session: AsyncSession = self.async_session_factory()
        try:
            await session.begin()
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            raise e
        finally:
            await session.close()

    @asynccontextmanager
    async def session_scope(self, session: Optional[AsyncSession] = None) -> AsyncGenerator[AsyncSession, None]:
        """传入session则复用（由调用方提交），否则新开事务"""
        if session is not None:
            yield session
            return
        async with self.transaction() as own_session:
            yield own_session

    async def run_in_transaction(self, action: Callable[[AsyncSession], Awaitable[R]]) -> R:
        """在单个事务内执行action，任一步骤异常则整体回滚并向上抛出"""
        async with self.transaction() as session:
            return await action(session)


class BaseRepository(SessionRepository, Generic[ModelT]):
    """
    通用CRUD：get_by_id / get_all / find / add / update / delete
    带is_deleted字段的模型默认过滤已逻辑删除记录，delete为逻辑删除
    """
    model: Type[ModelT]

    def _alive_criteria(self) -> List[Any]:
        if hasattr(self.model, "is_deleted"):
            return [self.model.is_deleted == 0]
        return []

    def _default_order(self) -> List[Any]:
        if hasattr(self.model, "sort"):
            return [self.model.sort, self.model.id]
        return [self.model.id]

    # ------------------------------
    # 查询类方法
    # ------------------------------
    async def get_by_id(self, entity_id: Any, session: Optional[AsyncSession] = None) -> Optional[ModelT]:
        """根据ID获取（不含已逻辑删除）"""
        async with self.session_scope(session) as s:
            stmt = select(self.model).where(self.model.id == entity_id, *self._alive_criteria())
            result = await s.execute(stmt)
            return result.scalars().first()

    async def get_all(self, session: Optional[AsyncSession] = None) -> List[ModelT]:
        """获取全部（不含已逻辑删除），按显示顺序排序"""
        return await self.find(session=session)

    async def find(
        self,
        *criteria: Any,
        order_by: Optional[List[Any]] = None,
        session: Optional[AsyncSession] = None
    ) -> List[ModelT]:
        """按条件查询"""
        async with self.session_scope(session) as s:
            stmt = (
                select(self.model)
                .where(*self._alive_criteria(), *criteria)
                .order_by(*(order_by or self._default_order()))
            )
            result = await s.execute(stmt)
            return list(result.scalars().all())

    async def get_existing_ids(self, ids: List[Any], session: Optional[AsyncSession] = None) -> set:
        """校验ID有效性，返回存在的ID集合"""
        if not ids:
            return set()
        async with self.session_scope(session) as s:
            stmt = select(self.model.id).where(self.model.id.in_(list(ids)), *self._alive_criteria())
            result = await s.execute(stmt)
            return set(result.scalars().all())

    # ------------------------------
    # 写操作类方法
    # ------------------------------
    async def add(self, entity: Union[ModelT, Dict[str, Any]], session: Optional[AsyncSession] = None) -> ModelT:
        """新增，flush后即可拿到自增ID"""
        if isinstance(entity, dict):
            entity = self.model(**entity)
        async with self.session_scope(session) as s:
            s.add(entity)
            await s.flush()
            await s.refresh(entity)
            return entity

    async def update(self, entity: ModelT, session: Optional[AsyncSession] = None) -> ModelT:
        """更新（实体可来自已关闭的会话）"""
        async with self.session_scope(session) as s:
            merged = await s.merge(entity)
            await s.flush()
            await s.refresh(merged)
            return merged

    async def delete(self, entity: ModelT, session: Optional[AsyncSession] = None) -> None:
        """删除：带is_deleted字段的模型为逻辑删除，否则物理删除"""
        async with self.session_scope(session) as s:
            merged = await s.merge(entity)
            if hasattr(self.model, "is_deleted"):
                merged.is_deleted = 1
            else:
                await s.delete(merged)
            await s.flush()
