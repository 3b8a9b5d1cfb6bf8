"""
树路径（tree_path）维护服务
backend/mes_sys/services/tree_path_service.py

tree_path 格式：根节点为 "id"，子节点为 "父节点tree_path,id"，如 "1,3,2"
部门树、权限树各持有一个TreePathMaintainer实例，tree_path只允许通过本服务写入：
1. recompute_path：父节点变更后重算目标节点及其全部子孙节点
2. stamp_new_node：新建节点时在创建事务内写入初始路径

级联更新逐节点独立提交：某节点写入失败时记录失败并跳过其子树，兄弟节点继续处理，
调用方根据返回的PathCascadeReport决定是否重试
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mes_sys.core.exceptions import DanglingReference, ResourceNotFound
from mes_sys.repositories.tree_repository import TreeRepository

logger = logging.getLogger(__name__)

PATH_SEPARATOR = ","


def compute_path(node_id: Any, parent_path: Optional[str] = None) -> str:
    """拼接节点路径，parent_path为空表示根节点"""
    if not parent_path:
        return str(node_id)
    return f"{parent_path}{PATH_SEPARATOR}{node_id}"


@dataclass
class PathFailure:
    node_id: Any
    error: str
    # 因本节点失败而未处理的子孙节点
    skipped_ids: List[Any] = field(default_factory=list)


@dataclass
class PathCascadeReport:
    """一次路径重算的结果"""
    node_id: Any
    updated: Dict[Any, str] = field(default_factory=dict)
    failures: List[PathFailure] = field(default_factory=list)
    dangling: List[DanglingReference] = field(default_factory=list)
    cycle_ids: List[Any] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class TreePathMaintainer:
    """tree_path的唯一写入方"""

    def __init__(self, repository: TreeRepository):
        self.repository = repository

    @property
    def _label(self) -> str:
        return self.repository.model.__tablename__

    async def recompute_path(self, node_id: Any) -> PathCascadeReport:
        """
        重算节点路径并级联到全部子孙节点

        - 目标节点不存在：抛出ResourceNotFound
        - 父节点不存在（悬空引用）：按根节点处理，路径为str(id)，并在报告中记录DanglingReference
        - 子孙遍历使用显式栈，重复访问的节点视为环，记录后不再下探
        """
        # 1. 读取快照，建立 id → 节点 与 parent_id → [子节点id] 索引
        nodes = await self.repository.get_all_nodes()
        index = {node.id: node for node in nodes}
        children_index: Dict[Any, List[Any]] = {}
        for node in nodes:
            if node.parent_id is not None:
                children_index.setdefault(node.parent_id, []).append(node.id)

        target = index.get(node_id)
        if target is None:
            raise ResourceNotFound(detail=f"{self._label} 节点ID '{node_id}' 不存在")

        report = PathCascadeReport(node_id=node_id)

        # 2. 目标节点路径
        root_path = self._resolve_path(target, index, report)

        # 3. 显式栈深度优先级联
        visited = set()
        stack: List[Tuple[Any, str]] = [(node_id, root_path)]
        while stack:
            current_id, path = stack.pop()
            if current_id in visited:
                if current_id not in report.cycle_ids:
                    report.cycle_ids.append(current_id)
                logger.warning(
                    f"路径级联发现循环引用，已跳过 | 表：{self._label} | 节点ID：{current_id}",
                    extra={"table": self._label, "node_id": current_id}
                )
                continue
            visited.add(current_id)

            try:
                affected = await self.repository.update_path(current_id, path)
            except SQLAlchemyError as e:
                skipped = self._collect_subtree(current_id, children_index, visited)
                report.failures.append(PathFailure(node_id=current_id, error=str(e), skipped_ids=skipped))
                logger.error(
                    f"tree_path写入失败，跳过其子树 | 表：{self._label} | 节点ID：{current_id} | 错误：{e}",
                    extra={"table": self._label, "node_id": current_id, "skipped_ids": skipped}
                )
                continue

            if not affected:
                skipped = self._collect_subtree(current_id, children_index, visited)
                report.failures.append(
                    PathFailure(node_id=current_id, error="node no longer exists", skipped_ids=skipped)
                )
                logger.warning(f"tree_path写入未命中记录 | 表：{self._label} | 节点ID：{current_id}")
                continue

            report.updated[current_id] = path
            for child_id in reversed(children_index.get(current_id, [])):
                stack.append((child_id, compute_path(child_id, path)))

        logger.info(
            f"tree_path重算完成 | 表：{self._label} | 起始节点：{node_id} | "
            f"更新：{len(report.updated)} | 失败：{len(report.failures)}",
            extra={"table": self._label, "node_id": node_id, "updated": len(report.updated)}
        )
        return report

    async def stamp_new_node(self, session: AsyncSession, node: Any) -> Optional[DanglingReference]:
        """
        新建节点写入初始路径（在创建事务内调用，node需已flush拿到ID）
        返回悬空引用诊断（父节点不存在时），正常情况返回None
        """
        dangling = None
        parent_path = None
        if node.parent_id is not None:
            parent = await self.repository.get_by_id(node.parent_id, session=session)
            if parent is None:
                dangling = DanglingReference(node.id, node.parent_id)
                logger.warning(
                    f"新建节点父节点不存在，按根节点处理 | 表：{self._label} | 节点ID：{node.id} | 父节点ID：{node.parent_id}",
                    extra={"table": self._label, "node_id": node.id, "parent_id": node.parent_id}
                )
            else:
                parent_path = parent.tree_path

        node.tree_path = compute_path(node.id, parent_path)
        await session.flush()
        await session.refresh(node)
        return dangling

    # ==================== 辅助方法 ====================

    def _resolve_path(self, target: Any, index: Dict[Any, Any], report: PathCascadeReport) -> str:
        if target.parent_id is None:
            return compute_path(target.id)
        if self._in_cycle(target, index):
            report.cycle_ids.append(target.id)
            logger.warning(
                f"节点位于循环引用中，按根节点处理 | 表：{self._label} | 节点ID：{target.id}",
                extra={"table": self._label, "node_id": target.id}
            )
            return compute_path(target.id)

        parent = index.get(target.parent_id)
        if parent is None:
            report.dangling.append(DanglingReference(target.id, target.parent_id))
            logger.warning(
                f"父节点不存在，按根节点处理 | 表：{self._label} | 节点ID：{target.id} | 父节点ID：{target.parent_id}",
                extra={"table": self._label, "node_id": target.id, "parent_id": target.parent_id}
            )
            return compute_path(target.id)
        return compute_path(target.id, parent.tree_path)

    @staticmethod
    def _in_cycle(target: Any, index: Dict[Any, Any]) -> bool:
        """沿父链向上查找，回到自身即为环"""
        visited = set()
        current_id = target.parent_id
        while current_id is not None and current_id not in visited:
            if current_id == target.id:
                return True
            visited.add(current_id)
            parent = index.get(current_id)
            current_id = parent.parent_id if parent is not None else None
        return False

    @staticmethod
    def _collect_subtree(node_id: Any, children_index: Dict[Any, List[Any]], visited: set) -> List[Any]:
        """收集失败节点下尚未处理的子孙节点ID，并标记为已访问"""
        skipped = []
        stack = list(children_index.get(node_id, []))
        while stack:
            child_id = stack.pop()
            if child_id in visited:
                continue
            visited.add(child_id)
            skipped.append(child_id)
            stack.extend(children_index.get(child_id, []))
        return skipped
