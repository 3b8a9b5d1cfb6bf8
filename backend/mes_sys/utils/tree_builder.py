"""
树形结构组装工具
backend/mes_sys/utils/tree_builder.py
部门树、权限树共用：把带parent_id的扁平记录组装成森林（多根树）

核心规则：
1. 一次遍历建立 id → 节点 索引与 parent_id → [子节点id] 索引，迭代遍历，不递归
2. 子节点保持输入顺序（调用方通常已按sort排序）
3. parent_id指向不在输入集合中的记录 → 作为根节点（兼容处理），同时记录DanglingReference诊断
4. 自引用/环 → 按输入顺序取环上第一个节点作为根节点断环，记录cycle_ids
5. 不修改输入节点，无副作用，可并发调用
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Hashable, Iterable, Iterator, List, Optional, TypeVar

from mes_sys.core.exceptions import DanglingReference

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _id_of(node: Any) -> Hashable:
    return node.id


def _parent_id_of(node: Any) -> Optional[Hashable]:
    return node.parent_id


@dataclass
class TreeNode(Generic[T]):
    """树节点包装：持久化实体本身不携带children"""
    value: T
    children: List["TreeNode[T]"] = field(default_factory=list)

    def walk(self) -> Iterator["TreeNode[T]"]:
        """先序遍历当前节点及全部子孙节点"""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_dict(self, mapper: Callable[[T], Dict[str, Any]], children_key: str = "children") -> Dict[str, Any]:
        """
        转换为嵌套字典（前端树控件格式）
        叶子节点不输出children键
        """
        root = mapper(self.value)
        stack = [(self, root)]
        while stack:
            node, data = stack.pop()
            if not node.children:
                continue
            data[children_key] = []
            for child in node.children:
                child_data = mapper(child.value)
                data[children_key].append(child_data)
                stack.append((child, child_data))
        return root


@dataclass
class ForestResult(Generic[T]):
    roots: List[TreeNode[T]] = field(default_factory=list)
    dangling: List[DanglingReference] = field(default_factory=list)
    cycle_ids: List[Hashable] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        return not self.dangling and not self.cycle_ids


def assemble_forest(
    nodes: Iterable[T],
    parent_key_of: Callable[[T], Optional[Hashable]] = _parent_id_of,
    id_key_of: Callable[[T], Hashable] = _id_of,
) -> ForestResult[T]:
    """组装森林，并返回悬空引用/环的诊断信息"""
    result: ForestResult[T] = ForestResult()

    # 1. id → 树节点（重复id只保留第一条）
    index: Dict[Hashable, TreeNode[T]] = {}
    order: List[Hashable] = []
    for node in nodes:
        node_id = id_key_of(node)
        if node_id in index:
            logger.warning(f"树节点ID重复，忽略后出现的记录 | id：{node_id}")
            continue
        index[node_id] = TreeNode(value=node)
        order.append(node_id)

    # 2. parent_id → [子节点id]，同时识别根节点
    children_index: Dict[Hashable, List[Hashable]] = {}
    root_ids: List[Hashable] = []
    for node_id in order:
        parent_id = parent_key_of(index[node_id].value)
        if parent_id is None:
            root_ids.append(node_id)
        elif parent_id not in index:
            root_ids.append(node_id)
            result.dangling.append(DanglingReference(node_id, parent_id))
        else:
            children_index.setdefault(parent_id, []).append(node_id)

    # 3. 从根节点迭代挂载子节点
    visited: set = set()

    def attach(start_id: Hashable) -> None:
        visited.add(start_id)
        stack = [start_id]
        while stack:
            current_id = stack.pop()
            current = index[current_id]
            for child_id in children_index.get(current_id, []):
                if child_id in visited:
                    continue
                visited.add(child_id)
                current.children.append(index[child_id])
                stack.append(child_id)

    for root_id in root_ids:
        attach(root_id)
        result.roots.append(index[root_id])

    # 4. 未访问到的节点只可能处在环上（或挂在环下），断环后作为根节点
    for node_id in order:
        if node_id in visited:
            continue
        result.cycle_ids.append(node_id)
        attach(node_id)
        result.roots.append(index[node_id])

    if result.dangling:
        logger.warning(
            f"树构建发现悬空父节点引用，已按根节点处理 | 数量：{len(result.dangling)}",
            extra={"dangling": [(d.node_id, d.parent_id) for d in result.dangling]}
        )
    if result.cycle_ids:
        logger.warning(
            f"树构建发现循环引用，已断环 | 断环节点：{result.cycle_ids}",
            extra={"cycle_ids": result.cycle_ids}
        )
    return result


def build_forest(
    nodes: Iterable[T],
    parent_key_of: Callable[[T], Optional[Hashable]] = _parent_id_of,
    id_key_of: Callable[[T], Hashable] = _id_of,
) -> List[TreeNode[T]]:
    """扁平节点 → 森林（根节点列表）"""
    return assemble_forest(nodes, parent_key_of, id_key_of).roots
