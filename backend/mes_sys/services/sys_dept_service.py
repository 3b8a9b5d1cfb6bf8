# mes_sys/services/sys_dept_service.py
"""
部门服务层
"""
import logging
from typing import Any, Dict, List, Optional

from mes_sys.core.exceptions import BadRequest, CircularReference, ResourceNotFound
from mes_sys.enums.sys_status import Status
from mes_sys.models import SysDept
from mes_sys.repositories.sys_dept_repository import DeptRepository
from mes_sys.schemas.sys_dept import DeptCreate, DeptUpdate
from mes_sys.services.tree_path_service import PathCascadeReport, TreePathMaintainer
from mes_sys.utils.tree_builder import TreeNode, build_forest

logger = logging.getLogger(__name__)


class DeptService:
    """
    部门服务
    """

    def __init__(self, dept_repository: DeptRepository, path_maintainer: TreePathMaintainer):
        self.dept_repository = dept_repository
        self.path_maintainer = path_maintainer

    # ==================== 查询 ====================

    async def get_dept_by_id(self, dept_id: int) -> SysDept:
        """根据ID获取部门（不存在则抛异常）"""
        dept = await self.dept_repository.get_by_id(dept_id)
        if not dept:
            raise ResourceNotFound(detail=f"部门ID '{dept_id}' 不存在")
        return dept

    async def get_by_code(self, code: str) -> Optional[SysDept]:
        """根据部门编码查询（不存在返回None）"""
        return await self.dept_repository.get_by_code(code)

    async def get_dept_tree(self) -> List[TreeNode[SysDept]]:
        """获取启用部门组成的部门树"""
        depts = await self.dept_repository.get_enabled_nodes()
        return build_forest(depts)

    async def get_dept_options(self) -> List[Dict[str, Any]]:
        """
        获取部门下拉选项（树形结构）

        返回格式：
        [
            {
                "value": 部门ID,
                "label": "部门名称",
                "tag": "部门编码",
                "children": [...]
            }
        ]
        """
        tree = await self.get_dept_tree()
        return [node.to_dict(_dept_option) for node in tree]

    async def get_child_depts(self, parent_id: int) -> List[SysDept]:
        """获取直接子部门（仅一级）"""
        return await self.dept_repository.get_children(parent_id)

    async def get_dept_and_descendants(self, dept_id: int) -> List[SysDept]:
        """
        获取部门及其所有子孙部门（平铺列表）

        使用tree_path前缀匹配，避免逐级查询；部门不存在时返回空列表
        """
        dept = await self.dept_repository.get_by_id(dept_id)
        if not dept:
            return []
        return await self.dept_repository.get_by_path_prefix(dept.tree_path)

    # ==================== 写操作 ====================

    async def create_dept(self, dept_in: DeptCreate, actor_id: Optional[int] = None) -> SysDept:
        """创建部门，并在同一事务内写入tree_path"""
        # 1. 验证部门编码唯一性
        existing_dept = await self.dept_repository.get_by_code(dept_in.code, include_deleted=True)
        if existing_dept:
            raise BadRequest(detail=f"部门编码 '{dept_in.code}' 已存在")

        # 2. 验证父部门
        if dept_in.parent_id is not None:
            parent_dept = await self.dept_repository.get_by_id(dept_in.parent_id)
            if not parent_dept:
                raise BadRequest(detail=f"父部门ID '{dept_in.parent_id}' 不存在")
            if parent_dept.status != Status.ACTIVE:
                raise BadRequest(detail="父部门已停用，无法创建子部门")

        # 3. 创建部门
        async with self.dept_repository.transaction() as session:
            dept_data = dept_in.model_dump()
            dept_data.update(create_by=actor_id, update_by=actor_id)
            dept = await self.dept_repository.add(dept_data, session)
            await self.path_maintainer.stamp_new_node(session, dept)

        logger.info(f"部门创建成功 | ID：{dept.id} | 编码：{dept.code} | 路径：{dept.tree_path}")
        return dept

    async def update_dept(self, dept_id: int, dept_update: DeptUpdate, actor_id: Optional[int] = None) -> SysDept:
        """
        更新部门

        父部门变更时在更新提交后重算本部门及子孙部门的tree_path
        """
        # 1. 获取部门
        dept = await self.get_dept_by_id(dept_id)
        update_data = dept_update.model_dump(exclude_unset=True)

        # 2. 验证部门编码唯一性（如果修改）
        new_code = update_data.get("code")
        if new_code and new_code != dept.code:
            existing_dept = await self.dept_repository.get_by_code(new_code, include_deleted=True)
            if existing_dept:
                raise BadRequest(detail=f"部门编码 '{new_code}' 已存在")

        # 3. 验证父部门（如果修改）
        parent_changed = "parent_id" in update_data and update_data["parent_id"] != dept.parent_id
        if parent_changed and update_data["parent_id"] is not None:
            new_parent_id = update_data["parent_id"]
            if new_parent_id == dept_id:
                raise CircularReference(detail="不能将自己设为父部门")

            parent_dept = await self.dept_repository.get_by_id(new_parent_id)
            if not parent_dept:
                raise BadRequest(detail=f"父部门ID '{new_parent_id}' 不存在")
            if parent_dept.status != Status.ACTIVE:
                raise BadRequest(detail="父部门已停用，无法移入")

            if await self._is_circular_reference(dept_id, new_parent_id):
                raise CircularReference(detail="不能将子部门设为父部门，避免循环引用")

        # 4. 更新部门
        for key, value in update_data.items():
            setattr(dept, key, value)
        dept.update_by = actor_id
        async with self.dept_repository.transaction() as session:
            updated_dept = await self.dept_repository.update(dept, session)

        # 5. 父部门变更：级联重算路径
        if parent_changed:
            report = await self.path_maintainer.recompute_path(dept_id)
            if not report.ok:
                logger.warning(
                    f"部门路径级联存在失败节点 | 部门ID：{dept_id} | 失败：{[f.node_id for f in report.failures]}"
                )
            updated_dept = await self.get_dept_by_id(dept_id)

        return updated_dept

    async def set_status(self, dept_id: int, status: int, actor_id: Optional[int] = None) -> SysDept:
        """启用/停用部门"""
        if status not in (Status.ACTIVE, Status.INACTIVE):
            raise BadRequest(detail=f"无效的状态值: {status}")
        dept = await self.get_dept_by_id(dept_id)
        dept.status = int(status)
        dept.update_by = actor_id
        return await self.dept_repository.update(dept)

    async def delete_dept(self, dept_id: int, actor_id: Optional[int] = None) -> None:
        """删除部门（逻辑删除）"""
        # 1. 检查部门是否存在
        dept = await self.get_dept_by_id(dept_id)

        # 2. 检查是否有子部门
        if await self.dept_repository.check_has_children(dept_id):
            raise BadRequest(detail="存在子部门，无法删除")

        # 3. 检查部门下是否有用户
        if await self.dept_repository.check_has_users(dept_id):
            raise BadRequest(detail="部门下存在用户，无法删除")

        # 4. 软删除部门
        dept.update_by = actor_id
        await self.dept_repository.delete(dept)
        logger.info(f"部门已删除 | ID：{dept_id} | 名称：{dept.name}")

    async def recompute_path(self, dept_id: int) -> PathCascadeReport:
        """手动重算部门路径（数据修复用）"""
        return await self.path_maintainer.recompute_path(dept_id)

    # ==================== 辅助方法 ====================

    async def _is_circular_reference(self, dept_id: int, parent_id: int) -> bool:
        """检查新父部门是否是当前部门的子孙部门"""
        parents = {d.id: d.parent_id for d in await self.dept_repository.get_all_nodes()}
        visited = set()
        current_id: Optional[int] = parent_id
        while current_id is not None and current_id not in visited:
            if current_id == dept_id:
                return True
            visited.add(current_id)
            current_id = parents.get(current_id)
        return False


def _dept_option(dept: SysDept) -> Dict[str, Any]:
    return {"value": dept.id, "label": dept.name, "tag": dept.code}
