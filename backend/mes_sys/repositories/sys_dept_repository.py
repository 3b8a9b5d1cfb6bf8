# mes_sys/repositories/sys_dept_repository.py
"""
部门模块数据访问层
"""
from typing import Any

from sqlmodel import select, func

from mes_sys.models import SysDept, SysUser
from mes_sys.repositories.tree_repository import TreeRepository


class DeptRepository(TreeRepository[SysDept]):
    """
    部门仓储层
    """
    model = SysDept

    async def check_has_users(self, dept_id: Any) -> bool:
        """检查部门下是否有用户"""
        async with self.transaction() as session:
            stmt = select(func.count(SysUser.id)).where(
                SysUser.dept_id == dept_id,
                SysUser.is_deleted == 0
            )
            result = await session.execute(stmt)
            count = result.scalar() or 0
            return count > 0
