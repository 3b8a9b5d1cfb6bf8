"""
模型统一导出入口
作用：
1. 集中管理所有模型导入，避免散落在业务代码中的重复导入
2. 按SQLAlchemy依赖顺序导入（先导入被依赖的底层模型），解决循环依赖问题
3. 统一导出所有模型，简化业务层导入（如：from mes_sys.models import SysUser）

backend/mes_sys/models/__init__.py
"""
from mes_sys.models.base import Base

# 部门：独立的树形结构
from mes_sys.models.sys_dept import SysDept
# 权限：无前置依赖（最底层）
from mes_sys.models.sys_permission import SysPermission
# 角色：依赖权限模型
from mes_sys.models.sys_role import SysRole, sys_role_permission
# 用户：依赖角色模型（最上层）
from mes_sys.models.sys_user import SysUser, sys_user_role

__all__ = [
    # 基础类
    'Base',
    # 核心模型（按导入顺序）
    'SysDept',
    'SysPermission',
    'SysRole',
    'SysUser',
    # 中间表（按所属模型顺序）
    'sys_role_permission',
    'sys_user_role',
]


def validate_models() -> None:
    """
    验证所有模型类是否正确继承Base基类
    - 跳过Base本身和中间表（Table对象），仅校验模型类
    """
    module_globals = globals()
    for model_name in __all__:
        if model_name == 'Base':
            continue
        if model_name not in module_globals:
            raise RuntimeError(f"导出列表中的 {model_name} 未在模块中定义，请检查导入语句是否正确")
        model = module_globals[model_name]
        if isinstance(model, type) and not issubclass(model, Base):
            raise RuntimeError(f"模型 {model_name} 未正确继承Base基类！所有业务模型必须继承Base")
