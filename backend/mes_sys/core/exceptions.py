"""
核心异常定义
backend/mes_sys/core/exceptions.py
写操作抛出带类型的异常，由调用方（UI层）转换为用户提示；本层不格式化界面消息
"""
from typing import Any, Optional


class AppException(Exception):
    """基础异常类"""
    code: str = "APP_ERROR"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ResourceNotFound(AppException):
    """资源不存在"""
    code = "NOT_FOUND"


class BadRequest(AppException):
    """参数错误/业务错误"""
    code = "BAD_REQUEST"


class CircularReference(BadRequest):
    """父子关系形成循环"""
    code = "CIRCULAR_REFERENCE"


class PermissionDenied(AppException):
    """权限不足"""
    code = "FORBIDDEN"

    def __init__(self, detail: str = "Not enough privileges"):
        super().__init__(detail)


class AssignmentFailed(AppException):
    """关联关系整体替换失败（事务已回滚，关联集合保持调用前状态）"""
    code = "ASSIGNMENT_FAILED"


class DanglingReference(AppException):
    """
    parent_id指向不存在的记录
    树构建/路径维护按根节点降级处理，同时以该对象作为诊断信息返回给调用方
    """
    code = "DANGLING_REFERENCE"

    def __init__(self, node_id: Any, parent_id: Any, detail: Optional[str] = None):
        super().__init__(detail or f"Node '{node_id}' references missing parent '{parent_id}'")
        self.node_id = node_id
        self.parent_id = parent_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DanglingReference):
            return NotImplemented
        return (self.node_id, self.parent_id) == (other.node_id, other.parent_id)

    def __hash__(self) -> int:
        return hash((self.node_id, self.parent_id))
