"""
权限相关的Pydantic Schemas
backend/mes_sys/schemas/sys_permission.py
"""
from typing import Optional

from pydantic import Field

from mes_sys.enums.sys_status import PermissionKind
from mes_sys.schemas.base import BaseSchema, AuditSchema, IDSchema


class PermissionBase(BaseSchema):
    code: str = Field(..., max_length=100, description="权限编码", examples=["system:user:create"])
    name: str = Field(..., max_length=64, description="权限名称", examples=["新增用户"])
    kind: PermissionKind = Field(PermissionKind.MENU, description="权限类型(1:菜单,2:按钮,3:数据)")
    parent_id: Optional[int] = Field(None, description="父权限ID")
    route_path: Optional[str] = Field(None, max_length=200, description="路由地址")
    component: Optional[str] = Field(None, max_length=200, description="组件路径")
    icon: Optional[str] = Field(None, max_length=64)
    is_visible: bool = Field(True, description="菜单是否可见")
    sort: int = 0
    status: int = Field(1, ge=0, le=1)
    remark: Optional[str] = Field(None, max_length=500)


class PermissionCreate(PermissionBase):
    pass


class PermissionUpdate(BaseSchema):
    code: Optional[str] = Field(None, max_length=100)
    name: Optional[str] = Field(None, max_length=64)
    kind: Optional[PermissionKind] = None
    parent_id: Optional[int] = None
    route_path: Optional[str] = None
    component: Optional[str] = None
    icon: Optional[str] = None
    is_visible: Optional[bool] = None
    sort: Optional[int] = None
    status: Optional[int] = Field(None, ge=0, le=1)
    remark: Optional[str] = None


class PermissionOut(PermissionBase, AuditSchema, IDSchema):
    tree_path: Optional[str] = None
