"""
角色相关的Pydantic Schemas
backend/mes_sys/schemas/sys_role.py
"""
from typing import List, Optional

from pydantic import Field

from mes_sys.enums.sys_status import RoleKind
from mes_sys.schemas.base import BaseSchema, AuditSchema, IDSchema


class RoleBase(BaseSchema):
    name: str = Field(..., max_length=64, description="角色名称", examples=["管理员"])
    code: str = Field(..., max_length=50, description="角色编码", examples=["admin"])
    kind: RoleKind = Field(RoleKind.BUSINESS, description="角色类型(1:系统角色,2:业务角色)")
    sort: int = 0
    status: int = Field(1, ge=0, le=1)
    remark: Optional[str] = Field(None, max_length=500)


class RoleCreate(RoleBase):
    permission_ids: List[int] = Field(default_factory=list, description="初始权限ID列表")


class RoleUpdate(BaseSchema):
    name: Optional[str] = Field(None, max_length=64)
    code: Optional[str] = Field(None, max_length=50)
    sort: Optional[int] = None
    status: Optional[int] = Field(None, ge=0, le=1)
    remark: Optional[str] = None


class RoleOut(RoleBase, AuditSchema, IDSchema):
    pass
