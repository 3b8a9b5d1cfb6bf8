# mes_sys/schemas/sys_dept.py
from typing import Optional

from pydantic import Field, EmailStr

from mes_sys.schemas.base import BaseSchema, AuditSchema, IDSchema


class DeptBase(BaseSchema):
    """部门基础模型"""
    name: str = Field(..., max_length=100, description="部门名称")
    code: str = Field(..., max_length=50, description="部门编码")
    parent_id: Optional[int] = Field(None, description="父部门ID，为空表示根部门")
    sort: int = 1
    status: int = Field(1, ge=0, le=1)
    leader: Optional[str] = Field(None, max_length=50, description="负责人")
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    remark: Optional[str] = Field(None, max_length=500)


class DeptCreate(DeptBase):
    """部门创建模型"""
    pass


class DeptUpdate(BaseSchema):
    """部门更新模型（只更新显式传入的字段，parent_id显式传None表示改为根部门）"""
    name: Optional[str] = Field(None, max_length=100)
    code: Optional[str] = Field(None, max_length=50)
    parent_id: Optional[int] = None
    sort: Optional[int] = None
    status: Optional[int] = Field(None, ge=0, le=1)
    leader: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    remark: Optional[str] = Field(None, max_length=500)


class DeptOut(DeptBase, AuditSchema, IDSchema):
    """部门输出模型"""
    tree_path: Optional[str] = None
