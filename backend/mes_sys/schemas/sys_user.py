"""
用户相关的Pydantic Schemas
backend/mes_sys/schemas/sys_user.py
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field, EmailStr

from mes_sys.schemas.base import BaseSchema, AuditSchema, IDSchema


class UserBase(BaseSchema):
    username: str = Field(..., min_length=2, max_length=64, description="用户名", examples=["zhangsan"])
    real_name: Optional[str] = Field(None, max_length=64, description="真实姓名")
    email: Optional[EmailStr] = Field(None, description="邮箱地址")
    mobile: Optional[str] = Field(None, max_length=20)
    avatar: Optional[str] = Field(None, max_length=255)
    dept_id: Optional[int] = Field(None, description="所属部门ID")
    status: int = Field(1, ge=0, le=1)
    remark: Optional[str] = Field(None, max_length=500)


class UserCreate(UserBase):
    password: str = Field(..., min_length=6, max_length=40, description="密码")
    role_ids: List[int] = Field(default_factory=list, description="初始角色ID列表")


class UserUpdate(BaseSchema):
    real_name: Optional[str] = Field(None, max_length=64)
    email: Optional[EmailStr] = None
    mobile: Optional[str] = Field(None, max_length=20)
    avatar: Optional[str] = Field(None, max_length=255)
    dept_id: Optional[int] = None
    status: Optional[int] = Field(None, ge=0, le=1)
    remark: Optional[str] = None


class UpdatePassword(BaseSchema):
    current_password: str = Field(..., min_length=6, max_length=40)
    new_password: str = Field(..., min_length=6, max_length=40)


# 用于输出，不包含密码
class UserOut(UserBase, AuditSchema, IDSchema):
    last_login_time: Optional[datetime] = None
    password_update_time: Optional[datetime] = None
