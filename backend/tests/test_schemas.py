"""
测试输出Schema（从ORM对象构建）
"""
import pytest
from pydantic import ValidationError

from mes_sys.enums.sys_status import PermissionKind, RoleKind
from mes_sys.schemas import (
    DeptCreate, DeptOut, PermissionCreate, PermissionOut, RoleCreate, RoleOut, UserCreate, UserOut,
)


async def test_out_schemas_from_orm(dept_service, permission_service, role_service, user_service):
    dept = await dept_service.create_dept(DeptCreate(code="HQ", name="总公司", email="hq@example.com"))
    permission = await permission_service.create_permission(
        PermissionCreate(code="system", name="系统管理", kind=PermissionKind.MENU)
    )
    role = await role_service.create_role(RoleCreate(code="admin", name="管理员", kind=RoleKind.SYSTEM))
    user = await user_service.create_user(UserCreate(username="zhangsan", password="secret123", dept_id=dept.id))

    dept_out = DeptOut.model_validate(dept)
    assert dept_out.tree_path == str(dept.id)

    permission_out = PermissionOut.model_validate(permission)
    assert permission_out.kind is PermissionKind.MENU
    assert permission_out.is_visible is True

    assert RoleOut.model_validate(role).kind is RoleKind.SYSTEM

    user_out = UserOut.model_validate(user).model_dump()
    assert user_out["dept_id"] == dept.id
    assert "password" not in user_out


def test_create_schema_validation():
    with pytest.raises(ValidationError):
        UserCreate(username="zhangsan", password="123")
    with pytest.raises(ValidationError):
        DeptCreate(code="HQ", name="总公司", email="not-an-email")
    with pytest.raises(ValidationError):
        PermissionCreate(code="x", name="x", kind=9)
