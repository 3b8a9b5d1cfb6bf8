"""
测试用户权限解析
"""
import pytest

from mes_sys.core.exceptions import PermissionDenied
from mes_sys.enums.sys_status import PermissionKind, Status
from mes_sys.schemas.sys_permission import PermissionCreate
from mes_sys.schemas.sys_role import RoleCreate
from mes_sys.schemas.sys_user import UserCreate


@pytest.fixture
async def rbac(permission_service, role_service, user_service, assignment_service):
    """
    用户U拥有角色R1{A,B}、R2{B,C}；D未分配给任何角色
    A为菜单，B挂在A下的按钮，C为菜单，D为按钮
    """
    perm = {}
    perm["A"] = await permission_service.create_permission(
        PermissionCreate(code="A", name="A", kind=PermissionKind.MENU, sort=1)
    )
    perm["B"] = await permission_service.create_permission(
        PermissionCreate(code="B", name="B", kind=PermissionKind.BUTTON, parent_id=perm["A"].id, sort=2)
    )
    perm["C"] = await permission_service.create_permission(
        PermissionCreate(code="C", name="C", kind=PermissionKind.MENU, sort=3)
    )
    perm["D"] = await permission_service.create_permission(
        PermissionCreate(code="D", name="D", kind=PermissionKind.BUTTON, sort=4)
    )
    r1 = await role_service.create_role(RoleCreate(code="R1", name="R1"))
    r2 = await role_service.create_role(RoleCreate(code="R2", name="R2"))
    await assignment_service.assign_permissions(r1.id, [perm["A"].id, perm["B"].id])
    await assignment_service.assign_permissions(r2.id, [perm["B"].id, perm["C"].id])

    user = await user_service.create_user(UserCreate(username="user_u", password="secret123"))
    await assignment_service.assign_roles(user.id, [r1.id, r2.id])
    return {"perm": perm, "roles": {"R1": r1, "R2": r2}, "user": user}


async def test_effective_permissions_are_union_of_roles(authorization_service, rbac):
    permissions = await authorization_service.get_effective_permissions(rbac["user"].id)

    assert [p.code for p in permissions] == ["A", "B", "C"]
    assert len({p.id for p in permissions}) == 3


async def test_has_permission_exact_match(authorization_service, rbac):
    user_id = rbac["user"].id
    assert await authorization_service.has_permission(user_id, "B")
    assert not await authorization_service.has_permission(user_id, "D")
    assert not await authorization_service.has_permission(user_id, "b")
    assert not await authorization_service.has_permission(user_id, "")


async def test_permission_codes(authorization_service, rbac):
    assert await authorization_service.get_permission_codes(rbac["user"].id) == {"A", "B", "C"}


async def test_user_without_roles_has_nothing(authorization_service, user_service):
    user = await user_service.create_user(UserCreate(username="nobody", password="secret123"))

    assert await authorization_service.get_effective_permissions(user.id) == []
    assert await authorization_service.get_permission_codes(user.id) == set()
    assert not await authorization_service.has_permission(user.id, "A")


async def test_unknown_user_has_nothing(authorization_service):
    assert await authorization_service.get_effective_permissions(404) == []


async def test_inactive_permission_is_excluded(authorization_service, permission_service, rbac):
    await permission_service.set_status(rbac["perm"]["C"].id, Status.INACTIVE)

    assert await authorization_service.get_permission_codes(rbac["user"].id) == {"A", "B"}


async def test_deleted_permission_is_excluded(authorization_service, permission_service, rbac):
    await permission_service.delete_permission(rbac["perm"]["C"].id)

    assert not await authorization_service.has_permission(rbac["user"].id, "C")


async def test_inactive_role_contributes_nothing(authorization_service, role_service, rbac):
    await role_service.set_status(rbac["roles"]["R2"].id, Status.INACTIVE)

    assert await authorization_service.get_permission_codes(rbac["user"].id) == {"A", "B"}
    roles = await authorization_service.get_user_roles(rbac["user"].id)
    assert [r.code for r in roles] == ["R1"]


async def test_reassignment_visible_immediately(authorization_service, assignment_service, rbac):
    user_id = rbac["user"].id
    await assignment_service.assign_roles(user_id, [rbac["roles"]["R1"].id])

    assert await authorization_service.get_permission_codes(user_id) == {"A", "B"}


async def test_permission_tree(authorization_service, rbac):
    tree = await authorization_service.get_user_permission_tree(rbac["user"].id)

    assert [n.value.code for n in tree] == ["A", "C"]
    assert [n.value.code for n in tree[0].children] == ["B"]


async def test_menu_tree_only_contains_menus(authorization_service, rbac):
    menus = await authorization_service.get_user_menu_tree(rbac["user"].id)

    assert [m["code"] for m in menus] == ["A", "C"]
    assert all("children" not in m for m in menus)


async def test_role_has_permission(authorization_service, rbac):
    r1 = rbac["roles"]["R1"]
    assert await authorization_service.role_has_permission(r1.id, "A")
    assert not await authorization_service.role_has_permission(r1.id, "C")
    assert not await authorization_service.role_has_permission(r1.id, "missing")


async def test_require_permission(authorization_service, rbac):
    await authorization_service.require_permission(rbac["user"].id, "C")
    with pytest.raises(PermissionDenied):
        await authorization_service.require_permission(rbac["user"].id, "D")
