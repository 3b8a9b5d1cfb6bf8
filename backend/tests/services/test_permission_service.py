"""
测试权限服务
"""
import pytest

from mes_sys.core.exceptions import BadRequest, CircularReference
from mes_sys.enums.sys_status import PermissionKind, Status
from mes_sys.schemas.sys_permission import PermissionCreate, PermissionUpdate


@pytest.fixture
async def perms(permission_service):
    system = await permission_service.create_permission(PermissionCreate(code="system", name="系统管理", sort=1))
    user = await permission_service.create_permission(
        PermissionCreate(code="system:user", name="用户管理", parent_id=system.id, sort=1)
    )
    create = await permission_service.create_permission(PermissionCreate(
        code="system:user:create", name="创建用户", kind=PermissionKind.BUTTON, parent_id=user.id
    ))
    basic = await permission_service.create_permission(PermissionCreate(code="basic", name="基础信息", sort=2))
    data = await permission_service.create_permission(
        PermissionCreate(code="data:all", name="全部数据", kind=PermissionKind.DATA, sort=3)
    )
    return {"system": system, "user": user, "create": create, "basic": basic, "data": data}


async def test_create_stamps_tree_path(perms):
    assert perms["create"].tree_path == f"{perms['system'].id},{perms['user'].id},{perms['create'].id}"
    assert perms["create"].kind == PermissionKind.BUTTON


async def test_query_by_kind(permission_service, perms):
    assert [p.code for p in await permission_service.get_menu_permissions()] == ["system", "system:user", "basic"]
    assert [p.code for p in await permission_service.get_button_permissions()] == ["system:user:create"]
    assert [p.code for p in await permission_service.get_data_permissions()] == ["data:all"]


async def test_menu_tree_excludes_buttons(permission_service, perms):
    tree = await permission_service.get_menu_tree()
    assert [n.value.code for n in tree] == ["system", "basic"]
    assert [n.value.code for n in tree[0].children] == ["system:user"]
    assert tree[0].children[0].children == []


async def test_button_cannot_have_children(permission_service, perms):
    with pytest.raises(BadRequest):
        await permission_service.create_permission(
            PermissionCreate(code="x", name="x", kind=PermissionKind.BUTTON, parent_id=perms["create"].id)
        )


async def test_move_permission_cascades_paths(permission_service, perms):
    moved = await permission_service.update_permission(perms["user"].id, PermissionUpdate(parent_id=perms["basic"].id))

    assert moved.tree_path == f"{perms['basic'].id},{perms['user'].id}"
    button = await permission_service.get_permission_by_id(perms["create"].id)
    assert button.tree_path == f"{perms['basic'].id},{perms['user'].id},{perms['create'].id}"


async def test_move_under_descendant_rejected(permission_service, perms):
    with pytest.raises(CircularReference):
        await permission_service.update_permission(perms["system"].id, PermissionUpdate(parent_id=perms["user"].id))


async def test_delete_rules(permission_service, perms):
    with pytest.raises(BadRequest):
        await permission_service.delete_permission(perms["user"].id)

    await permission_service.delete_permission(perms["create"].id)
    assert await permission_service.get_permission_by_code("system:user:create") is None


async def test_inactive_permission_hidden_from_tree(permission_service, perms):
    await permission_service.set_status(perms["basic"].id, Status.INACTIVE)
    tree = await permission_service.get_permission_tree()
    assert [n.value.code for n in tree] == ["system", "data:all"]


async def test_move_under_button_rejected(permission_service, perms):
    with pytest.raises(BadRequest):
        await permission_service.update_permission(perms["basic"].id, PermissionUpdate(parent_id=perms["create"].id))


async def test_permission_with_children_cannot_become_button(permission_service, perms):
    with pytest.raises(BadRequest):
        await permission_service.update_permission(perms["user"].id, PermissionUpdate(kind=PermissionKind.BUTTON))

    leaf = await permission_service.update_permission(perms["basic"].id, PermissionUpdate(kind=PermissionKind.BUTTON))
    assert leaf.kind == PermissionKind.BUTTON
