"""
测试角色服务
"""
import pytest

from mes_sys.core.exceptions import AssignmentFailed, BadRequest, ResourceNotFound
from mes_sys.enums.sys_status import PermissionKind, RoleKind, Status
from mes_sys.schemas.sys_permission import PermissionCreate
from mes_sys.schemas.sys_role import RoleCreate, RoleUpdate
from mes_sys.schemas.sys_user import UserCreate


@pytest.fixture
async def permission_ids(permission_service):
    ids = []
    for code in ("p1", "p2"):
        permission = await permission_service.create_permission(
            PermissionCreate(code=code, name=code, kind=PermissionKind.MENU)
        )
        ids.append(permission.id)
    return ids


async def test_create_role_with_initial_permissions(role_service, permission_ids):
    role = await role_service.create_role(
        RoleCreate(code="qc", name="质检员", permission_ids=permission_ids), actor_id=1
    )

    permissions = await role_service.get_role_permissions(role.id)
    assert [p.code for p in permissions] == ["p1", "p2"]
    assert role.create_by == 1


async def test_create_role_with_invalid_permissions_creates_nothing(role_service):
    with pytest.raises(BadRequest):
        await role_service.create_role(RoleCreate(code="qc", name="质检员", permission_ids=[999]))
    assert await role_service.get_role_by_code("qc") is None


async def test_duplicate_role_code(role_service):
    await role_service.create_role(RoleCreate(code="qc", name="质检员"))
    with pytest.raises(BadRequest):
        await role_service.create_role(RoleCreate(code="qc", name="其他"))


async def test_roles_by_kind_and_options(role_service):
    await role_service.create_role(RoleCreate(code="admin", name="管理员", kind=RoleKind.SYSTEM, sort=1))
    await role_service.create_role(RoleCreate(code="qc", name="质检员", sort=2))
    disabled = await role_service.create_role(RoleCreate(code="old", name="旧角色", sort=3))
    await role_service.set_status(disabled.id, Status.INACTIVE)

    assert [r.code for r in await role_service.get_system_roles()] == ["admin"]
    assert [r.code for r in await role_service.get_business_roles()] == ["qc"]
    assert [o["tag"] for o in await role_service.get_role_options()] == ["admin", "qc"]
    assert await role_service.count_roles() == 3
    assert [r.code for r in await role_service.list_roles(offset=1, limit=1)] == ["qc"]


async def test_update_role(role_service):
    role = await role_service.create_role(RoleCreate(code="qc", name="质检员"))
    other = await role_service.create_role(RoleCreate(code="op", name="操作员"))

    updated = await role_service.update_role(role.id, RoleUpdate(name="品质检验员"), actor_id=3)
    assert updated.name == "品质检验员"
    assert updated.update_by == 3

    with pytest.raises(BadRequest):
        await role_service.update_role(role.id, RoleUpdate(code=other.code))


async def test_system_role_cannot_be_deleted(role_service):
    admin = await role_service.create_role(RoleCreate(code="admin", name="管理员", kind=RoleKind.SYSTEM))
    with pytest.raises(BadRequest):
        await role_service.delete_role(admin.id)


async def test_role_in_use_cannot_be_deleted(role_service, user_service):
    role = await role_service.create_role(RoleCreate(code="qc", name="质检员"))
    await user_service.create_user(UserCreate(username="lisi", password="secret123", role_ids=[role.id]))
    with pytest.raises(BadRequest):
        await role_service.delete_role(role.id)


async def test_delete_role_clears_permissions(container, role_service, permission_ids):
    role = await role_service.create_role(RoleCreate(code="qc", name="质检员", permission_ids=permission_ids))

    await role_service.delete_role(role.id)

    with pytest.raises(ResourceNotFound):
        await role_service.get_role_by_id(role.id)
    assert await container.role_permission_repository().get_target_ids(role.id) == set()


async def test_failed_initial_assignment_rolls_back_role(role_service, assignment_service, permission_ids, monkeypatch):
    async def broken_insert(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(assignment_service.role_permission_repository, "insert_pairs", broken_insert)
    role_service.assignment_service = assignment_service

    with pytest.raises(AssignmentFailed):
        await role_service.create_role(RoleCreate(code="qc", name="质检员", permission_ids=permission_ids))
    assert await role_service.get_role_by_code("qc") is None
