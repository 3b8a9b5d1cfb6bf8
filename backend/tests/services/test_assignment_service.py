"""
测试关联关系整体替换（角色→权限、用户→角色）
"""
import pytest
from hypothesis import given, strategies as st

from mes_sys.core.exceptions import AssignmentFailed, BadRequest, ResourceNotFound
from mes_sys.enums.sys_status import PermissionKind
from mes_sys.schemas.sys_permission import PermissionCreate
from mes_sys.schemas.sys_role import RoleCreate
from mes_sys.schemas.sys_user import UserCreate
from mes_sys.services.sys_assignment_service import diff_ids


async def _permissions(permission_service, *codes):
    ids = []
    for code in codes:
        permission = await permission_service.create_permission(
            PermissionCreate(code=code, name=code, kind=PermissionKind.BUTTON)
        )
        ids.append(permission.id)
    return ids


@pytest.fixture
async def role(role_service):
    return await role_service.create_role(RoleCreate(code="operator", name="操作员"))


# ==================== diff_ids ====================

def test_diff_ids():
    to_add, to_remove = diff_ids({1, 2, 3}, [2, 3, 4, 4])
    assert to_add == {4}
    assert to_remove == {1}


@given(st.sets(st.integers()), st.sets(st.integers()))
def test_diff_ids_reaches_desired_state(existing, desired):
    to_add, to_remove = diff_ids(existing, desired)
    assert (existing - to_remove) | to_add == desired
    assert not (to_add & existing)
    assert to_remove <= existing


# ==================== 角色→权限 ====================

async def test_assign_permissions_replaces_set(container, assignment_service, permission_service, role):
    a, b, c = await _permissions(permission_service, "a", "b", "c")

    first = await assignment_service.assign_permissions(role.id, [a, b], actor_id=1)
    assert first.added == [a, b]
    assert first.removed == []

    second = await assignment_service.assign_permissions(role.id, [b, c], actor_id=2)
    assert second.added == [c]
    assert second.removed == [a]
    assert second.unchanged == [b]

    assert await assignment_service.get_permission_ids(role.id) == [b, c]


async def test_assign_is_idempotent(container, assignment_service, permission_service, role):
    a, b = await _permissions(permission_service, "a", "b")
    await assignment_service.assign_permissions(role.id, [a, b], actor_id=1)

    again = await assignment_service.assign_permissions(role.id, [b, a], actor_id=2)

    assert not again.changed
    assert again.unchanged == [a, b]
    rows = await container.role_permission_repository().get_rows(role.id)
    assert [r["create_by"] for r in rows] == [1, 1]


async def test_unchanged_rows_keep_audit_fields(container, assignment_service, permission_service, role):
    a, b, c = await _permissions(permission_service, "a", "b", "c")
    await assignment_service.assign_permissions(role.id, [a, b], actor_id=1)

    await assignment_service.assign_permissions(role.id, [a, c], actor_id=2)

    rows = {r["permission_id"]: r for r in await container.role_permission_repository().get_rows(role.id)}
    assert set(rows) == {a, c}
    assert rows[a]["create_by"] == 1
    assert rows[c]["create_by"] == 2
    assert rows[c]["create_time"] is not None


async def test_empty_set_clears_assignments(assignment_service, permission_service, role):
    a, b = await _permissions(permission_service, "a", "b")
    await assignment_service.assign_permissions(role.id, [a, b])

    result = await assignment_service.assign_permissions(role.id, [])

    assert result.removed == [a, b]
    assert await assignment_service.get_permission_ids(role.id) == []


async def test_missing_role_raises_not_found(assignment_service, permission_service):
    (a,) = await _permissions(permission_service, "a")
    with pytest.raises(ResourceNotFound):
        await assignment_service.assign_permissions(404, [a])


async def test_invalid_permission_ids_rejected_without_writes(assignment_service, permission_service, role):
    a, b = await _permissions(permission_service, "a", "b")
    await assignment_service.assign_permissions(role.id, [a])

    with pytest.raises(BadRequest) as exc_info:
        await assignment_service.assign_permissions(role.id, [b, 998, 999])

    assert "998" in exc_info.value.detail and "999" in exc_info.value.detail
    assert await assignment_service.get_permission_ids(role.id) == [a]


async def test_failure_rolls_back_whole_assignment(assignment_service, permission_service, role, monkeypatch):
    """删除已执行、新增失败 → 整体回滚，关联集合保持调用前状态"""
    a, b, c = await _permissions(permission_service, "a", "b", "c")
    await assignment_service.assign_permissions(role.id, [a, b], actor_id=1)

    async def broken_insert(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(assignment_service.role_permission_repository, "insert_pairs", broken_insert)

    with pytest.raises(AssignmentFailed) as exc_info:
        await assignment_service.assign_permissions(role.id, [c], actor_id=2)

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert await assignment_service.get_permission_ids(role.id) == [a, b]


# ==================== 用户→角色 ====================

async def test_assign_roles(assignment_service, role_service, user_service):
    admin = await role_service.create_role(RoleCreate(code="admin", name="管理员"))
    operator = await role_service.create_role(RoleCreate(code="operator", name="操作员"))
    user = await user_service.create_user(UserCreate(username="zhangsan", password="secret123"))

    result = await assignment_service.assign_roles(user.id, [admin.id, operator.id], actor_id=1)

    assert result.added == [admin.id, operator.id]
    assert await assignment_service.has_role(user.id, admin.id)

    await assignment_service.assign_roles(user.id, [operator.id], actor_id=1)
    assert not await assignment_service.has_role(user.id, admin.id)
    assert await assignment_service.get_role_ids(user.id) == [operator.id]


async def test_assign_roles_missing_user(assignment_service, role):
    with pytest.raises(ResourceNotFound):
        await assignment_service.assign_roles(404, [role.id])
