"""
测试部门服务
"""
import pytest

from mes_sys.core.exceptions import BadRequest, CircularReference, ResourceNotFound
from mes_sys.enums.sys_status import Status
from mes_sys.schemas.sys_dept import DeptCreate, DeptUpdate
from mes_sys.schemas.sys_user import UserCreate


@pytest.fixture
async def depts(dept_service):
    hq = await dept_service.create_dept(DeptCreate(code="HQ", name="总公司", sort=1))
    prod = await dept_service.create_dept(DeptCreate(code="PROD", name="生产部", parent_id=hq.id, sort=1))
    ws1 = await dept_service.create_dept(DeptCreate(code="WS1", name="一车间", parent_id=prod.id, sort=1))
    qa = await dept_service.create_dept(DeptCreate(code="QA", name="质量部", parent_id=hq.id, sort=2))
    return {"HQ": hq, "PROD": prod, "WS1": ws1, "QA": qa}


async def test_duplicate_code_rejected(dept_service, depts):
    with pytest.raises(BadRequest):
        await dept_service.create_dept(DeptCreate(code="HQ", name="重复"))


async def test_missing_parent_rejected(dept_service):
    with pytest.raises(BadRequest):
        await dept_service.create_dept(DeptCreate(code="X", name="X", parent_id=999))


async def test_inactive_parent_rejected(dept_service, depts):
    await dept_service.set_status(depts["QA"].id, Status.INACTIVE)
    with pytest.raises(BadRequest):
        await dept_service.create_dept(DeptCreate(code="QA1", name="QA1", parent_id=depts["QA"].id))


async def test_get_dept_by_id_not_found(dept_service):
    with pytest.raises(ResourceNotFound):
        await dept_service.get_dept_by_id(999)


async def test_dept_tree_and_options(dept_service, depts):
    tree = await dept_service.get_dept_tree()
    assert [n.value.code for n in tree] == ["HQ"]
    assert [n.value.code for n in tree[0].children] == ["PROD", "QA"]

    options = await dept_service.get_dept_options()
    assert options[0]["label"] == "总公司"
    assert options[0]["children"][0]["children"] == [
        {"value": depts["WS1"].id, "label": "一车间", "tag": "WS1"}
    ]


async def test_inactive_dept_hidden_from_tree(dept_service, depts):
    await dept_service.set_status(depts["QA"].id, Status.INACTIVE)
    tree = await dept_service.get_dept_tree()
    assert [n.value.code for n in tree[0].children] == ["PROD"]


async def test_children_and_descendants(dept_service, depts):
    children = await dept_service.get_child_depts(depts["HQ"].id)
    assert [d.code for d in children] == ["PROD", "QA"]

    subtree = await dept_service.get_dept_and_descendants(depts["PROD"].id)
    assert sorted(d.code for d in subtree) == ["PROD", "WS1"]

    assert await dept_service.get_dept_and_descendants(999) == []


async def test_path_prefix_does_not_match_sibling_ids(dept_service):
    """路径"1"不能匹配"10,..."开头的部门"""
    created = []
    for i in range(1, 12):
        created.append(await dept_service.create_dept(DeptCreate(code=f"D{i}", name=f"D{i}")))
    child = await dept_service.create_dept(DeptCreate(code="D10-1", name="D10-1", parent_id=created[9].id))

    subtree = await dept_service.get_dept_and_descendants(created[0].id)
    assert [d.code for d in subtree] == ["D1"]
    assert child.tree_path == "10,12"


async def test_update_rejects_self_parent(dept_service, depts):
    with pytest.raises(CircularReference):
        await dept_service.update_dept(depts["PROD"].id, DeptUpdate(parent_id=depts["PROD"].id))


async def test_update_rejects_descendant_as_parent(dept_service, depts):
    with pytest.raises(CircularReference):
        await dept_service.update_dept(depts["HQ"].id, DeptUpdate(parent_id=depts["WS1"].id))


async def test_update_fields_without_parent_change(dept_service, depts):
    updated = await dept_service.update_dept(depts["QA"].id, DeptUpdate(name="品质部", leader="李四"), actor_id=7)
    assert updated.name == "品质部"
    assert updated.leader == "李四"
    assert updated.update_by == 7
    assert updated.tree_path == depts["QA"].tree_path


async def test_update_duplicate_code_rejected(dept_service, depts):
    with pytest.raises(BadRequest):
        await dept_service.update_dept(depts["QA"].id, DeptUpdate(code="PROD"))


async def test_delete_rejects_dept_with_children(dept_service, depts):
    with pytest.raises(BadRequest):
        await dept_service.delete_dept(depts["PROD"].id)


async def test_delete_rejects_dept_with_users(dept_service, user_service, depts):
    await user_service.create_user(UserCreate(username="worker", password="secret123", dept_id=depts["WS1"].id))
    with pytest.raises(BadRequest):
        await dept_service.delete_dept(depts["WS1"].id)


async def test_delete_is_soft(dept_service, depts):
    await dept_service.delete_dept(depts["QA"].id)

    with pytest.raises(ResourceNotFound):
        await dept_service.get_dept_by_id(depts["QA"].id)
    assert await dept_service.get_by_code("QA") is None


async def test_invalid_status_rejected(dept_service, depts):
    with pytest.raises(BadRequest):
        await dept_service.set_status(depts["QA"].id, 5)


async def test_deleted_code_stays_reserved(dept_service, depts):
    await dept_service.delete_dept(depts["QA"].id)
    with pytest.raises(BadRequest):
        await dept_service.create_dept(DeptCreate(code="QA", name="质量部"))


async def test_move_under_inactive_parent_rejected(dept_service, depts):
    await dept_service.set_status(depts["QA"].id, Status.INACTIVE)
    with pytest.raises(BadRequest):
        await dept_service.update_dept(depts["WS1"].id, DeptUpdate(parent_id=depts["QA"].id))
