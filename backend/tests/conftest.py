"""
Pytest配置文件
每个测试使用独立的临时sqlite文件库，通过覆盖容器的async_engine注入
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./mes_sys_test.db")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from hypothesis import settings as hypothesis_settings, HealthCheck
from sqlalchemy.ext.asyncio import create_async_engine

from mes_sys.di.container import Container
from mes_sys.models import Base

# 配置Hypothesis
hypothesis_settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow]
)
hypothesis_settings.load_profile("default")


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'mes_sys.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def container(engine):
    container = Container()
    container.async_engine.override(engine)
    yield container
    container.async_engine.reset_override()


@pytest.fixture
def dept_service(container):
    return container.dept_service()


@pytest.fixture
def permission_service(container):
    return container.permission_service()


@pytest.fixture
def role_service(container):
    return container.role_service()


@pytest.fixture
def user_service(container):
    return container.user_service()


@pytest.fixture
def assignment_service(container):
    return container.assignment_service()


@pytest.fixture
def authorization_service(container):
    return container.authorization_service()
