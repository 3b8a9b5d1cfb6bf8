"""
DI容器
项目核心框架文件
backend/mes_sys/di/container.py
"""
from dependency_injector import containers, providers
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from mes_sys.core.config import settings
from mes_sys.models import sys_role_permission, sys_user_role
from mes_sys.repositories.sys_association_repository import AssociationRepository
from mes_sys.repositories.sys_dept_repository import DeptRepository
from mes_sys.repositories.sys_permission_repository import PermissionRepository
from mes_sys.repositories.sys_role_repository import RoleRepository
from mes_sys.repositories.sys_user_repository import UserRepository
from mes_sys.services.sys_assignment_service import AssignmentService
from mes_sys.services.sys_authorization_service import AuthorizationService
from mes_sys.services.sys_dept_service import DeptService
from mes_sys.services.sys_permission_service import PermissionService
from mes_sys.services.sys_role_service import RoleService
from mes_sys.services.sys_user_service import UserService
from mes_sys.services.tree_path_service import TreePathMaintainer


class Container(containers.DeclarativeContainer):

    # 1. 底层：数据库引擎（单例，全局唯一）
    async_engine = providers.Singleton(
        create_async_engine,
        settings.SQLALCHEMY_DATABASE_URI,
        **settings.engine_options()
    )

    # 2. 中层：会话工厂（单例，全局唯一）
    async_session_factory = providers.Singleton(
        sessionmaker,
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )

    # 3. Repo层：注入会话工厂
    user_repository = providers.Factory(
        UserRepository,
        async_session_factory=async_session_factory
    )
    role_repository = providers.Factory(
        RoleRepository,
        async_session_factory=async_session_factory
    )
    permission_repository = providers.Factory(
        PermissionRepository,
        async_session_factory=async_session_factory
    )
    dept_repository = providers.Factory(
        DeptRepository,
        async_session_factory=async_session_factory
    )
    user_role_repository = providers.Factory(
        AssociationRepository,
        async_session_factory=async_session_factory,
        table=sys_user_role,
        owner_column="user_id",
        target_column="role_id"
    )
    role_permission_repository = providers.Factory(
        AssociationRepository,
        async_session_factory=async_session_factory,
        table=sys_role_permission,
        owner_column="role_id",
        target_column="permission_id"
    )

    # 4. 路径维护：部门树、权限树各一个
    dept_path_maintainer = providers.Factory(
        TreePathMaintainer,
        repository=dept_repository
    )
    permission_path_maintainer = providers.Factory(
        TreePathMaintainer,
        repository=permission_repository
    )

    # 5. Service层：注入Repo
    assignment_service = providers.Factory(
        AssignmentService,
        role_repository=role_repository,
        permission_repository=permission_repository,
        user_repository=user_repository,
        role_permission_repository=role_permission_repository,
        user_role_repository=user_role_repository
    )
    authorization_service = providers.Factory(
        AuthorizationService,
        role_repository=role_repository,
        permission_repository=permission_repository,
        user_role_repository=user_role_repository,
        role_permission_repository=role_permission_repository
    )
    dept_service = providers.Factory(
        DeptService,
        dept_repository=dept_repository,
        path_maintainer=dept_path_maintainer
    )
    permission_service = providers.Factory(
        PermissionService,
        permission_repository=permission_repository,
        path_maintainer=permission_path_maintainer
    )
    role_service = providers.Factory(
        RoleService,
        role_repository=role_repository,
        permission_repository=permission_repository,
        role_permission_repository=role_permission_repository,
        user_role_repository=user_role_repository,
        assignment_service=assignment_service
    )
    user_service = providers.Factory(
        UserService,
        user_repository=user_repository,
        role_repository=role_repository,
        dept_repository=dept_repository,
        user_role_repository=user_role_repository,
        assignment_service=assignment_service
    )
