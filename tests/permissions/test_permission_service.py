import pytest

from workforce_admin.core.enums import Permission, Role
from workforce_admin.core.exceptions import AuthorizationError, ValidationError
from workforce_admin.permissions.model import DEFAULT_ROLE_PERMISSIONS


def test_defaults_apply_until_rows_are_stored(container):
    service = container.permission_service
    assert service.permissions_for(Role.EMPLOYEE) == DEFAULT_ROLE_PERMISSIONS[Role.EMPLOYEE]
    assert not service.has_permission(Role.EMPLOYEE, Permission.PAYROLL_MANAGE)


def test_admin_always_has_everything(container, repos):
    repos.role_permissions.replace_for_role(Role.ADMIN, [Permission.DASHBOARD_VIEW])
    assert container.permission_service.permissions_for(Role.ADMIN) == frozenset(Permission)


def test_stored_rows_replace_defaults(container):
    service = container.permission_service
    service.set_role_permissions(current_role=Role.ADMIN, role=Role.EMPLOYEE, permissions=["payroll_view"])
    assert service.permissions_for(Role.EMPLOYEE) == frozenset({Permission.PAYROLL_VIEW})
    with pytest.raises(AuthorizationError):
        service.require(Role.EMPLOYEE, Permission.DASHBOARD_VIEW)


def test_only_admin_edits_and_admin_role_is_fixed(container):
    service = container.permission_service
    with pytest.raises(AuthorizationError):
        service.set_role_permissions(current_role=Role.ACCOUNTANT, role=Role.EMPLOYEE, permissions=[])
    with pytest.raises(ValidationError):
        service.set_role_permissions(current_role=Role.ADMIN, role=Role.ADMIN, permissions=[])
    with pytest.raises(ValidationError):
        service.set_role_permissions(current_role=Role.ADMIN, role=Role.EMPLOYEE, permissions=["fly"])


def test_reset_restores_defaults(container):
    service = container.permission_service
    service.set_role_permissions(current_role=Role.ADMIN, role=Role.OPERATION, permissions=["reports_view"])
    service.reset_defaults(current_role=Role.ADMIN)
    assert service.permissions_for(Role.OPERATION) == DEFAULT_ROLE_PERMISSIONS[Role.OPERATION]
    assert service.matrix()["admin"] == sorted(p.value for p in Permission)


def test_clearing_a_role_removes_every_permission(container):
    service = container.permission_service
    granted = service.set_role_permissions(current_role=Role.ADMIN, role=Role.EMPLOYEE, permissions=[])

    assert granted == frozenset()
    assert service.permissions_for(Role.EMPLOYEE) == frozenset()
    assert not service.has_permission(Role.EMPLOYEE, Permission.DASHBOARD_VIEW)
    assert service.matrix()["employee"] == []
