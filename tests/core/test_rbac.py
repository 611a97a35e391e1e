"""Unit tests for pure permission resolution"""

from core.enums import PermissionAction, PermissionModule
from core.rbac import PERMISSION_CATALOG, PermissionKey, RoleGrant, is_permitted, resolve_permissions

READ_FINANCE = PermissionKey(PermissionAction.READ, PermissionModule.FINANCE)
CREATE_FINANCE = PermissionKey(PermissionAction.CREATE, PermissionModule.FINANCE)
READ_STAFF = PermissionKey(PermissionAction.READ, PermissionModule.STAFF)


def test_catalog_is_module_action_cross_product():
    assert len(PERMISSION_CATALOG) == len(PermissionModule) * len(PermissionAction)
    assert READ_FINANCE in PERMISSION_CATALOG


def test_no_roles_resolves_to_empty_set():
    assert resolve_permissions([]) == frozenset()


def test_role_without_permissions_grants_nothing():
    assert resolve_permissions([RoleGrant("Student")]) == frozenset()


def test_permissions_are_union_of_roles():
    grants = [
        RoleGrant("Accountant", permissions=frozenset({READ_FINANCE, CREATE_FINANCE})),
        RoleGrant("Clerk", permissions=frozenset({READ_STAFF, READ_FINANCE})),
    ]

    assert resolve_permissions(grants) == {READ_FINANCE, CREATE_FINANCE, READ_STAFF}


def test_grants_all_role_resolves_to_full_catalog():
    grants = [RoleGrant("Student"), RoleGrant("Admin", grants_all=True)]

    assert resolve_permissions(grants) == PERMISSION_CATALOG


def test_is_permitted_requires_exact_pair():
    grants = [RoleGrant("Accountant", permissions=frozenset({READ_FINANCE}))]

    assert is_permitted(grants, PermissionAction.READ, PermissionModule.FINANCE)
    assert not is_permitted(grants, PermissionAction.DELETE, PermissionModule.FINANCE)
    assert not is_permitted(grants, PermissionAction.READ, PermissionModule.STUDENT)


def test_permission_key_code():
    assert READ_FINANCE.code == "FINANCE:READ"
