"""
Pure permission resolution over the role-permission graph.

Nothing here touches the database: services.authz_service loads a user's
role grants and hands them to resolve_permissions().
"""
from collections.abc import Iterable
from dataclasses import dataclass, field
from itertools import product
from typing import NamedTuple

from core.enums import PermissionAction, PermissionModule


class PermissionKey(NamedTuple):
    """An (action, subject) pair, e.g. (READ, FINANCE)"""

    action: PermissionAction
    subject: PermissionModule

    @property
    def code(self) -> str:
        return f"{self.subject.value}:{self.action.value}"


PERMISSION_CATALOG: frozenset[PermissionKey] = frozenset(
    PermissionKey(action, module)
    for module, action in product(PermissionModule, PermissionAction)
)


@dataclass(frozen=True)
class RoleGrant:
    """What a single role contributes to its holders"""

    role_name: str
    grants_all: bool = False
    permissions: frozenset[PermissionKey] = field(default_factory=frozenset)


def resolve_permissions(grants: Iterable[RoleGrant]) -> frozenset[PermissionKey]:
    """
    Union of the permissions of every role a user holds.

    A role flagged grants_all contributes the whole catalog. No roles
    resolves to the empty set.
    """
    resolved: set[PermissionKey] = set()
    for grant in grants:
        if grant.grants_all:
            return PERMISSION_CATALOG
        resolved |= grant.permissions
    return frozenset(resolved)


def is_permitted(
    grants: Iterable[RoleGrant], action: PermissionAction, subject: PermissionModule
) -> bool:
    return PermissionKey(action, subject) in resolve_permissions(grants)
