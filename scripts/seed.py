"""
Create the schema and seed the permission catalog, default roles and the
first administrator. Safe to run repeatedly.

Usage:
    python -m scripts.seed
"""
import asyncio
from typing import TypedDict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

import models  # noqa: F401  (registers every table on Base.metadata)
from core.auth import get_password_hash
from core.config import Settings, get_settings
from core.database import AsyncSessionLocal, Base, engine
from core.enums import PermissionAction, PermissionModule, UserStatus
from core.rbac import PERMISSION_CATALOG, PermissionKey
from models.permission import Permission, RolePermission, UserRole
from models.role import Role
from models.user import User
from services.auth_service import ADMIN_ROLE_NAME


class RoleData(TypedDict):
    """Type definition for role configuration"""

    description: str
    permissions: list[PermissionKey]
    is_system: bool
    grants_all: bool


def _all_actions(*modules: PermissionModule) -> list[PermissionKey]:
    return [PermissionKey(action, module) for module in modules for action in PermissionAction]


DEFAULT_ROLES: dict[str, RoleData] = {
    ADMIN_ROLE_NAME: {
        "description": "Full system access with all permissions",
        "permissions": sorted(PERMISSION_CATALOG, key=lambda k: k.code),
        "is_system": True,
        "grants_all": True,
    },
    "Teacher": {
        "description": "Read access to the academic structure",
        "permissions": [
            PermissionKey(PermissionAction.READ, module)
            for module in (
                PermissionModule.ACADEMIC_YEAR,
                PermissionModule.CLASS_LEVEL,
                PermissionModule.SECTION,
                PermissionModule.SUBJECT,
            )
        ],
        "is_system": False,
        "grants_all": False,
    },
    "Clerk": {
        "description": "Manages staff, sections and subjects",
        "permissions": _all_actions(
            PermissionModule.STAFF, PermissionModule.SECTION, PermissionModule.SUBJECT
        ),
        "is_system": False,
        "grants_all": False,
    },
    "Accountant": {
        "description": "Manages fees, invoices and payments",
        "permissions": _all_actions(PermissionModule.FINANCE),
        "is_system": False,
        "grants_all": False,
    },
    "Student": {
        "description": "Default role for self-registered accounts",
        "permissions": [],
        "is_system": False,
        "grants_all": False,
    },
}


async def seed_permissions(db: AsyncSession) -> dict[PermissionKey, str]:
    """Create the module x action catalog. Returns mapping of key -> permission_id"""
    permission_map: dict[PermissionKey, str] = {}

    for key in sorted(PERMISSION_CATALOG, key=lambda k: k.code):
        result = await db.execute(
            select(Permission).where(
                Permission.action == key.action.value, Permission.subject == key.subject.value
            )
        )
        existing = result.scalar_one_or_none()
        if existing:
            permission_map[key] = existing.id
            continue

        permission = Permission(
            action=key.action.value,
            subject=key.subject.value,
            description=f"{key.action.value.title()} {key.subject.value.replace('_', ' ').lower()}",
        )
        db.add(permission)
        await db.flush()
        permission_map[key] = permission.id
        print(f"  ✓ Created permission: {key.code}")

    return permission_map


async def seed_roles(db: AsyncSession, permission_map: dict[PermissionKey, str]) -> dict[str, str]:
    """Create default roles with their permissions. Returns mapping of name -> role_id"""
    role_ids: dict[str, str] = {}

    for name, role_data in DEFAULT_ROLES.items():
        result = await db.execute(select(Role).where(Role.name == name))
        existing = result.scalar_one_or_none()
        if existing:
            print(f"  ℹ Role already exists: {name}")
            role_ids[name] = existing.id
            continue

        role = Role(
            name=name,
            description=role_data["description"],
            is_system=role_data["is_system"],
            grants_all=role_data["grants_all"],
        )
        db.add(role)
        await db.flush()
        role_ids[name] = role.id

        for key in role_data["permissions"]:
            db.add(RolePermission(role_id=role.id, permission_id=permission_map[key]))
        await db.flush()
        print(f"  ✓ Created role: {name} with {len(role_data['permissions'])} permission(s)")

    return role_ids


async def seed_admin(db: AsyncSession, admin_role_id: str, settings: Settings) -> User:
    """Create the default administrator and make sure it holds the Admin role"""
    email = settings.admin_email.lower()
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(
            name="Administrator",
            email=email,
            password_hash=get_password_hash(settings.admin_password),
            status=UserStatus.ACTIVE.value,
        )
        db.add(user)
        await db.flush()
        print(f"  ✓ Created admin user: {email}")
    else:
        print(f"  ℹ Admin user already exists: {email}")

    result = await db.execute(
        select(UserRole).where(UserRole.user_id == user.id, UserRole.role_id == admin_role_id)
    )
    if result.scalar_one_or_none() is None:
        db.add(UserRole(user_id=user.id, role_id=admin_role_id))
        await db.flush()
        print(f"  ✓ Assigned {ADMIN_ROLE_NAME} role to {email}")

    return user


async def seed(db: AsyncSession, settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    permission_map = await seed_permissions(db)
    print(f"  ✓ Seeded {len(permission_map)} permissions")
    role_ids = await seed_roles(db, permission_map)
    await seed_admin(db, role_ids[ADMIN_ROLE_NAME], settings)


async def main():
    print("\n🌱 Seeding Hiigsi School Admin...\n")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        await seed(db)
        await db.commit()

    await engine.dispose()
    print("\n✅ Seeding completed successfully!")


if __name__ == "__main__":
    asyncio.run(main())
