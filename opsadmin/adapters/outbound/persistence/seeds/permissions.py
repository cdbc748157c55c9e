# opsadmin/adapters/outbound/persistence/seeds/permissions.py

"""
Seed for the permission grid, the admin role and the admin user.

Running it twice changes nothing.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.configuration.config import Settings
from opsadmin.adapters.outbound.persistence.models import Permission, Role, User
from opsadmin.adapters.outbound.security.auth_user_manager import UserAuthManager

# Resources and the actions granted on each
resources = ["user", "role", "permission", "audit_log"]
actions = ["create", "read", "update", "delete"]

# Role -> permission names ("*" = every seeded permission)
role_permissions = {
    "admin": ["*"],
    "auditor": ["audit_log:read", "user:read", "role:read", "permission:read"],
}

role_descriptions = {
    "admin": "Full access",
    "auditor": "Read-only access to the identity store and the audit trail",
}


async def _get_or_create_permissions(db: AsyncSession, logger: logging.Logger) -> Dict[str, Permission]:
    permission_objs = {}
    for resource in resources:
        for action in actions:
            name = f"{resource}:{action}"
            result = await db.execute(select(Permission).where(Permission.name == name))
            perm = result.scalar_one_or_none()
            if not perm:
                perm = Permission(
                    name=name,
                    description=f"Can {action} {resource.replace('_', ' ')}",
                    resource=resource,
                    action=action,
                )
                db.add(perm)
                logger.info(f"Permission '{name}' created")
            permission_objs[name] = perm
    await db.flush()
    return permission_objs


async def _get_or_create_role(
        db: AsyncSession, name: str, permissions: List[Permission], logger: logging.Logger
) -> Role:
    result = await db.execute(select(Role).where(Role.name == name))
    role = result.scalar_one_or_none()
    if not role:
        role = Role(name=name, description=role_descriptions.get(name), permissions=[])
        db.add(role)
        logger.info(f"Role '{name}' created")

    for perm in permissions:
        if perm not in role.permissions:
            role.permissions.append(perm)
            logger.info(f"Permission '{perm.name}' added to role '{name}'")
    return role


async def run_permissions_seed(
        db: AsyncSession, settings: Settings, logger: Optional[logging.Logger] = None
) -> None:
    logger = (logger or logging.getLogger("opsadmin")).getChild("seeds")
    try:
        permission_objs = await _get_or_create_permissions(db, logger)

        role_objs = {}
        for role_name, names in role_permissions.items():
            perms = list(permission_objs.values()) if names == ["*"] else [permission_objs[n] for n in names]
            role_objs[role_name] = await _get_or_create_role(db, role_name, perms, logger)
        await db.flush()

        result = await db.execute(select(User).where(User.email == settings.ADMIN_EMAIL))
        admin = result.scalar_one_or_none()
        if not admin:
            admin = User(
                name=settings.ADMIN_NAME,
                email=settings.ADMIN_EMAIL,
                password_hash=await UserAuthManager.hash_password(settings.ADMIN_PASSWORD),
                status="active",
                roles=[role_objs["admin"]],
            )
            db.add(admin)
            logger.info(f"Admin user '{settings.ADMIN_EMAIL}' created")
        else:
            logger.info(f"Admin user '{settings.ADMIN_EMAIL}' already exists")

        await db.commit()
        logger.info("Permission seed finished")
    except Exception as e:
        await db.rollback()
        logger.error(f"Error running seed: {e}")
        raise
