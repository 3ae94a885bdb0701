"""
Role gates for the action layer.

The gates never raise: they return the profile when it passes and None
otherwise, so each action decides what to report.
"""

from collections.abc import Iterable
from uuid import UUID

from src.domain.entities import Profile, UserRole


def require_auth(user: Profile | None) -> Profile | None:
    return user


def require_admin(user: Profile | None) -> Profile | None:
    if user is None or user.role != "admin":
        return None
    return user


def require_customer(user: Profile | None) -> Profile | None:
    if user is None or user.role != "customer":
        return None
    return user


def has_role(user: Profile | None, role: UserRole) -> bool:
    return user is not None and user.role == role


def has_any_role(user: Profile | None, roles: Iterable[UserRole]) -> bool:
    return user is not None and user.role in set(roles)


def can_access_resource(user: Profile | None, owner_id: UUID) -> bool:
    """Admins can access everything; everyone else only what they own."""
    if user is None:
        return False
    if user.role == "admin":
        return True
    return user.id == owner_id
