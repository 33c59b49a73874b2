"""
Role hierarchy (VIEWER < MOD < ADMIN).
"""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    VIEWER = "VIEWER"
    MOD = "MOD"
    ADMIN = "ADMIN"


ROLE_LEVEL: dict[str, int] = {
    Role.VIEWER.value: 1,
    Role.MOD.value: 2,
    Role.ADMIN.value: 3,
}


def role_level(role: Role | str) -> int:
    """Return the numeric level of *role*; unknown values rank below VIEWER."""
    value = role.value if isinstance(role, Role) else role
    return ROLE_LEVEL.get(value, 0)


def meets_min_role(actual: Role | str, required: Role | str) -> bool:
    """True if *actual* is at least as privileged as *required*."""
    return role_level(actual) >= role_level(required)
