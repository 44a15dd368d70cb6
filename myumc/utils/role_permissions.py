"""
Role groups for MyUMC users.

Every user carries exactly one role (``users.user_type``). Routers ask the
``role_allows_*`` helpers rather than comparing role strings directly.
"""

from typing import FrozenSet, Optional
from enum import Enum


ROLE_ADMINISTRATOR = "Administrator"
ROLE_DEVELOPER = "Developer"
ROLE_GUEST = "Guest"
ROLE_MEMBER = "Member"
ROLE_CHURCH_LEADER = "ChurchLeader"

# Members, content, events and the store
MANAGE_ROLES: FrozenSet[str] = frozenset({ROLE_ADMINISTRATOR, ROLE_CHURCH_LEADER})
# Organizations and audit trail
PLATFORM_ROLES: FrozenSet[str] = frozenset({ROLE_ADMINISTRATOR, ROLE_DEVELOPER})
# Roles anyone may pick when registering; the rest need a platform admin
SELF_SERVICE_ROLES: FrozenSet[str] = frozenset({ROLE_MEMBER, ROLE_GUEST})


class RoleEnum(str, Enum):
    """Enum for user roles used in schemas and validation."""
    administrator = ROLE_ADMINISTRATOR
    developer = ROLE_DEVELOPER
    guest = ROLE_GUEST
    member = ROLE_MEMBER
    church_leader = ROLE_CHURCH_LEADER


def role_allows_manage(role: Optional[str]) -> bool:
    return role in MANAGE_ROLES


def role_allows_platform(role: Optional[str]) -> bool:
    return role in PLATFORM_ROLES


def role_allows_self_registration(role: Optional[str]) -> bool:
    return role in SELF_SERVICE_ROLES
