"""
Capability checks consumed from the authentication layer.

The engine never authenticates anyone. It only needs a yes/no answer to
``has_permission(name)``. Callers guard the export entry point with
``export_data`` and analytics views with ``view_analytics``.
"""

from typing import Dict, FrozenSet, Iterable, Protocol

from .errors import PermissionDenied

VIEW_ANALYTICS = "view_analytics"
EXPORT_DATA = "export_data"
MANAGE_USERS = "manage_users"

ROLE_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "admin": frozenset({
        "create_survey", "edit_survey", "delete_survey", VIEW_ANALYTICS,
        MANAGE_USERS, EXPORT_DATA, "view_all_surveys", "publish_survey",
    }),
    "manager": frozenset({
        "create_survey", "edit_survey", "delete_survey", VIEW_ANALYTICS,
        EXPORT_DATA, "view_team_surveys", "publish_survey",
    }),
    "user": frozenset({
        "create_survey", "edit_survey", VIEW_ANALYTICS, "view_own_surveys",
    }),
}


class CapabilityCheck(Protocol):
    def has_permission(self, name: str) -> bool:
        ...


class RolePermissions:
    """Capability check backed by the static role table. Unknown roles get ``user``."""

    def __init__(self, role: str):
        self.role = role if role in ROLE_PERMISSIONS else "user"
        self.permissions = ROLE_PERMISSIONS[self.role]

    def has_permission(self, name: str) -> bool:
        return name in self.permissions


class GrantedPermissions:
    """Capability check over an explicit set of names."""

    def __init__(self, names: Iterable[str] = ()):
        self.permissions = frozenset(names)

    def has_permission(self, name: str) -> bool:
        return name in self.permissions


def require_permission(checker: CapabilityCheck, name: str) -> None:
    if checker is None or not checker.has_permission(name):
        raise PermissionDenied(name)
