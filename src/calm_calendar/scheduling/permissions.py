from __future__ import annotations

from typing import Dict, Union

from ..domain import PermissionSet, WorkspaceRole

NO_PERMISSIONS = PermissionSet()

# Each row lists all eight grants explicitly.
ROLE_PERMISSIONS: Dict[WorkspaceRole, PermissionSet] = {
    WorkspaceRole.OWNER: PermissionSet(
        can_create_events=True,
        can_edit_events=True,
        can_delete_events=True,
        can_manage_members=True,
        can_manage_integrations=True,
        can_manage_settings=True,
        can_view_all_events=True,
        can_export_calendar=True,
    ),
    WorkspaceRole.ADMIN: PermissionSet(
        can_create_events=True,
        can_edit_events=True,
        can_delete_events=True,
        can_manage_members=True,
        can_manage_integrations=True,
        can_manage_settings=False,
        can_view_all_events=True,
        can_export_calendar=True,
    ),
    WorkspaceRole.MEMBER: PermissionSet(
        can_create_events=True,
        can_edit_events=True,
        can_delete_events=False,
        can_manage_members=False,
        can_manage_integrations=False,
        can_manage_settings=False,
        can_view_all_events=True,
        can_export_calendar=False,
    ),
    WorkspaceRole.VIEWER: PermissionSet(
        can_create_events=False,
        can_edit_events=False,
        can_delete_events=False,
        can_manage_members=False,
        can_manage_integrations=False,
        can_manage_settings=False,
        can_view_all_events=True,
        can_export_calendar=False,
    ),
}


def resolve(role: Union[WorkspaceRole, str, None]) -> PermissionSet:
    """Capabilities granted to ``role``; anything unrecognised gets none."""

    try:
        key = WorkspaceRole(role)
    except (TypeError, ValueError):
        return NO_PERMISSIONS
    return ROLE_PERMISSIONS.get(key, NO_PERMISSIONS)


__all__ = ["NO_PERMISSIONS", "ROLE_PERMISSIONS", "resolve"]
