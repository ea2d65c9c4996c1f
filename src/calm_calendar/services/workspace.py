from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from ..core.errors import NotFoundError
from ..domain import PermissionSet, WorkspaceMember, WorkspaceRole
from ..scheduling.permissions import NO_PERMISSIONS, resolve
from .context import ServiceContext

logger = logging.getLogger(__name__)


def parse_role(value: Union[WorkspaceRole, str]) -> WorkspaceRole:
    try:
        return WorkspaceRole(value)
    except ValueError as exc:
        raise NotFoundError(f"Unknown workspace role: {value!r}") from exc


@dataclass(slots=True)
class WorkspaceDirectory:
    """Members of the current workspace and the permissions their roles grant."""

    context: ServiceContext = field(default_factory=ServiceContext)
    members_by_id: Dict[str, WorkspaceMember] = field(default_factory=dict)

    @property
    def members(self) -> List[WorkspaceMember]:
        return list(self.members_by_id.values())

    def add_member(
        self,
        *,
        user_id: str,
        email: str,
        name: str = "",
        role: Union[WorkspaceRole, str] = WorkspaceRole.VIEWER,
    ) -> WorkspaceMember:
        member = WorkspaceMember(
            id=self.context.id_factory("mem"),
            workspace_id=self.context.workspace_id,
            user_id=user_id,
            email=email,
            name=name,
            role=parse_role(role),
            joined_at=self.context.now(),
        )
        self.members_by_id[member.id] = member
        logger.info("Added %s to workspace %s as %s", user_id, member.workspace_id, member.role.value)
        return member

    def _require(self, member_id: str) -> WorkspaceMember:
        member = self.members_by_id.get(member_id)
        if member is None:
            raise NotFoundError(f"Member {member_id} not found")
        return member

    def update_member_role(self, member_id: str, role: Union[WorkspaceRole, str]) -> WorkspaceMember:
        member = self._require(member_id)
        member.role = parse_role(role)
        logger.info("Member %s is now %s", member_id, member.role.value)
        return member

    def set_active(self, member_id: str, active: bool) -> WorkspaceMember:
        member = self._require(member_id)
        member.is_active = active
        return member

    def remove_member(self, member_id: str) -> WorkspaceMember:
        member = self._require(member_id)
        del self.members_by_id[member_id]
        logger.info("Removed member %s", member_id)
        return member

    def member_for_user(self, user_id: str) -> Optional[WorkspaceMember]:
        for member in self.members_by_id.values():
            if member.user_id == user_id:
                return member
        return None

    def permissions_for(self, user_id: Optional[str] = None) -> PermissionSet:
        """Users without a membership are treated as viewers; deactivated members get nothing."""

        member = self.member_for_user(user_id or self.context.current_user_id)
        if member is None:
            return resolve(WorkspaceRole.VIEWER)
        if not member.is_active:
            return NO_PERMISSIONS
        return resolve(member.role)

    def has_permission(self, capability: str, user_id: Optional[str] = None) -> bool:
        return self.permissions_for(user_id).allows(capability)


__all__ = ["WorkspaceDirectory", "parse_role"]
