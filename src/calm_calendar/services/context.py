from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Callable, List
from uuid import uuid4

from ..config import AppSettings, get_settings
from ..domain import CalendarEvent, ChangeAction
from ..scheduling.time_range import localize

logger = logging.getLogger(__name__)

MutationHook = Callable[[CalendarEvent, ChangeAction], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_identifier(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:12]}"


@dataclass(slots=True)
class ServiceContext:
    """Ambient collaborators shared by the calendar services.

    ``current_user_id`` and ``workspace_id`` stand in for the identity the
    auth layer resolves; they fall back to the configured defaults.
    """

    settings: AppSettings = field(default_factory=get_settings)
    clock: Callable[[], datetime] = utc_now
    id_factory: Callable[[str], str] = new_identifier
    current_user_id: str = ""
    workspace_id: str = ""
    hooks: List[MutationHook] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.current_user_id:
            self.current_user_id = self.settings.identity.current_user_id
        if not self.workspace_id:
            self.workspace_id = self.settings.identity.workspace_id

    @property
    def tz(self) -> tzinfo:
        return self.settings.calendar.tzinfo

    def now(self) -> datetime:
        return localize(self.clock(), self.tz)

    def add_hook(self, hook: MutationHook) -> None:
        self.hooks.append(hook)

    def remove_hook(self, hook: MutationHook) -> None:
        if hook in self.hooks:
            self.hooks.remove(hook)

    def notify(self, event: CalendarEvent, action: ChangeAction) -> None:
        """Hand each hook its own snapshot; a failing hook never reaches the caller."""

        for hook in list(self.hooks):
            try:
                hook(event.snapshot(), action)
            except Exception:
                logger.exception("Mutation hook %r failed for %s %s", hook, action.value, event.id)
