"""Stateful services built on the pure scheduling components."""

from __future__ import annotations

from .calendar import CalendarStateMachine
from .context import MutationHook, ServiceContext
from .workspace import WorkspaceDirectory

__all__ = ["CalendarStateMachine", "MutationHook", "ServiceContext", "WorkspaceDirectory"]
