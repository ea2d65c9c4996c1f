"""Calm Calendar state and scheduling engine."""

from __future__ import annotations

from .core import NotFoundError, ValidationError
from .services import CalendarStateMachine, ServiceContext, WorkspaceDirectory

__all__ = ["CalendarStateMachine", "NotFoundError", "ServiceContext", "ValidationError", "WorkspaceDirectory"]
