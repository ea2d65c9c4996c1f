"""Persistence collaborators."""

from __future__ import annotations

from .journal import EventJournal

__all__ = ["EventJournal"]
