from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from ..core.config import JOURNAL_FILE, LOG_FILE
from ..domain.enums import ViewMode

load_dotenv()


@dataclass(frozen=True)
class CalendarSettings:
    timezone: str = "UTC"
    default_view: ViewMode = ViewMode.MONTH
    agenda_days: int = 30
    default_event_type: str = "default"
    default_event_color: str = "#3b82f6"

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass(frozen=True)
class IdentitySettings:
    workspace_id: str = ""
    current_user_id: str = "current-user"


@dataclass(frozen=True)
class StorageSettings:
    journal_file: Path = JOURNAL_FILE


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"
    log_file: Path = LOG_FILE


@dataclass(frozen=True)
class AppSettings:
    calendar: CalendarSettings = field(default_factory=CalendarSettings)
    identity: IdentitySettings = field(default_factory=IdentitySettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _timezone_from_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        ZoneInfo(raw)
    except (ZoneInfoNotFoundError, ValueError):
        return default
    return raw


def _view_from_env(name: str, default: ViewMode) -> ViewMode:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return ViewMode(raw.strip().lower())
    except ValueError:
        return default


def _path_from_env(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    return Path(raw).expanduser() if raw else default


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    calendar = CalendarSettings(
        timezone=_timezone_from_env("CALM_CALENDAR_TIMEZONE", "UTC"),
        default_view=_view_from_env("CALM_CALENDAR_DEFAULT_VIEW", ViewMode.MONTH),
        agenda_days=_int_from_env("CALM_CALENDAR_AGENDA_DAYS", 30),
        default_event_type=os.getenv("CALM_CALENDAR_DEFAULT_EVENT_TYPE", "default"),
        default_event_color=os.getenv("CALM_CALENDAR_DEFAULT_EVENT_COLOR", "#3b82f6"),
    )

    identity = IdentitySettings(
        workspace_id=os.getenv("CALM_WORKSPACE_ID", ""),
        current_user_id=os.getenv("CALM_CURRENT_USER_ID", "current-user"),
    )

    storage = StorageSettings(journal_file=_path_from_env("CALM_JOURNAL_FILE", JOURNAL_FILE))

    logging_settings = LoggingSettings(
        level=os.getenv("CALM_LOG_LEVEL", "INFO").upper(),
        log_file=_path_from_env("CALM_LOG_FILE", LOG_FILE),
    )

    return AppSettings(calendar=calendar, identity=identity, storage=storage, logging=logging_settings)
