from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import orjson

from ..core.config import JOURNAL_FILE
from ..domain import CalendarEvent, ChangeAction

SCHEMA_VERSION = 1


class EventJournal:
    """Append-only log of event mutations, one JSON document per line.

    Each recorded mutation appends a single line, so writes stay constant
    in cost however long the journal grows. Instances are callable and can
    be registered directly as a mutation hook on a ``ServiceContext``.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or JOURNAL_FILE
        self._entries: Optional[List[Dict[str, Any]]] = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> List[Dict[str, Any]]:
        if self._entries is None:
            self._entries = []
            if self._path.exists():
                for line in self._path.read_bytes().splitlines():
                    if line.strip():
                        self._entries.append(orjson.loads(line))
        return self._entries

    def _append(self, entry: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("ab") as handle:
            handle.write(orjson.dumps(entry) + b"\n")

    @staticmethod
    def utc_now() -> str:
        return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")

    def record(self, event: CalendarEvent, action: ChangeAction) -> Dict[str, Any]:
        entries = self._load()
        entry = {
            "token": f"tok_{len(entries) + 1:06d}",
            "schema_version": SCHEMA_VERSION,
            "action": ChangeAction(action).value,
            "event": event.to_record(),
            "timestamp": self.utc_now(),
        }
        self._append(entry)
        entries.append(entry)
        return entry

    __call__ = record

    def entries(self) -> List[Dict[str, Any]]:
        return list(self._load())

    def replay(self) -> List[CalendarEvent]:
        """Rebuild the latest event set from the log, in first-seen order."""

        latest: Dict[str, CalendarEvent] = {}
        for entry in self._load():
            event = CalendarEvent.from_record(entry["event"])
            if entry["action"] == ChangeAction.DELETED.value:
                latest.pop(event.id, None)
            else:
                latest[event.id] = event
        return list(latest.values())


__all__ = ["EventJournal", "SCHEMA_VERSION"]
