from __future__ import annotations

from pathlib import Path

from platformdirs import user_data_dir

APP_NAME = "Calm Calendar"
APP_AUTHOR = "CalmChimp"
DATA_DIR = Path(user_data_dir(APP_NAME, APP_AUTHOR))
JOURNAL_FILE = DATA_DIR / "event_journal.jsonl"
LOG_FILE = DATA_DIR / "calm_calendar.log"
