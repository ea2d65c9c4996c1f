"""Pure scheduling components: time windows, day indexing, filtering, permissions."""

from __future__ import annotations

from .filters import apply_filters
from .indexer import index_by_day
from .permissions import resolve
from .time_range import compute_range, day_key, shift_anchor

__all__ = ["apply_filters", "compute_range", "day_key", "index_by_day", "resolve", "shift_anchor"]
