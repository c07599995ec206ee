"""Session-scoped audit log of generated-content corrections.

Every batch of corrections the corrector applies to one generated value is
appended as a timestamped entry. The log is append-only for the lifetime of
a session and is emptied only by an explicit operator action; it never
gates gameplay.

The log is an owned handle passed to whoever records into it. A lock guards
append, snapshot and clear, so concurrent requests never lose or interleave
entries and readers always see a consistent prefix.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from story_forge.core.logging import get_logger


logger = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class CorrectionEntry:
    """One recorded batch of corrections.

    Attributes:
        timestamp: When the batch was recorded (UTC).
        corrections: Correction strings, in the order they were applied.
        source: Optional label of what produced the content.
    """

    timestamp: datetime
    corrections: tuple[str, ...]
    source: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for display or export."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "warnings": list(self.corrections),
            "source": self.source,
        }


# =============================================================================
# Log
# =============================================================================


class CorrectionLog:
    """Append-only, clearable sequence of correction entries.

    Args:
        clock: Source of entry timestamps; UTC wall time by default.

    Example:
        >>> log = CorrectionLog()
        >>> log.record(["clamped health from 150 to 100"], source="combat_scenario")
        >>> len(log)
        1
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._clock = clock
        self._entries: list[CorrectionEntry] = []
        self._lock = threading.Lock()

    def record(self, corrections: Iterable[str], *, source: str | None = None) -> CorrectionEntry | None:
        """Append a batch of corrections.

        Args:
            corrections: Correction strings for one generated value.
            source: Optional label of what produced the content.

        Returns:
            The appended entry, or None when there was nothing to record.
        """
        batch = tuple(corrections)
        if not batch:
            return None

        with self._lock:
            entry = CorrectionEntry(timestamp=self._clock(), corrections=batch, source=source)
            self._entries.append(entry)
            size = len(self._entries)

        logger.info("Corrections recorded", source=source, count=len(batch), log_size=size)
        return entry

    def list_entries(self) -> tuple[CorrectionEntry, ...]:
        """Snapshot the log, oldest entry first."""
        with self._lock:
            return tuple(self._entries)

    def clear(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        logger.info("Correction log cleared", removed=removed)
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = [
    "CorrectionEntry",
    "CorrectionLog",
]
