"""Session-scoped storage for the Story Forge engine."""

from __future__ import annotations

from story_forge.storage.correction_log import CorrectionEntry, CorrectionLog


__all__ = [
    "CorrectionEntry",
    "CorrectionLog",
]
