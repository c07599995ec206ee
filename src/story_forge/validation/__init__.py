"""Validation and correction of generated content.

Exports:
    validate_and_correct: Repair a decoded JSON value against its field table.
    Corrector: Reusable corrector bound to a set of tables.
    CorrectionResult: Typed value plus the corrections applied.
    load_schema_tables: Read and check a field table file.
"""

from __future__ import annotations

from story_forge.validation.corrector import (
    MODEL_FOR_KIND,
    CorrectionResult,
    Corrector,
    validate_and_correct,
)
from story_forge.validation.schemas import (
    SchemaTables,
    clear_schema_cache,
    get_schema_tables,
    load_schema_tables,
    parse_schema_tables,
)


__all__ = [
    "MODEL_FOR_KIND",
    "CorrectionResult",
    "Corrector",
    "validate_and_correct",
    "SchemaTables",
    "clear_schema_cache",
    "get_schema_tables",
    "load_schema_tables",
    "parse_schema_tables",
]
