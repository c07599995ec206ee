"""Field tables driving the generated-content corrector.

The tables live in a static JSON file bundled with the package
(``validation/data/schemas.json``). Each :class:`SchemaKind` names a root
record; each record is an ordered mapping of wire field names to field
specifications. Field order matters: a field may only reference fields
declared before it (``max_field``, ``default_from``, ``required_when``).

A deployment can point ``STORY_FORGE_VALIDATION_SCHEMA_TABLE_PATH`` at a
replacement file with the same structure.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

from story_forge.core.config import get_settings
from story_forge.core.exceptions import SchemaTableError
from story_forge.core.logging import get_logger
from story_forge.models.enums import SchemaKind


logger = get_logger(__name__)

FIELD_TYPES = frozenset({"int", "float", "str", "id", "bool", "enum", "str_list", "object", "list"})
"""Field types the corrector knows how to repair."""

_REFERENCING_KEYS = ("max_field", "default_from")


@dataclass(frozen=True)
class SchemaTables:
    """Loaded and checked field tables.

    Attributes:
        kinds: Root description per schema kind.
        records: Field specifications per record name.
        source: Where the tables were read from.
    """

    kinds: dict[str, dict[str, Any]]
    records: dict[str, dict[str, Any]]
    source: str

    def kind(self, kind: SchemaKind) -> dict[str, Any]:
        return self.kinds[kind.value]

    def fields(self, record: str) -> dict[str, dict[str, Any]]:
        return self.records[record]["fields"]

    def label_field(self, record: str) -> str | None:
        return self.records[record].get("label")


def _check_record(name: str, record: dict[str, Any], records: dict[str, Any], source: str) -> None:
    fields = record.get("fields")
    if not isinstance(fields, dict) or not fields:
        raise SchemaTableError(f"Record '{name}' has no fields", table_path=source)

    seen: list[str] = []
    for field_name, spec in fields.items():
        field_type = spec.get("type")
        if field_type not in FIELD_TYPES:
            raise SchemaTableError(
                f"Field '{name}.{field_name}' has unknown type {field_type!r}",
                table_path=source,
            )
        if field_type in ("object", "list") and spec.get("record") not in records:
            raise SchemaTableError(
                f"Field '{name}.{field_name}' references unknown record {spec.get('record')!r}",
                table_path=source,
            )
        if field_type == "enum":
            choices = spec.get("choices") or []
            if not choices:
                raise SchemaTableError(f"Enum '{name}.{field_name}' has no choices", table_path=source)
            if not spec.get("nullable") and spec.get("default") not in choices:
                raise SchemaTableError(
                    f"Enum '{name}.{field_name}' default is not one of its choices",
                    table_path=source,
                )
            for target in (spec.get("synonyms") or {}).values():
                if target is None and spec.get("nullable"):
                    continue
                if target not in choices:
                    raise SchemaTableError(
                        f"Enum '{name}.{field_name}' synonym target {target!r} is not a choice",
                        table_path=source,
                    )
        for key in _REFERENCING_KEYS:
            if key in spec and spec[key] not in seen:
                raise SchemaTableError(
                    f"Field '{name}.{field_name}' {key} must name an earlier field",
                    table_path=source,
                )
        condition = spec.get("required_when")
        if condition and condition.get("field") not in seen:
            raise SchemaTableError(
                f"Field '{name}.{field_name}' required_when must name an earlier field",
                table_path=source,
            )
        seen.append(field_name)


def parse_schema_tables(document: dict[str, Any], *, source: str = "<memory>") -> SchemaTables:
    """Check a decoded table document and wrap it.

    Args:
        document: Decoded JSON table document.
        source: Human-readable origin used in error messages.

    Returns:
        The checked tables.

    Raises:
        SchemaTableError: If a kind is missing or a record is inconsistent.
    """
    kinds = document.get("kinds")
    records = document.get("records")
    if not isinstance(kinds, dict) or not isinstance(records, dict):
        raise SchemaTableError("Table document needs 'kinds' and 'records' objects", table_path=source)

    for kind in SchemaKind:
        root = kinds.get(kind.value)
        if root is None:
            raise SchemaTableError("No table for schema kind", table_path=source, kind=kind.value)
        if root.get("root") not in ("object", "list") or root.get("record") not in records:
            raise SchemaTableError("Malformed root description", table_path=source, kind=kind.value)

    for name, record in records.items():
        _check_record(name, record, records, source)

    return SchemaTables(kinds=kinds, records=records, source=source)


def load_schema_tables(path: Path | None = None) -> SchemaTables:
    """Read field tables from a file, or the bundled file when no path is given.

    Args:
        path: Optional replacement table file.

    Returns:
        The checked tables.

    Raises:
        SchemaTableError: If the file cannot be read, decoded or checked.
    """
    if path is None:
        resource = resources.files("story_forge.validation") / "data" / "schemas.json"
        source = "story_forge.validation/data/schemas.json"
    else:
        resource = path
        source = str(path)

    try:
        document = json.loads(resource.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SchemaTableError(
            f"Cannot read field tables: {exc}",
            table_path=source,
        ) from exc

    tables = parse_schema_tables(document, source=source)
    logger.debug("Loaded field tables", source=source, records=len(tables.records))
    return tables


@lru_cache(maxsize=1)
def get_schema_tables() -> SchemaTables:
    """Get the configured field tables, loading them once.

    Returns:
        Tables from the settings override path, or the bundled tables.
    """
    return load_schema_tables(get_settings().validation.schema_table_path)


def clear_schema_cache() -> None:
    """Forget loaded tables so the next access rereads them."""
    get_schema_tables.cache_clear()


__all__ = [
    "FIELD_TYPES",
    "SchemaTables",
    "parse_schema_tables",
    "load_schema_tables",
    "get_schema_tables",
    "clear_schema_cache",
]
