"""Validation and correction of generated JSON content.

The language model produces loosely structured JSON. This module enforces
the game's data invariants on that output, repairs every violation with an
explicit rule from the field tables, and reports each repair as a short
correction string for the audit log.

Repairs never depend on anything but the input and the tables, so the same
input always yields the same value and the same corrections, and feeding a
corrected value back in yields no further corrections.

Correction strings name fields relative to the record being repaired. Each
element of a list is its own record; nested objects use dotted paths::

    clamped health from 150 to 100
    defaulted accuracy to 75
    defaulted environment.terrain to open (was lava-field)
    normalized environment.size from cramped to small
    regenerated id for Goblin Archer

Example:
    >>> result = validate_and_correct(raw_scenario, SchemaKind.COMBAT_SCENARIO)
    >>> result.value.environment.terrain
    <Terrain.OPEN: 'open'>
    >>> result.corrections
    ('defaulted environment.terrain to open (was absent)',)
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_snake

from story_forge.core.exceptions import MalformedInputError, SchemaTableError
from story_forge.core.logging import get_logger
from story_forge.models.combat import CombatEntity, CombatScenario
from story_forge.models.content import CharacterProfile, Item, LoreEntry, NPCProfile, QuestArc
from story_forge.models.enums import SchemaKind
from story_forge.validation.schemas import SchemaTables, get_schema_tables


logger = get_logger(__name__)

MODEL_FOR_KIND: dict[SchemaKind, type[BaseModel]] = {
    SchemaKind.COMBAT_SCENARIO: CombatScenario,
    SchemaKind.COMBAT_ENTITY: CombatEntity,
    SchemaKind.CHARACTER_PROFILE: CharacterProfile,
    SchemaKind.ITEM_LIST: Item,
    SchemaKind.LORE_ENTRY_LIST: LoreEntry,
    SchemaKind.NPC_LIST: NPCProfile,
    SchemaKind.QUEST_ARC_LIST: QuestArc,
}
"""Typed model each kind's root record (or list element) is parsed into."""

_MISSING: Any = object()
_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
_ENUM_KEY_PATTERN = re.compile(r"[\s\-]+")
_TRUE_WORDS = frozenset({"true", "yes", "1"})
_FALSE_WORDS = frozenset({"false", "no", "0"})


# =============================================================================
# Helpers
# =============================================================================


def _show(value: Any) -> str:
    """Render a value for a correction string."""
    if value is _MISSING:
        return "absent"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value if value else '""'
    if isinstance(value, (int, float)):
        return repr(value)
    text = json.dumps(value, default=str, separators=(",", ":"))
    return text if len(text) <= 40 else f"{text[:37]}..."


def _slug(text: str) -> str:
    return _SLUG_PATTERN.sub("-", text.lower()).strip("-")


def _enum_key(text: str) -> str:
    return _ENUM_KEY_PATTERN.sub("_", text.strip().lower())


def _lookup(raw: dict[str, Any], name: str, spec: dict[str, Any]) -> Any:
    """Find a field by wire name, snake_case name, then declared aliases."""
    for key in (name, to_snake(name), *spec.get("aliases", ())):
        if key in raw:
            return raw[key]
    return _MISSING


def _as_number(value: Any, integral: bool) -> tuple[int | float, bool] | None:
    """Coerce a JSON value to a number.

    Returns:
        ``(number, coerced)`` where ``coerced`` flags a lossy or textual
        conversion, or None when the value is not numeric.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return (value, False) if integral else (float(value), False)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if not integral:
            return value, False
        if value.is_integer():
            return int(value), False
        return math.floor(value + 0.5), True
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        if not math.isfinite(parsed):
            return None
        return (math.floor(parsed + 0.5) if integral else parsed), True
    return None


def _as_bool(value: Any) -> bool | None:
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    return None


# =============================================================================
# Result
# =============================================================================


@dataclass(frozen=True)
class CorrectionResult:
    """Outcome of validating one generated value.

    Attributes:
        kind: The schema kind that was applied.
        value: Typed model, or a tuple of models for list kinds.
        data: The corrected JSON value the model was parsed from.
        corrections: Ordered, human-readable repairs, empty when none were needed.
    """

    kind: SchemaKind
    value: Any
    data: Any
    corrections: tuple[str, ...]

    @property
    def was_corrected(self) -> bool:
        return bool(self.corrections)


# =============================================================================
# Repair Run
# =============================================================================


class _RepairRun:
    """State of a single validate-and-correct call.

    Holds the corrections gathered so far, the ids claimed per id scope,
    and the id lists published by earlier fields for later references.
    """

    def __init__(self, tables: SchemaTables) -> None:
        self.tables = tables
        self.corrections: list[str] = []
        self._quiet_depth = 0
        self._scopes: dict[str, set[str]] = {}
        self._published: dict[str, list[str]] = {}

    def note(self, message: str) -> None:
        if not self._quiet_depth:
            self.corrections.append(message)

    @contextmanager
    def quiet(self) -> Iterator[None]:
        """Suppress corrections while filling in table defaults."""
        self._quiet_depth += 1
        try:
            yield
        finally:
            self._quiet_depth -= 1

    # -------------------------------------------------------------------------
    # Roots and records
    # -------------------------------------------------------------------------

    def run(self, raw: Any, kind: SchemaKind) -> Any:
        root = self.tables.kind(kind)
        record = root["record"]

        if root["root"] == "object":
            if not isinstance(raw, dict):
                raise MalformedInputError(
                    f"Expected a JSON object, got {type(raw).__name__}",
                    kind=kind.value,
                )
            data = self.repair_record(raw, record)
            if "id" in self.tables.fields(record):
                self._assign_ids([data], record, scope=record, reserved=())
            return data

        envelope = root.get("envelope", [])
        items = raw
        if isinstance(raw, dict):
            key = next((name for name in envelope if name in raw), None)
            if key is None:
                raise MalformedInputError(
                    "Expected a JSON array or an object wrapping one",
                    kind=kind.value,
                    details={"accepted_keys": envelope},
                )
            items = raw[key]
        if not isinstance(items, list):
            raise MalformedInputError(
                f"Expected a JSON array, got {type(items).__name__}",
                kind=kind.value,
            )
        path = envelope[0] if envelope else kind.value
        return self._repair_list(path, root, items, {})

    def repair_record(self, raw: dict[str, Any], record: str, prefix: str = "") -> dict[str, Any]:
        """Repair one record field by field, in table order.

        Unknown keys in ``raw`` are dropped.
        """
        out: dict[str, Any] = {}
        for name, spec in self.tables.fields(record).items():
            value = _lookup(raw, name, spec)
            handler = getattr(self, f"_repair_{spec['type']}")
            out[name] = handler(f"{prefix}{name}", spec, value, out)
        return out

    @staticmethod
    def _required(spec: dict[str, Any], out: dict[str, Any]) -> bool:
        condition = spec.get("required_when")
        if condition is not None:
            return out.get(condition["field"]) in condition["in"]
        return bool(spec.get("required"))

    # -------------------------------------------------------------------------
    # Scalars
    # -------------------------------------------------------------------------

    def _repair_int(self, path: str, spec: dict[str, Any], value: Any, out: dict[str, Any]) -> Any:
        return self._repair_number(path, spec, value, out, integral=True)

    def _repair_float(self, path: str, spec: dict[str, Any], value: Any, out: dict[str, Any]) -> Any:
        return self._repair_number(path, spec, value, out, integral=False)

    def _bounds(self, spec: dict[str, Any], out: dict[str, Any]) -> tuple[Any, Any]:
        low = spec.get("min")
        high = spec.get("max")
        limit_field = spec.get("max_field")
        if limit_field is not None and out.get(limit_field) is not None:
            limit = out[limit_field]
            high = limit if high is None else min(high, limit)
        return low, high

    def _numeric_default(self, spec: dict[str, Any], out: dict[str, Any], integral: bool) -> int | float:
        source = spec.get("default_from")
        if source is not None and out.get(source) is not None:
            number = out[source]
        else:
            number = spec.get("default", 0)
        low, high = self._bounds(spec, out)
        if low is not None:
            number = max(number, low)
        if high is not None:
            number = min(number, high)
        return int(number) if integral else float(number)

    def _repair_number(
        self,
        path: str,
        spec: dict[str, Any],
        value: Any,
        out: dict[str, Any],
        *,
        integral: bool,
    ) -> int | float | None:
        required = self._required(spec, out)

        if value is _MISSING or value is None:
            if spec.get("nullable") and not required:
                return None
            number = self._numeric_default(spec, out, integral)
            if required:
                self.note(f"defaulted {path} to {_show(number)}")
            return number

        parsed = _as_number(value, integral)
        if parsed is None:
            number = self._numeric_default(spec, out, integral)
            self.note(f"defaulted {path} to {_show(number)} (was {_show(value)})")
            return number

        number, coerced = parsed
        if coerced:
            self.note(f"coerced {path} from {_show(value)} to {_show(number)}")

        low, high = self._bounds(spec, out)
        clamped = number
        if low is not None and clamped < low:
            clamped = low
        if high is not None and clamped > high:
            clamped = high
        if clamped != number:
            clamped = int(clamped) if integral else float(clamped)
            self.note(f"clamped {path} from {_show(number)} to {_show(clamped)}")
        return clamped

    def _reference_set(self, spec: dict[str, Any]) -> set[str]:
        return set(self._published.get(spec["ref"], ())) | set(spec.get("ref_extra", ()))

    def _string_default(self, spec: dict[str, Any]) -> str:
        source = spec.get("default_ref")
        if source and self._published.get(source):
            return self._published[source][0]
        return spec.get("default", "")

    def _repair_str(self, path: str, spec: dict[str, Any], value: Any, out: dict[str, Any]) -> str | None:
        required = self._required(spec, out)

        if isinstance(value, (int, float)) and not isinstance(value, bool):
            text = str(value)
            self.note(f"coerced {path} from {_show(value)} to {text}")
            value = text

        usable = isinstance(value, str) and (bool(value.strip()) or not spec.get("non_empty"))
        if usable and spec.get("ref") and value not in self._reference_set(spec):
            usable = False
        if usable:
            return value

        absent = value is _MISSING or value is None
        if spec.get("nullable") and not required:
            if not absent:
                self.note(f"defaulted {path} to null (was {_show(value)})")
            return None

        text = self._string_default(spec)
        if not absent:
            self.note(f"defaulted {path} to {_show(text)} (was {_show(value)})")
        elif required:
            self.note(f"defaulted {path} to {_show(text)}")
        return text

    def _repair_id(self, path: str, spec: dict[str, Any], value: Any, out: dict[str, Any]) -> str:
        # Uniqueness and emptiness are settled by the enclosing list
        if isinstance(value, str):
            return value.strip()
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return ""

    def _repair_bool(self, path: str, spec: dict[str, Any], value: Any, out: dict[str, Any]) -> bool:
        default = bool(spec.get("default", False))
        if isinstance(value, bool):
            result = value
        elif value is _MISSING or value is None:
            result = default
            if self._required(spec, out):
                self.note(f"defaulted {path} to {_show(result)}")
        else:
            parsed = _as_bool(value)
            if parsed is None:
                result = default
                self.note(f"defaulted {path} to {_show(result)} (was {_show(value)})")
            else:
                result = parsed
                self.note(f"coerced {path} from {_show(value)} to {_show(result)}")

        const = spec.get("const")
        if const is not None and result != const:
            self.note(f"reset {path} from {_show(result)} to {_show(const)}")
            result = const
        return result

    def _repair_enum(self, path: str, spec: dict[str, Any], value: Any, out: dict[str, Any]) -> str | None:
        required = self._required(spec, out)
        choices: list[str] = spec["choices"]
        fallback = None if spec.get("nullable") else spec.get("default")

        if value is _MISSING or value is None:
            if spec.get("nullable") and not required:
                return None
            if required:
                self.note(f"defaulted {path} to {_show(fallback)} (was absent)")
            return fallback

        if isinstance(value, str):
            if value in choices:
                return value
            key = _enum_key(value)
            for choice in choices:
                if _enum_key(choice) == key:
                    self.note(f"normalized {path} from {value} to {choice}")
                    return choice
            for synonym, target in (spec.get("synonyms") or {}).items():
                if _enum_key(synonym) == key:
                    self.note(f"normalized {path} from {value} to {_show(target)}")
                    return target

        self.note(f"defaulted {path} to {_show(fallback)} (was {_show(value)})")
        return fallback

    def _repair_str_list(self, path: str, spec: dict[str, Any], value: Any, out: dict[str, Any]) -> list[str]:
        if value is _MISSING or value is None:
            if self._required(spec, out):
                self.note(f"defaulted {path} to []")
            return []
        if isinstance(value, str):
            self.note(f"coerced {path} from {_show(value)} to {_show([value])}")
            value = [value]
        elif not isinstance(value, list):
            self.note(f"defaulted {path} to [] (was {_show(value)})")
            return []

        result: list[str] = []
        for entry in value:
            if isinstance(entry, str):
                text = entry
            elif isinstance(entry, (int, float)) and not isinstance(entry, bool):
                text = str(entry)
                self.note(f"coerced {path} entry from {_show(entry)} to {text}")
            else:
                self.note(f"dropped invalid {path} entry (was {_show(entry)})")
                continue
            if spec.get("unique") and text in result:
                self.note(f"removed duplicate {path} entry {text}")
                continue
            result.append(text)
        return result

    # -------------------------------------------------------------------------
    # Nested structures
    # -------------------------------------------------------------------------

    def _repair_object(self, path: str, spec: dict[str, Any], value: Any, out: dict[str, Any]) -> Any:
        record = spec["record"]
        if isinstance(value, dict):
            return self.repair_record(value, record, f"{path}.")

        required = self._required(spec, out)
        absent = value is _MISSING or value is None
        if spec.get("nullable") and not required:
            if not absent:
                self.note(f"defaulted {path} to null (was {_show(value)})")
            return None
        if required or not absent:
            self.note(f"defaulted {path} to defaults (was {_show(value)})")
        with self.quiet():
            return self.repair_record({}, record, f"{path}.")

    def _repair_list(self, path: str, spec: dict[str, Any], value: Any, out: dict[str, Any]) -> list[dict[str, Any]]:
        record = spec["record"]
        if value is _MISSING or value is None:
            items: list[Any] = []
        elif isinstance(value, list):
            items = value
        else:
            self.note(f"defaulted {path} to [] (was {_show(value)})")
            items = []

        result: list[dict[str, Any]] = []
        for element in items:
            if not isinstance(element, dict):
                self.note(f"dropped invalid {path} entry (was {_show(element)})")
                continue
            element = self._apply_fixed(element, spec.get("fixed") or {}, record)
            result.append(self.repair_record(element, record))

        if spec.get("id_scope"):
            self._assign_ids(
                result,
                record,
                scope=spec["id_scope"],
                reserved=spec.get("reserved_ids", ()),
            )

        if len(result) < spec.get("min_items", 0):
            with self.quiet():
                result.extend(self.repair_record(dict(item), record) for item in spec.get("default_items", []))
            self.note(f"defaulted {path} to {spec.get('default_summary', 'defaults')}")

        if spec.get("publish"):
            self._published[spec["publish"]] = [item["id"] for item in result]
        return result

    def _apply_fixed(self, element: dict[str, Any], fixed: dict[str, Any], record: str) -> dict[str, Any]:
        """Force list-wide field values, such as the side tag of roster entries."""
        if not fixed:
            return element
        element = dict(element)
        fields = self.tables.fields(record)
        for name, expected in fixed.items():
            spec = fields[name]
            current = _lookup(element, name, spec)
            for key in (to_snake(name), *spec.get("aliases", ())):
                element.pop(key, None)
            element[name] = expected
            if current == expected:
                continue
            if isinstance(current, str) and _enum_key(current) == _enum_key(expected):
                self.note(f"normalized {name} from {current} to {expected}")
            else:
                self.note(f"defaulted {name} to {expected} (was {_show(current)})")
        return element

    def _assign_ids(
        self,
        items: list[dict[str, Any]],
        record: str,
        *,
        scope: str,
        reserved: Any,
    ) -> None:
        """Make ids non-empty and unique within a scope.

        Empty ids become the slug of the record's label plus its position;
        duplicates get the first free ``-2``, ``-3``... suffix.
        """
        seen = self._scopes.setdefault(scope, set())
        blocked = set(reserved)
        label_field = self.tables.label_field(record)
        published = self._published.setdefault(scope, [])

        for position, item in enumerate(items, start=1):
            original = item.get("id") or ""
            label = (item.get(label_field) if label_field else None) or f"{record} {position}"
            candidate = original or f"{_slug(str(label)) or _slug(record)}-{position}"
            base = candidate
            suffix = 2
            while candidate in seen or candidate in blocked:
                candidate = f"{base}-{suffix}"
                suffix += 1
            if candidate != original:
                self.note(f"regenerated id for {label}")
                item["id"] = candidate
            seen.add(candidate)
            published.append(candidate)


# =============================================================================
# Public API
# =============================================================================


class Corrector:
    """Validates generated JSON against the field tables and repairs it.

    Args:
        tables: Field tables to apply; the configured tables when omitted.

    Example:
        >>> corrector = Corrector()
        >>> result = corrector.validate_and_correct({"name": "Rat"}, SchemaKind.COMBAT_ENTITY)
        >>> result.value.accuracy
        75
    """

    def __init__(self, tables: SchemaTables | None = None) -> None:
        self._tables = tables

    @property
    def tables(self) -> SchemaTables:
        return self._tables if self._tables is not None else get_schema_tables()

    def validate_and_correct(self, raw: Any, kind: SchemaKind | str) -> CorrectionResult:
        """Enforce invariants on a decoded JSON value and type it.

        Args:
            raw: Decoded JSON from the generator.
            kind: Which field table to apply.

        Returns:
            The typed, corrected value and the ordered corrections applied.

        Raises:
            MalformedInputError: If the root cannot be coerced into the kind.
            SchemaTableError: If the tables produce a record the model rejects.
        """
        kind = SchemaKind(kind)
        run = _RepairRun(self.tables)
        data = run.run(raw, kind)
        value = self._build(kind, data)
        corrections = tuple(run.corrections)

        if corrections:
            logger.info("Corrected generated content", kind=kind.value, corrections=len(corrections))
            logger.debug("Correction details", kind=kind.value, details=list(corrections))
        return CorrectionResult(kind=kind, value=value, data=data, corrections=corrections)

    def _build(self, kind: SchemaKind, data: Any) -> Any:
        model = MODEL_FOR_KIND[kind]
        try:
            if isinstance(data, list):
                return tuple(model.model_validate(item) for item in data)
            return model.model_validate(data)
        except ValidationError as exc:
            raise SchemaTableError(
                "Field table produced a record its model rejects",
                table_path=self.tables.source,
                kind=kind.value,
                details={"errors": exc.errors(include_url=False)},
            ) from exc


def validate_and_correct(raw: Any, kind: SchemaKind | str) -> CorrectionResult:
    """Validate and correct with the configured field tables.

    Args:
        raw: Decoded JSON from the generator.
        kind: Which field table to apply.

    Returns:
        The typed, corrected value and its corrections.
    """
    return Corrector().validate_and_correct(raw, kind)


__all__ = [
    "MODEL_FOR_KIND",
    "CorrectionResult",
    "Corrector",
    "validate_and_correct",
]
