"""Load in-memory documents from JSON fixture files."""

from __future__ import annotations

import json
from dataclasses import fields
from enum import Enum
from typing import Any, Iterable, TypeVar

from tiecalc.document import Document, Entry, Note
from tiecalc.tie_models import (
    AltNotationStyle,
    ChordDirectionType,
    LayerPrefs,
    MixedStemDirectionType,
    StaffSpec,
    TiePrefs,
)

E = TypeVar("E", bound=Enum)

_NOTE_FIELDS: dict[str, type] = {
    "staff_position": int,
    "tie": bool,
    "tie_backwards": bool,
    "accidental": bool,
    "upstem_split": bool,
    "displacement": int,
}
_ENTRY_FIELDS: dict[str, type] = {
    "measure": int,
    "staff": int,
    "layer": int,
    "duration": int,
    "dots": int,
    "stem_up": bool,
    "is_rest": bool,
    "grace_note": bool,
    "voice2": bool,
    "voice2_launch": bool,
    "split_stem": bool,
    "flip_tie": bool,
    "freeze_stem": bool,
    "visible": bool,
    "entry_number": int,
}
# Fields where null means "work it out".
_NULLABLE_FIELDS = {"displacement", "stem_up"}
_ENUM_FIELDS: dict[str, type[Enum]] = {
    "chord_direction_type": ChordDirectionType,
    "mixed_stem_direction_type": MixedStemDirectionType,
    "alt_notation_style": AltNotationStyle,
}


def _check_type(value: Any, expected: type, where: str) -> None:
    # bool is a subclass of int, so it has to be ruled out explicitly.
    if expected is int:
        valid = isinstance(value, int) and not isinstance(value, bool)
    else:
        valid = isinstance(value, expected)
    if not valid:
        raise ValueError(
            f"{where}: expected {expected.__name__}, got {type(value).__name__} {value!r}."
        )


def _check_types(values: dict[str, Any], types: dict[str, type], where: str) -> None:
    for key, value in values.items():
        if value is None and key in _NULLABLE_FIELDS:
            continue
        _check_type(value, types[key], f"{where}.{key}")


def _parse_enum(enum_type: type[E], value: Any, where: str) -> E:
    try:
        return enum_type(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise ValueError(f"{where}: '{value}' is not one of: {allowed}.") from None


def _check_keys(data: Any, allowed: Iterable[str], where: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{where}: expected an object, got {type(data).__name__}.")
    unknown = sorted(set(data).difference(allowed))
    if unknown:
        raise ValueError(f"{where}: unknown field(s) {', '.join(unknown)}.")
    return data


def _build_record(record_type: type, data: Any, where: str) -> Any:
    # Every record field has a default, and its type is the field's type.
    types = {f.name: type(f.default) for f in fields(record_type)}
    values = dict(_check_keys(data, types, where))
    for key, value in values.items():
        if key in _ENUM_FIELDS:
            values[key] = _parse_enum(_ENUM_FIELDS[key], value, f"{where}.{key}")
        else:
            _check_type(value, types[key], f"{where}.{key}")
    return record_type(**values)


def _numbered(data: Any, record_type: type, where: str) -> dict[int, Any]:
    """Parse an object keyed by staff or layer number."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{where}: expected an object keyed by number.")
    records: dict[int, Any] = {}
    for key, value in data.items():
        try:
            number = int(key)
        except ValueError:
            raise ValueError(f"{where}: '{key}' is not a number.") from None
        if number < 1:
            raise ValueError(f"{where}: numbers start at 1, got {number}.")
        records[number] = _build_record(record_type, value, f"{where}.{key}")
    return records


def _parse_note(data: Any, where: str) -> Note:
    values = _check_keys(data, _NOTE_FIELDS, where)
    if "staff_position" not in values:
        raise ValueError(f"{where}: staff_position is required.")
    _check_types(values, _NOTE_FIELDS, where)
    return Note(**values)


def _parse_entry(data: Any, where: str) -> Entry:
    values = dict(_check_keys(data, [*_ENTRY_FIELDS, "notes"], where))
    if "measure" not in values:
        raise ValueError(f"{where}: measure is required.")
    raw_notes = values.pop("notes", [])
    if not isinstance(raw_notes, list):
        raise ValueError(f"{where}.notes: expected a list.")
    _check_types(values, _ENTRY_FIELDS, where)
    for key in ("measure", "staff", "layer"):
        if values.get(key, 1) < 1:
            raise ValueError(f"{where}.{key}: must be at least 1, got {values[key]}.")
    notes = [_parse_note(raw, f"{where}.notes[{i}]") for i, raw in enumerate(raw_notes)]
    if not notes and not values.get("is_rest", False):
        raise ValueError(f"{where}: an entry without notes must set is_rest.")
    return Entry(notes=notes, **values)


def document_from_dict(data: Any) -> Document:
    """
    Build a Document from parsed JSON.

    Expected layout (every key but ``entries`` is optional)::

        {
          "tie_prefs": {"chord_direction_type": "split_by_half", ...},
          "staves": {"1": {"stem_reversal_position": -4}},
          "layers": {"1": {"use_freeze_stems_ties": true}},
          "systems": [1, 5],
          "end_measure": 8,
          "entries": [
            {"measure": 1, "stem_up": true,
             "notes": [{"staff_position": -6, "tie": true}]}
          ]
        }

    Raises:
        ValueError: If a field is missing, unknown or of the wrong type.
    """
    document = _check_keys(
        data,
        {"tie_prefs", "staves", "layers", "systems", "end_measure", "entries"},
        "document",
    )
    raw_entries = document.get("entries")
    if not isinstance(raw_entries, list):
        raise ValueError("document.entries: expected a list.")
    systems = document.get("systems")
    if systems is not None:
        if not isinstance(systems, list):
            raise ValueError("document.systems: expected a list of measure numbers.")
        for i, measure in enumerate(systems):
            _check_type(measure, int, f"document.systems[{i}]")
    end_measure = document.get("end_measure")
    if end_measure is not None:
        _check_type(end_measure, int, "document.end_measure")

    tie_prefs = None
    if document.get("tie_prefs") is not None:
        tie_prefs = _build_record(TiePrefs, document["tie_prefs"], "document.tie_prefs")

    return Document(
        [_parse_entry(raw, f"entries[{i}]") for i, raw in enumerate(raw_entries)],
        tie_prefs=tie_prefs,
        staves=_numbered(document.get("staves"), StaffSpec, "document.staves"),
        layers=_numbered(document.get("layers"), LayerPrefs, "document.layers"),
        systems=systems,
        end_measure=end_measure,
    )


def load_document(path: str) -> Document:
    """
    Read a JSON document file.

    Raises:
        ValueError: If the file is not valid JSON or not a valid document.
        OSError: If the file cannot be read.
    """
    with open(path, encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid JSON: {exc}") from exc
    return document_from_dict(data)
