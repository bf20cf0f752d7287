"""
Conversion between local and remote record formats.

Locally, records use camelCase field names (``dueDate``, ``getIt``); the
persistence API stores snake_case (``due_date``, ``get_it``). Conversion is a
pure function of its inputs: the clock and the id factory are parameters, so
callers and tests can pin them.

Round-trip law: for every kind, ``from_remote(kind, to_remote(kind, x))``
reproduces every field of ``x`` (plus defaults, a generated id and the
timestamps).

Example:
    >>> remote = to_remote("rock", {"title": "Launch", "dueDate": "2026-03-31"})
    >>> remote["due_date"]
    '2026-03-31'
    >>> from_remote("rock", remote)["dueDate"]
    '2026-03-31'
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from eosdash.core.entities.kinds import VISION_KIND, EntityKind

Record = dict[str, Any]

_TIMESTAMP_RENAMES: dict[str, str] = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

# local name -> remote name, on top of the timestamp renames
_KIND_RENAMES: dict[str, dict[str, str]] = {
    EntityKind.METRIC.value: {"current": "current_value"},
    EntityKind.ROCK.value: {"dueDate": "due_date"},
    EntityKind.ISSUE.value: {},
    EntityKind.PERSON.value: {"getIt": "get_it", "wantIt": "want_it"},
    EntityKind.TODO.value: {"dueDate": "due_date"},
    EntityKind.MEETING.value: {},
    EntityKind.CORE_VALUE.value: {},
}

# Substituted when a field is missing or null (local names)
_KIND_DEFAULTS: dict[str, dict[str, Any]] = {
    EntityKind.METRIC.value: {"current": "", "status": "unknown"},
    EntityKind.ROCK.value: {"description": "", "progress": 0},
    EntityKind.ISSUE.value: {"description": "", "assignee": ""},
    EntityKind.PERSON.value: {
        "department": "",
        "getIt": False,
        "wantIt": False,
        "capacity": False,
    },
    EntityKind.TODO.value: {"notes": "", "completed": False},
    EntityKind.MEETING.value: {"facilitator": "", "notes": ""},
    EntityKind.CORE_VALUE.value: {"value": "", "description": ""},
}

_VISION_RENAMES: dict[str, str] = {
    "coreValues": "core_values",
    "coreFocus": "core_focus",
    "tenYearTarget": "ten_year_target",
    "marketingStrategy": "marketing_strategy",
    "threeYearPicture": "three_year_picture",
    "oneYearPlan": "one_year_plan",
}

_VISION_TEXT_FIELDS = ("tenYearTarget", "marketingStrategy", "threeYearPicture", "oneYearPlan")

_last_id = 0


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2026-01-05T09:30:00.000Z``."""
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_entity_id() -> str:
    """Millisecond-timestamp id, bumped so ids stay unique within the process."""
    global _last_id
    candidate = time.time_ns() // 1_000_000
    _last_id = max(candidate, _last_id + 1)
    return str(_last_id)


def _kind_key(kind: str | EntityKind) -> str:
    return kind.value if isinstance(kind, EntityKind) else str(kind)


def _renames_for(key: str) -> dict[str, str] | None:
    kind_renames = _KIND_RENAMES.get(key)
    if kind_renames is None:
        return None
    return {**_TIMESTAMP_RENAMES, **kind_renames}


def _rename_out(record: Mapping[str, Any], renames: Mapping[str, str]) -> Record:
    """Local -> remote. A local spelling beats a stray remote spelling of the same field."""
    out: Record = {k: v for k, v in record.items() if k not in renames}
    for local_name, remote_name in renames.items():
        if local_name in record:
            out[remote_name] = record[local_name]
    return out


def _rename_in(record: Mapping[str, Any], renames: Mapping[str, str]) -> Record:
    """Remote -> local. The remote spelling wins when it carries a value."""
    remote_names = set(renames.values())
    out: Record = {k: v for k, v in record.items() if k not in remote_names}
    for local_name, remote_name in renames.items():
        if record.get(remote_name) is not None:
            out[local_name] = record[remote_name]
    return out


def _apply_defaults(record: Record, defaults: Mapping[str, Any]) -> Record:
    for field_name, default in defaults.items():
        if record.get(field_name) is None:
            record[field_name] = default
    return record


def to_remote(
    kind: str | EntityKind,
    local: Mapping[str, Any],
    *,
    now: datetime | None = None,
    id_factory: Callable[[], str] = new_entity_id,
) -> Record:
    """
    Convert a local record to the remote format.

    Always assigns an id when the record has none, keeps an existing creation
    timestamp (or assigns ``now``), and refreshes the modification timestamp.
    The V/TO document has no id or timestamps; only its fields are renamed.
    Unrecognised kinds pass through unchanged.

    Args:
        kind: Entity kind (wire name or EntityKind)
        local: Local camelCase record
        now: Clock override for the timestamps
        id_factory: Generator used when the record has no id

    Returns:
        New dict in the remote snake_case format
    """
    key = _kind_key(kind)
    if key == VISION_KIND:
        return _vision_to_remote(local)

    renames = _renames_for(key)
    if renames is None:
        return dict(local)

    record: Record = dict(local)
    if key == EntityKind.METRIC.value:
        legacy = record.pop("currentValue", None)
        if not record.get("current") and legacy is not None:
            record["current"] = legacy
    _apply_defaults(record, _KIND_DEFAULTS[key])

    timestamp = utc_timestamp(now)
    record["id"] = str(record.get("id") or id_factory())
    record["createdAt"] = record.get("createdAt") or record.get("created_at") or timestamp
    record["updatedAt"] = timestamp
    return _rename_out(record, renames)


def from_remote(kind: str | EntityKind, remote: Mapping[str, Any] | None) -> Record | None:
    """
    Convert a remote record to the local format.

    Accepts either spelling of a field and fills defaults for missing optional
    fields, so the result never lacks a field the views rely on. Unrecognised
    kinds pass through unchanged; ``None`` stays ``None``.

    Args:
        kind: Entity kind (wire name or EntityKind)
        remote: Remote snake_case record

    Returns:
        New dict in the local camelCase format, or None
    """
    if remote is None:
        return None

    key = _kind_key(kind)
    if key == VISION_KIND:
        return _vision_from_remote(remote)

    renames = _renames_for(key)
    if renames is None:
        return dict(remote)

    record = _rename_in(remote, renames)
    return _apply_defaults(record, _KIND_DEFAULTS[key])


def empty_vision() -> Record:
    """A fresh, empty V/TO in local format."""
    return {
        "coreValues": [],
        "coreFocus": {"purpose": "", "niche": ""},
        "tenYearTarget": "",
        "marketingStrategy": "",
        "threeYearPicture": "",
        "oneYearPlan": "",
    }


def _vision_to_remote(local: Mapping[str, Any]) -> Record:
    core_value_renames = _renames_for(EntityKind.CORE_VALUE.value) or {}
    record: Record = dict(local)
    record["coreValues"] = [
        _rename_out(value, core_value_renames) for value in (record.get("coreValues") or [])
    ]
    record["coreFocus"] = dict(record.get("coreFocus") or {})
    return _rename_out(record, _VISION_RENAMES)


def _vision_from_remote(remote: Mapping[str, Any]) -> Record:
    core_value_renames = _renames_for(EntityKind.CORE_VALUE.value) or {}
    core_value_defaults = _KIND_DEFAULTS[EntityKind.CORE_VALUE.value]

    record = _rename_in(remote, _VISION_RENAMES)
    record["coreValues"] = [
        _apply_defaults(_rename_in(value, core_value_renames), core_value_defaults)
        for value in (record.get("coreValues") or [])
    ]
    focus = record.get("coreFocus") or {}
    record["coreFocus"] = {"purpose": "", "niche": "", **focus}
    for field_name in ("purpose", "niche"):
        if record["coreFocus"][field_name] is None:
            record["coreFocus"][field_name] = ""
    for field_name in _VISION_TEXT_FIELDS:
        if record.get(field_name) is None:
            record[field_name] = ""
    return record


def vision_shape_problem(remote: Mapping[str, Any]) -> str | None:
    """
    Describe why a remote V/TO cannot be converted, or return None when it can.

    Core values must be a list of objects and the core focus an object, under
    either spelling; both may be null.
    """
    for local_name, remote_name in (("coreValues", "core_values"), ("coreFocus", "core_focus")):
        for name in (local_name, remote_name):
            value = remote.get(name)
            if value is None:
                continue
            if local_name == "coreFocus" and not isinstance(value, Mapping):
                return f"{name} must be an object"
            if local_name == "coreValues" and not (
                isinstance(value, list) and all(isinstance(v, Mapping) for v in value)
            ):
                return f"{name} must be a list of objects"
    return None


__all__ = [
    "Record",
    "empty_vision",
    "from_remote",
    "new_entity_id",
    "to_remote",
    "utc_timestamp",
    "vision_shape_problem",
]
