"""
Required-field checks for submitted entity data.

Example:
    >>> result = validate("rock", {"title": "A", "owner": "Bob"})
    >>> result.valid
    False
    >>> result.errors
    {'dueDate': 'Due date is required'}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from eosdash.core.entities.kinds import EntityKind

# Per kind: (field, message) in form order
REQUIRED_FIELDS: dict[str, tuple[tuple[str, str], ...]] = {
    EntityKind.METRIC.value: (
        ("name", "Metric name is required"),
        ("goal", "Goal is required"),
        ("owner", "Owner is required"),
    ),
    EntityKind.ROCK.value: (
        ("title", "Rock title is required"),
        ("owner", "Owner is required"),
        ("dueDate", "Due date is required"),
    ),
    EntityKind.ISSUE.value: (
        ("title", "Issue title is required"),
        ("priority", "Priority is required"),
    ),
    EntityKind.PERSON.value: (
        ("name", "Name is required"),
        ("role", "Role is required"),
        ("seat", "Seat is required"),
    ),
    EntityKind.TODO.value: (
        ("task", "Task is required"),
        ("owner", "Owner is required"),
        ("dueDate", "Due date is required"),
    ),
    EntityKind.MEETING.value: (
        ("title", "Meeting title is required"),
        ("date", "Date is required"),
    ),
    EntityKind.CORE_VALUE.value: (
        ("value", "Core value is required"),
        ("description", "Description is required"),
    ),
}


class ValidationResult(BaseModel):
    """Outcome of a required-field check; ``errors`` holds only failing fields."""

    valid: bool
    errors: dict[str, str] = Field(default_factory=dict)


def is_missing(value: Any) -> bool:
    """A value is missing when it is None or the empty string."""
    return value is None or value == ""


def validate(kind: str | EntityKind, data: Mapping[str, Any]) -> ValidationResult:
    """
    Check that every required field for ``kind`` is present.

    Kinds without a required-field set are always valid.

    Args:
        kind: Entity kind (wire name or EntityKind)
        data: Local camelCase record as submitted

    Returns:
        ValidationResult with field -> message for each missing field
    """
    key = kind.value if isinstance(kind, EntityKind) else str(kind)
    errors = {
        field_name: message
        for field_name, message in REQUIRED_FIELDS.get(key, ())
        if is_missing(data.get(field_name))
    }
    return ValidationResult(valid=not errors, errors=errors)


__all__ = ["REQUIRED_FIELDS", "ValidationResult", "is_missing", "validate"]
