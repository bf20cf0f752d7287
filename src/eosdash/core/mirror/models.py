"""
Data models for the entity mirror.

Defines the read-only snapshot handed to views and the results returned by
mirror operations.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from eosdash.core.entities.models import (
    Issue,
    Meeting,
    Metric,
    Person,
    Rock,
    RosterEntry,
    Todo,
    VisionDocument,
)


def project_roster(people: tuple[Person, ...]) -> tuple[RosterEntry, ...]:
    """Owner/assignee choices: one ``{id, name}`` entry per person, in order."""
    return tuple(RosterEntry(id=person.id, name=person.name) for person in people)


class MirrorSnapshot(BaseModel):
    """
    Immutable view of every collection at one moment.

    Example:
        >>> snapshot = MirrorSnapshot()
        >>> snapshot.roster
        ()
    """

    model_config = ConfigDict(frozen=True)

    metrics: tuple[Metric, ...] = ()
    rocks: tuple[Rock, ...] = ()
    issues: tuple[Issue, ...] = ()
    people: tuple[Person, ...] = ()
    todos: tuple[Todo, ...] = ()
    meetings: tuple[Meeting, ...] = ()
    vision: VisionDocument = Field(default_factory=VisionDocument)

    @property
    def roster(self) -> tuple[RosterEntry, ...]:
        """Derived from ``people`` on every read."""
        return project_roster(self.people)


class MutationResult(BaseModel):
    """
    Outcome of a create, update or delete.

    ``errors`` carries field-level validation failures (no remote call was
    made); ``error`` carries the remote failure message. ``clear_form`` tells
    the caller to close any open editing form.
    """

    success: bool = Field(description="Whether the mirror now reflects the change")
    entity: dict[str, Any] | None = Field(
        default=None,
        description="Confirmed entity as a local record",
    )
    errors: dict[str, str] = Field(
        default_factory=dict,
        description="Field -> message for missing required fields",
    )
    error: str | None = Field(default=None, description="Remote failure message")
    clear_form: bool = Field(default=False, description="Close the editing form")


class LoadReport(BaseModel):
    """Which collections a bulk load replaced and which it left alone."""

    loaded: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(
        default_factory=dict,
        description="Kind -> error message for fetches that failed",
    )

    @property
    def ok(self) -> bool:
        """True when every fetch succeeded."""
        return not self.failed
