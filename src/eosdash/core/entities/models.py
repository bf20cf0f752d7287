"""
Typed entity models held by the mirror.

Python attributes are snake_case; aliases are the local camelCase field
names, so ``Rock.model_validate({"dueDate": ...})`` accepts a local record and
``entity.to_record()`` produces one. Models are lenient about the shape of
what the server sends: missing free text becomes ``""``, missing flags become
``False``, and extra fields are retained. Instances are frozen so snapshots
handed to views cannot be mutated behind the mirror's back.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from eosdash.core.entities.kinds import EntityKind


class MetricStatus(str, Enum):
    """Scorecard status of a metric."""

    ON_TRACK = "on-track"
    BEHIND = "behind"
    UNKNOWN = "unknown"


class IssuePriority(str, Enum):
    """Priority of an issue on the issues list."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Seat(str, Enum):
    """Functional seats on the accountability chart."""

    VISIONARY = "Visionary"
    INTEGRATOR = "Integrator"
    SALES = "Sales"
    MARKETING = "Marketing"
    OPERATIONS = "Operations"
    FINANCE = "Finance"


class Severity(str, Enum):
    """Severity of a user-facing notification."""

    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


def _text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _flag(value: Any) -> Any:
    if value is None or value == "":
        return False
    return value


def _progress(value: Any) -> int:
    if value is None or value == "" or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number):
        return 0
    return max(0, min(100, int(number)))


Text = Annotated[str, BeforeValidator(_text)]
Flag = Annotated[bool, BeforeValidator(_flag)]
Progress = Annotated[int, BeforeValidator(_progress)]


class EntityModel(BaseModel):
    """Common base: id plus creation and modification timestamps."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    id: Text
    created_at: str | None = None
    updated_at: str | None = None

    def to_record(self) -> dict[str, Any]:
        """Dump as a local (camelCase) record."""
        return self.model_dump(by_alias=True, mode="json")


class Metric(EntityModel):
    """A scorecard metric."""

    name: Text = ""
    goal: Text = ""
    current: Text = ""
    status: MetricStatus = MetricStatus.UNKNOWN
    owner: Text = ""

    @field_validator("status", mode="before")
    @classmethod
    def _known_status(cls, value: Any) -> MetricStatus:
        try:
            return MetricStatus(value)
        except ValueError:
            return MetricStatus.UNKNOWN


class Rock(EntityModel):
    """A quarterly priority with an owner and a completion percentage."""

    title: Text = ""
    description: Text = ""
    owner: Text = ""
    due_date: Text = ""
    progress: Progress = 0


class Issue(EntityModel):
    title: Text = ""
    description: Text = ""
    priority: Text = ""
    assignee: Text = ""


class Person(EntityModel):
    """A team member with a seat and a GWC (get it, want it, capacity) assessment."""

    name: Text = ""
    role: Text = ""
    seat: Text = ""
    department: Text = ""
    get_it: Flag = False
    want_it: Flag = False
    capacity: Flag = False

    @property
    def right_person_right_seat(self) -> bool:
        """True when all three GWC flags are set."""
        return self.get_it and self.want_it and self.capacity


class Todo(EntityModel):
    task: Text = ""
    owner: Text = ""
    due_date: Text = ""
    notes: Text = ""
    completed: Flag = False


class Meeting(EntityModel):
    title: Text = ""
    date: Text = ""
    facilitator: Text = ""
    notes: Text = ""


class CoreValue(EntityModel):
    value: Text = ""
    description: Text = ""


class CoreFocus(BaseModel):
    """Purpose/cause/passion and niche."""

    model_config = ConfigDict(extra="allow", frozen=True)

    purpose: Text = ""
    niche: Text = ""


class VisionDocument(BaseModel):
    """
    The V/TO singleton.

    Always present in the mirror; a fresh mirror holds the empty document.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    core_values: tuple[CoreValue, ...] = ()
    core_focus: CoreFocus = Field(default_factory=CoreFocus)
    ten_year_target: Text = ""
    marketing_strategy: Text = ""
    three_year_picture: Text = ""
    one_year_plan: Text = ""

    @field_validator("core_values", mode="before")
    @classmethod
    def _no_null_values(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("core_focus", mode="before")
    @classmethod
    def _no_null_focus(cls, value: Any) -> Any:
        return {} if value is None else value

    def to_record(self) -> dict[str, Any]:
        """Dump as a local (camelCase) record."""
        return self.model_dump(by_alias=True, mode="json")


class RosterEntry(BaseModel):
    """Owner/assignee choice derived from a Person."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


MODEL_BY_KIND: dict[EntityKind, type[EntityModel]] = {
    EntityKind.METRIC: Metric,
    EntityKind.ROCK: Rock,
    EntityKind.ISSUE: Issue,
    EntityKind.PERSON: Person,
    EntityKind.TODO: Todo,
    EntityKind.MEETING: Meeting,
    EntityKind.CORE_VALUE: CoreValue,
}
