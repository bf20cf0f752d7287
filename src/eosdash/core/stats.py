"""
Dashboard aggregates derived from a mirror snapshot.

Everything here is a pure function of the snapshot (and, for meetings, the
evaluation time). Nothing is cached: callers recompute on every render.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict

from eosdash.core.entities.models import (
    Issue,
    IssuePriority,
    Meeting,
    Metric,
    MetricStatus,
    Rock,
    Todo,
)
from eosdash.core.mirror.models import MirrorSnapshot

# Level 10 agenda sizes
AGENDA_METRICS = 5
AGENDA_ROCKS = 4
AGENDA_ISSUES = 3


class DashboardStats(BaseModel):
    """Headline numbers for the dashboard cards."""

    model_config = ConfigDict(frozen=True)

    total_metrics: int
    on_track_metrics: int
    total_rocks: int
    completed_rocks: int
    avg_rock_progress: int
    total_issues: int
    high_priority_issues: int
    total_people: int
    right_people_right_seats: int
    people_needing_attention: int
    total_meetings: int
    upcoming_meetings: int
    pending_todos: int
    core_values_count: int
    is_empty: bool


class MeetingAgenda(BaseModel):
    """What a Level 10 meeting reviews."""

    model_config = ConfigDict(frozen=True)

    meeting: Meeting
    metrics: tuple[Metric, ...]
    rocks: tuple[Rock, ...]
    issues: tuple[Issue, ...]
    todos: tuple[Todo, ...]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (``round`` would give 2 for 2.5)."""
    return int(math.floor(value + 0.5))


def parse_timestamp(value: str) -> datetime | None:
    """
    Parse an ISO-8601 date or timestamp; naive values are taken as UTC.

    Returns None for anything unparseable.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def average_progress(rocks: tuple[Rock, ...]) -> int:
    """Rounded mean rock progress, 0 when there are no rocks."""
    if not rocks:
        return 0
    return round_half_up(sum(rock.progress for rock in rocks) / len(rocks))


def is_upcoming(meeting: Meeting, now: datetime) -> bool:
    """True when the meeting date is strictly after ``now``."""
    when = parse_timestamp(meeting.date)
    return when is not None and when > now


def compute_stats(snapshot: MirrorSnapshot, now: datetime | None = None) -> DashboardStats:
    """
    Derive the dashboard numbers from a snapshot.

    Args:
        snapshot: Mirror snapshot
        now: Evaluation time for "upcoming" meetings (defaults to current UTC time)

    Returns:
        DashboardStats
    """
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)

    right_seat = sum(1 for person in snapshot.people if person.right_person_right_seat)
    return DashboardStats(
        total_metrics=len(snapshot.metrics),
        on_track_metrics=sum(1 for m in snapshot.metrics if m.status is MetricStatus.ON_TRACK),
        total_rocks=len(snapshot.rocks),
        completed_rocks=sum(1 for rock in snapshot.rocks if rock.progress >= 100),
        avg_rock_progress=average_progress(snapshot.rocks),
        total_issues=len(snapshot.issues),
        high_priority_issues=sum(1 for i in snapshot.issues if i.priority == IssuePriority.HIGH),
        total_people=len(snapshot.people),
        right_people_right_seats=right_seat,
        people_needing_attention=len(snapshot.people) - right_seat,
        total_meetings=len(snapshot.meetings),
        upcoming_meetings=sum(1 for m in snapshot.meetings if is_upcoming(m, moment)),
        pending_todos=sum(1 for todo in snapshot.todos if not todo.completed),
        core_values_count=len(snapshot.vision.core_values),
        is_empty=not (snapshot.metrics or snapshot.rocks or snapshot.issues or snapshot.people),
    )


def build_meeting_agenda(snapshot: MirrorSnapshot, meeting: Meeting) -> MeetingAgenda:
    """Scorecard, rock and issue slices plus every to-do for a running meeting."""
    return MeetingAgenda(
        meeting=meeting,
        metrics=snapshot.metrics[:AGENDA_METRICS],
        rocks=snapshot.rocks[:AGENDA_ROCKS],
        issues=snapshot.issues[:AGENDA_ISSUES],
        todos=snapshot.todos,
    )


__all__ = [
    "DashboardStats",
    "MeetingAgenda",
    "average_progress",
    "build_meeting_agenda",
    "compute_stats",
    "is_upcoming",
    "parse_timestamp",
    "round_half_up",
]
