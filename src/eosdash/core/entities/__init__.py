"""
Entity kinds and typed models.

Example:
    >>> from eosdash.core.entities import EntityKind, Rock
    >>> EntityKind.PERSON.collection_path
    '/people'
    >>> Rock.model_validate({"id": "1", "title": "Launch", "progress": "40"}).progress
    40
"""

from eosdash.core.entities.kinds import (
    COLLECTION_KINDS,
    VISION_KIND,
    VISION_PATH,
    EntityKind,
)
from eosdash.core.entities.models import (
    MODEL_BY_KIND,
    CoreFocus,
    CoreValue,
    EntityModel,
    Issue,
    IssuePriority,
    Meeting,
    Metric,
    MetricStatus,
    Person,
    Rock,
    RosterEntry,
    Seat,
    Severity,
    Todo,
    VisionDocument,
)

__all__ = [
    "COLLECTION_KINDS",
    "VISION_KIND",
    "VISION_PATH",
    "EntityKind",
    "MODEL_BY_KIND",
    "CoreFocus",
    "CoreValue",
    "EntityModel",
    "Issue",
    "IssuePriority",
    "Meeting",
    "Metric",
    "MetricStatus",
    "Person",
    "Rock",
    "RosterEntry",
    "Seat",
    "Severity",
    "Todo",
    "VisionDocument",
]
