"""
Entity kinds managed by the dashboard.

Each kind knows its wire name (used in webhook paths and notification
messages) and the collection path it lives under on the persistence API.
"""

from __future__ import annotations

from enum import Enum


class EntityKind(str, Enum):
    """Kinds of entity persisted through the API."""

    METRIC = "metric"
    ROCK = "rock"
    ISSUE = "issue"
    PERSON = "person"
    TODO = "todo"
    MEETING = "meeting"
    CORE_VALUE = "coreValue"

    @property
    def collection_path(self) -> str:
        """Collection endpoint, e.g. ``/metrics`` or ``/people``."""
        return _COLLECTION_PATHS[self]

    def item_path(self, entity_id: str) -> str:
        """Endpoint for a single entity, e.g. ``/metrics/123``."""
        return f"{self.collection_path}/{entity_id}"

    @classmethod
    def parse(cls, value: str | EntityKind) -> EntityKind | None:
        """
        Resolve a kind from its wire name.

        Also accepts the plural collection name (``people``, ``rocks``) so
        command-line input reads naturally. Returns None for anything else.
        """
        if isinstance(value, EntityKind):
            return value
        for kind in cls:
            if value == kind.value or value == kind.collection_path.lstrip("/"):
                return kind
        return None


_COLLECTION_PATHS: dict[EntityKind, str] = {
    EntityKind.METRIC: "/metrics",
    EntityKind.ROCK: "/rocks",
    EntityKind.ISSUE: "/issues",
    EntityKind.PERSON: "/people",
    EntityKind.TODO: "/todos",
    EntityKind.MEETING: "/meetings",
    EntityKind.CORE_VALUE: "/coreValues",
}

# Singleton document, not a collection
VISION_KIND = "vision"
VISION_PATH = "/vision"

# Kinds with a top-level collection in the mirror (core values live in the V/TO)
COLLECTION_KINDS: tuple[EntityKind, ...] = (
    EntityKind.METRIC,
    EntityKind.ROCK,
    EntityKind.ISSUE,
    EntityKind.PERSON,
    EntityKind.TODO,
    EntityKind.MEETING,
)
