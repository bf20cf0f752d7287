"""
Entity mirror: the local copy of server state.

Example:
    >>> from eosdash.core.mirror import EntityMirror
    >>> mirror = EntityMirror(client)
    >>> report = await mirror.load_all()
    >>> result = await mirror.create("rock", {"title": "Launch", "owner": "Ann",
    ...                                       "dueDate": "2026-03-31"})
    >>> result.success
    True
"""

from eosdash.core.mirror.models import (
    LoadReport,
    MirrorSnapshot,
    MutationResult,
    project_roster,
)
from eosdash.core.mirror.service import EntityMirror

__all__ = [
    "EntityMirror",
    "LoadReport",
    "MirrorSnapshot",
    "MutationResult",
    "project_roster",
]
