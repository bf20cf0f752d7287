"""
eosdash - EOS business-operations dashboard client.

Keeps an in-memory mirror of scorecard metrics, rocks, issues, people,
to-dos, meetings and the V/TO in sync with a remote persistence API.
"""

__version__ = "0.1.0"

# Re-export core models for convenience
from eosdash.core.entities import EntityKind
from eosdash.core.mirror import EntityMirror
from eosdash.core.remote import RemoteClient

__all__ = ["EntityKind", "EntityMirror", "RemoteClient", "__version__"]
