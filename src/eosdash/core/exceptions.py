"""
Errors raised by eosdash itself.

Remote failures are never raised: the remote client folds them into
``ApiResult`` values and the mirror turns them into notifications. The
exceptions here cover programming and configuration mistakes only.

Hierarchy:
    EosError (base)
    ├── UnknownKindError (entity kind the mirror does not manage)
    └── ConfigError (configuration that cannot be used)

Example:
    >>> from eosdash.core.exceptions import UnknownKindError
    >>> try:
    ...     raise UnknownKindError("widget")
    ... except UnknownKindError as e:
    ...     print(e.kind)
    widget
"""


class EosError(Exception):
    """
    Root of every error eosdash raises itself.

    Keyword arguments passed to the constructor are kept on ``details`` so
    callers can inspect them without parsing the message.
    """

    def __init__(self, message: str, **details: object) -> None:
        super().__init__(message)
        self.details = details


class UnknownKindError(EosError, ValueError):
    """
    Raised when a mirror operation names an entity kind it does not manage.

    Attributes:
        kind: The offending kind name
    """

    def __init__(self, kind: str, **details: object) -> None:
        super().__init__(f"Unknown entity kind: {kind!r}", kind=kind, **details)
        self.kind = kind


class ConfigError(EosError):
    """Raised when configuration values cannot be used (e.g. a malformed base URL)."""


__all__ = [
    "EosError",
    "UnknownKindError",
    "ConfigError",
]
