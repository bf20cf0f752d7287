"""
Ephemeral user-facing notifications.

Each pushed notification removes itself after a fixed delay. When an event
loop is running, removal is a ``loop.call_later`` timer keyed by the
notification id; outside a loop, expired entries are dropped the next time
the queue is read.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from eosdash.core.entities.models import Severity

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5.0

_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.ERROR: logging.WARNING,
}


class Notification(BaseModel):
    """A message shown to the user until it expires."""

    model_config = ConfigDict(frozen=True)

    id: int
    message: str
    severity: Severity = Severity.INFO


@dataclass
class _Entry:
    notification: Notification
    expires_at: float
    timer: asyncio.TimerHandle | None = None


class NotificationQueue:
    """
    Insertion-ordered set of active notifications.

    Example:
        >>> queue = NotificationQueue()
        >>> nid = queue.push("rock created successfully!", Severity.SUCCESS)
        >>> [n.message for n in queue.list()]
        ['rock created successfully!']
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the queue.

        Args:
            ttl: Seconds each notification stays active
            clock: Monotonic clock used for lazy expiry
        """
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[int, _Entry] = {}
        self._last_id = 0

    def _next_id(self) -> int:
        # Millisecond timestamp, bumped when two pushes land in the same millisecond
        candidate = time.time_ns() // 1_000_000
        self._last_id = max(candidate, self._last_id + 1)
        return self._last_id

    def push(self, message: str, severity: Severity | str = Severity.INFO) -> int:
        """
        Add a notification and schedule its removal.

        Args:
            message: Text shown to the user
            severity: info, success or error

        Returns:
            The notification id
        """
        level = Severity(severity)
        notification = Notification(id=self._next_id(), message=message, severity=level)
        entry = _Entry(notification=notification, expires_at=self._clock() + self.ttl)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            entry.timer = loop.call_later(self.ttl, self._expire, notification.id)

        self._entries[notification.id] = entry
        logger.log(_LOG_LEVELS[level], "[%s] %s", level.value, message)
        return notification.id

    def _expire(self, notification_id: int) -> None:
        self._entries.pop(notification_id, None)

    def dismiss(self, notification_id: int) -> bool:
        """Remove a notification before it expires. Returns False if it was already gone."""
        entry = self._entries.pop(notification_id, None)
        if entry is None:
            return False
        if entry.timer is not None:
            entry.timer.cancel()
        return True

    def list(self) -> list[Notification]:
        """Active notifications in insertion order."""
        now = self._clock()
        for notification_id in [i for i, e in self._entries.items() if e.expires_at <= now]:
            self.dismiss(notification_id)
        return [entry.notification for entry in self._entries.values()]

    def clear(self) -> None:
        """Drop every notification and cancel pending timers."""
        for notification_id in list(self._entries):
            self.dismiss(notification_id)

    def __len__(self) -> int:
        return len(self.list())


__all__ = ["DEFAULT_TTL_SECONDS", "Notification", "NotificationQueue"]
