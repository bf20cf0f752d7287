"""
Data models for the remote client.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ConnectionStatus(str, Enum):
    """Connectivity as observed by the most recent remote call."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    ERROR = "error"


class ApiResult(BaseModel):
    """
    Outcome of a call to the persistence API.

    Mirrors the server's ``{success, data?, error?}`` envelope. Transport
    failures are folded into the same shape with ``success=False``.

    Example:
        >>> ApiResult(success=False, error="Not found").success
        False
    """

    success: bool = Field(description="Whether the server confirmed the operation")
    data: Any = Field(default=None, description="Envelope payload on success")
    error: str | None = Field(default=None, description="Error message on failure")
