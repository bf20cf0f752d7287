"""
Configuration data models for eosdash.

These models define the structure of .eosdash.json and
~/.config/eosdash/config.json files, with validation via Pydantic.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ApiConfig(BaseModel):
    """
    Persistence API and CRM webhook endpoints.
    """
    base_url: str = Field(
        default="http://localhost:8787/api/v1",
        description="Base URL of the persistence API"
    )
    webhook_url: Optional[str] = Field(
        default="http://localhost:8787/api/ghl/webhook",
        description="Base URL of the CRM webhook (null disables syncing)"
    )
    timeout_seconds: Optional[float] = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout in seconds (null waits indefinitely)"
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"must be an http(s) URL, got {v!r}")
        return v.rstrip("/")

    @field_validator("webhook_url")
    @classmethod
    def validate_webhook_url(cls, v: Optional[str]) -> Optional[str]:
        """Require an http(s) URL; empty means no webhook."""
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"must be an http(s) URL, got {v!r}")
        return v.rstrip("/")


class NotificationConfig(BaseModel):
    """
    User-facing notification behavior.
    """
    ttl_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Seconds a notification stays visible"
    )


class EosConfig(BaseModel):
    """
    Top-level eosdash configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = EosConfig(api=ApiConfig(base_url="https://api.example.com/v1"))
        >>> config.notifications.ttl_seconds
        5.0
    """
    api: ApiConfig = Field(
        default_factory=ApiConfig,
        description="Persistence API and webhook endpoints"
    )
    notifications: NotificationConfig = Field(
        default_factory=NotificationConfig,
        description="Notification behavior"
    )

    model_config = ConfigDict(
        extra="allow",  # Allow extra fields for forward compatibility
        validate_assignment=True,
    )
