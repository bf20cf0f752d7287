"""
Remote access: the persistence API and the CRM webhook.

Example:
    >>> from eosdash.core.remote import RemoteClient, ConnectionStatus
    >>> client = RemoteClient("https://api.example.com/api/v1")
    >>> client.status is ConnectionStatus.DISCONNECTED
    True
"""

from eosdash.core.remote.client import DEFAULT_TIMEOUT, RemoteClient
from eosdash.core.remote.models import ApiResult, ConnectionStatus

__all__ = [
    "DEFAULT_TIMEOUT",
    "ApiResult",
    "ConnectionStatus",
    "RemoteClient",
]
