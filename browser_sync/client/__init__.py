"""
HTTP client
"""
from .sync_client import SyncClient, SyncClientError

__all__ = ["SyncClient", "SyncClientError"]
