"""
HTTP transport
"""
from .app import SyncServer

__all__ = ["SyncServer"]
