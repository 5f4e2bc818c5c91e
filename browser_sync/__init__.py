"""
Browser Sync Coordinator

Keeps a set of polling browsers agreed on one active leader and a shared
state blob, using heartbeats and timeouts over plain HTTP.
"""

__version__ = "2.2.0"

from .core.config import Config, CoordinatorConfig, ServerConfig
from .core.coordinator import SyncCoordinator
from .core.election import ClaimResult, ElectionState, LeaderElection
from .core.exceptions import InternalFault, SyncError, ValidationError
from .core.presence import ClientRecord, PresenceRegistry
from .core.state import DEFAULT_STATE, PROTECTED_FIELDS, SharedStateStore
from .core.sweeper import PresenceSweeper

__all__ = [
    "Config",
    "CoordinatorConfig",
    "ServerConfig",
    "SyncCoordinator",
    "ClaimResult",
    "ElectionState",
    "LeaderElection",
    "InternalFault",
    "SyncError",
    "ValidationError",
    "ClientRecord",
    "PresenceRegistry",
    "DEFAULT_STATE",
    "PROTECTED_FIELDS",
    "SharedStateStore",
    "PresenceSweeper",
]
