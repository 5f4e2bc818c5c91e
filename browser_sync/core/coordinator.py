"""
Sync coordinator: the single guarded context around presence, election and
shared state.

Every operation runs under one lock so that claim arbitration, heartbeat
renewal and presence updates always observe the same snapshot. Operations
are short in-memory transitions; nothing blocks inside the critical section.
"""
import copy
import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Mapping, Optional

from .config import CoordinatorConfig
from .election import LeaderElection
from .exceptions import InternalFault, SyncError, ValidationError
from .presence import PresenceRegistry
from .state import SharedStateStore
from ..utils.helpers import now_ms, short_id


def require_caller_id(caller_id: Any, field: str = "browserId") -> str:
    """Reject a missing, empty or non-string caller id"""
    if not caller_id or not isinstance(caller_id, str):
        raise ValidationError(f"{field} required")
    return caller_id


def optional_timestamp(value: Any, field: str) -> Optional[float]:
    """Accept None or an epoch-ms number; booleans are not timestamps"""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number")
    return value


def _optional_tag(tag: Any) -> Optional[str]:
    if tag is None or tag == "":
        return None
    return str(tag)


class SyncCoordinator:
    """
    Process-wide coordinator for polling browsers.

    Composes:
    - PresenceRegistry: who is alive (any request is a heartbeat)
    - LeaderElection: who holds the leader slot
    - SharedStateStore: the opaque payload browsers share

    The sweep produces a list of evicted ids which is handed to the election
    controller; the two components never touch each other directly.
    """

    def __init__(self, config: CoordinatorConfig = None, clock: Callable[[], float] = None,
                 version: str = None):
        from .. import __version__

        self.config = config or CoordinatorConfig()
        self.clock = clock or now_ms
        self.version = version or __version__
        self.logger = logging.getLogger(f"SyncCoordinator-{self.config.coordinator_id}")

        self.presence = PresenceRegistry(
            default_tag=self.config.default_tag,
            warning_after_ms=self.config.warning_after_ms,
        )
        self.election = LeaderElection(leader_timeout_ms=self.config.leader_timeout_ms)
        self.shared_state = SharedStateStore()

        self._lock = threading.RLock()

    @contextmanager
    def _transaction(self, operation: str):
        """
        Run an operation under the lock, all-or-nothing.

        On an unexpected exception the three structures are restored to the
        copies taken on entry and InternalFault is raised.
        """
        with self._lock:
            saved = (
                copy.deepcopy(self.presence.records),
                copy.copy(self.election.state),
                self.shared_state.data,
            )
            try:
                yield self.clock()
            except SyncError:
                self._restore(saved)
                raise
            except Exception as e:
                self._restore(saved)
                self.logger.exception(f"Internal fault during {operation}")
                raise InternalFault(f"{operation} failed") from e

    def _restore(self, saved):
        records, election_state, shared_data = saved
        self.presence.records = records
        self.election.state = election_state
        self.shared_state.data = shared_data

    def _browser_stats(self, now: float) -> Dict[str, Any]:
        return self.presence.snapshot(now, self.election.leader_id)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def get_state(self, caller_id: Optional[str] = None, tag: Any = None) -> Dict[str, Any]:
        """Full shared state, election fields and presence snapshot"""
        if caller_id is not None and not isinstance(caller_id, str):
            raise ValidationError("browserId must be a string")

        with self._transaction("get_state") as now:
            if caller_id:
                self.presence.touch(caller_id, now, _optional_tag(tag))
            stats = self._browser_stats(now)
            result = self.shared_state.read()
            result.update(self.election.state.to_dict())
            result.update(stats)

        self.logger.debug(
            f"GET state from {short_id(caller_id) if caller_id else 'unknown'} "
            f"(tf={tag or '?'}), browsers: {stats['browsersOnline']}/{stats['totalBrowsers']}"
        )
        return result

    def post_state(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Merge payload fields into the shared state.

        The sender is identified by payload['leaderId'] and may carry
        payload['leaderHeartbeat']. Any browser may push payload fields; only
        the current leader moves the heartbeat clock.
        """
        if not isinstance(payload, Mapping):
            raise ValidationError("payload must be a JSON object")
        caller_id = payload.get('leaderId')
        if caller_id is not None and not isinstance(caller_id, str):
            raise ValidationError("leaderId must be a string")
        heartbeat_ts = optional_timestamp(payload.get('leaderHeartbeat'), 'leaderHeartbeat')

        with self._transaction("post_state") as now:
            if caller_id:
                self.presence.touch(caller_id, now, _optional_tag(payload.get('tf')))
                if self.election.is_leader(caller_id):
                    self.election.renew(caller_id, heartbeat_ts or now)
            self.shared_state.merge(payload)
            result = {'success': True}
            result.update(self._browser_stats(now))
        return result

    def claim_leader(self, caller_id: str, timestamp: Optional[float] = None,
                     force: bool = False, tag: Any = None) -> Dict[str, Any]:
        """Attempt to take the leader slot; see LeaderElection.claim"""
        caller_id = require_caller_id(caller_id)
        timestamp = optional_timestamp(timestamp, 'timestamp')

        with self._transaction("claim_leader") as now:
            self.presence.touch(caller_id, now, _optional_tag(tag))
            outcome = self.election.claim(caller_id, now, requested_ts=timestamp, force=bool(force))
            result = outcome.to_dict()
            result.update(self._browser_stats(now))
        return result

    def heartbeat(self, caller_id: str, tag: Any = None, is_leader_claim: bool = False) -> Dict[str, Any]:
        """Presence heartbeat; renews leadership only for the current leader"""
        caller_id = require_caller_id(caller_id)

        with self._transaction("heartbeat") as now:
            self.presence.touch(caller_id, now, _optional_tag(tag))
            if is_leader_claim:
                self.election.renew(caller_id, now)
            result = {'success': True}
            result.update(self._browser_stats(now))
        return result

    def get_browsers(self) -> Dict[str, Any]:
        with self._transaction("get_browsers") as now:
            return self._browser_stats(now)

    def reset(self) -> Dict[str, Any]:
        """Clear every browser and the leader slot, restore default state"""
        with self._transaction("reset"):
            self.presence.clear()
            self.election.reset()
            self.shared_state.reset()
        self.logger.info("🔄 Server state reset")
        return {'success': True, 'message': 'State reset'}

    def health_check(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'status': 'ok',
                'version': self.version,
                'browsers': len(self.presence),
                'leader': short_id(self.election.leader_id),
            }

    def info(self) -> Dict[str, Any]:
        """Leader summary plus presence snapshot, for the server index page"""
        with self._transaction("info") as now:
            result = {
                'currentLeader': short_id(self.election.leader_id),
                'lastHeartbeat': self.election.state.leader_heartbeat,
            }
            result.update(self._browser_stats(now))
        return result

    def sweep(self) -> List[str]:
        """
        Evict stale browsers and clear leadership if the leader was evicted.

        Returns:
            Evicted browser ids
        """
        with self._transaction("sweep") as now:
            evicted = self.presence.sweep(now, self.config.presence_timeout_ms)
            if evicted:
                self.election.on_evicted(evicted)
                self.logger.info(
                    f"🧹 Cleaned {len(evicted)} stale browser(s). Active: {len(self.presence)}"
                )
        return evicted
