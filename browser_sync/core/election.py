"""
Leader election by heartbeat timeout.

There is no consensus round here: the first browser to claim a vacant (or
timed out) slot becomes leader, and stays leader for as long as it keeps
renewing its heartbeat. States:

    VACANT  <->  HELD(leader_id, leader_heartbeat)

Leadership is lost by being displaced after leader_timeout_ms of silence,
by a force claim, by eviction of the leader's presence record, or by reset.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..utils.helpers import short_id


@dataclass
class ElectionState:
    """The single leader slot"""
    leader_id: Optional[str] = None
    leader_heartbeat: float = 0  # epoch ms, 0 while vacant

    @property
    def is_vacant(self) -> bool:
        return not self.leader_id

    def to_dict(self) -> dict:
        return {
            'leaderId': self.leader_id,
            'leaderHeartbeat': self.leader_heartbeat,
        }


@dataclass
class ClaimResult:
    """Outcome of a claim attempt"""
    success: bool
    leader_id: Optional[str]
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            'success': self.success,
            'leaderId': self.leader_id,
        }
        if self.reason:
            data['reason'] = self.reason
        return data


class LeaderElection:
    """
    Arbitrates claims against the heartbeat timeout rule.

    Like the presence registry, this controller holds no lock of its own;
    the coordinator calls it from inside its critical section.
    """

    def __init__(self, leader_timeout_ms: int = 8000):
        self.leader_timeout_ms = leader_timeout_ms
        self.state = ElectionState()
        self.logger = logging.getLogger("LeaderElection")

    @property
    def leader_id(self) -> Optional[str]:
        return self.state.leader_id

    def is_leader(self, client_id: Optional[str]) -> bool:
        return bool(client_id) and client_id == self.state.leader_id

    def heartbeat_age(self, now: float) -> float:
        return now - self.state.leader_heartbeat

    def claim(self, client_id: str, now: float, requested_ts: Optional[float] = None,
              force: bool = False) -> ClaimResult:
        """
        Try to take the leader slot.

        Args:
            client_id: Claiming browser
            now: Current time in epoch ms
            requested_ts: Heartbeat timestamp supplied by the browser (defaults to now)
            force: Take over unconditionally

        Returns:
            ClaimResult; a rejection is a normal outcome, not an error
        """
        heartbeat = requested_ts or now
        previous = self.state.leader_id
        age = self.heartbeat_age(now)

        if force:
            self.logger.info(f"⚡ FORCE claim by {short_id(client_id)} (previous: {short_id(previous)})")
            self._hold(client_id, heartbeat)
            return ClaimResult(success=True, leader_id=client_id)

        if self.state.is_vacant or age > self.leader_timeout_ms:
            if previous != client_id:
                self.logger.info(
                    f"👑 {short_id(client_id)} claimed leadership "
                    f"(previous: {short_id(previous)}, timeout: {int(age)}ms)"
                )
            self._hold(client_id, heartbeat)
            return ClaimResult(success=True, leader_id=client_id)

        if previous == client_id:
            self.renew(client_id, heartbeat)
            return ClaimResult(success=True, leader_id=client_id)

        self.logger.debug(f"Claim by {short_id(client_id)} rejected, {short_id(previous)} is active")
        return ClaimResult(
            success=False,
            leader_id=previous,
            reason=f"Leader {short_id(previous)} is active",
        )

    def renew(self, client_id: str, heartbeat: float) -> bool:
        """
        Refresh the heartbeat if client_id is the current leader.

        Never acquires leadership. The heartbeat never moves backwards while
        the same leader holds the slot.
        """
        if not self.is_leader(client_id):
            return False
        self.state.leader_heartbeat = max(self.state.leader_heartbeat, heartbeat)
        return True

    def on_evicted(self, evicted_ids: Iterable[str]) -> bool:
        """
        Consume an eviction event from the presence sweep.

        Returns:
            True if the leader was among the evicted ids and the slot was cleared
        """
        leader_id = self.state.leader_id
        if leader_id and leader_id in set(evicted_ids):
            self.logger.info(f"👑 Leader {short_id(leader_id)} went offline, clearing leadership")
            self.reset()
            return True
        return False

    def reset(self):
        self.state.leader_id = None
        self.state.leader_heartbeat = 0

    def _hold(self, client_id: str, heartbeat: float):
        if self.state.leader_id == client_id:
            heartbeat = max(self.state.leader_heartbeat, heartbeat)
        self.state.leader_id = client_id
        self.state.leader_heartbeat = heartbeat
