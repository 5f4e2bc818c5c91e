"""
Test leader election state machine
"""
import pytest
from browser_sync.core.election import LeaderElection


class TestLeaderElection:
    """Test claim arbitration, renewal and eviction"""

    def setup_method(self):
        self.election = LeaderElection(leader_timeout_ms=8000)

    def test_claim_vacant_slot(self):
        """First claimant wins an empty slot"""
        result = self.election.claim("A", now=1000)

        assert result.success
        assert result.leader_id == "A"
        assert self.election.state.leader_heartbeat == 1000

    def test_claim_uses_requested_timestamp(self):
        result = self.election.claim("A", now=1000, requested_ts=900)

        assert result.success
        assert self.election.state.leader_heartbeat == 900

    def test_claim_rejected_while_leader_fresh(self):
        """A live leader cannot be displaced"""
        self.election.claim("A", now=0)

        result = self.election.claim("B", now=1000)

        assert not result.success
        assert result.leader_id == "A"
        assert "is active" in result.reason
        assert self.election.leader_id == "A"
        assert self.election.state.leader_heartbeat == 0

    def test_timeout_failover(self):
        """A silent leader is displaced after the timeout"""
        self.election.claim("A", now=0)

        assert not self.election.claim("B", now=8000).success
        result = self.election.claim("B", now=8001)

        assert result.success
        assert self.election.leader_id == "B"
        assert self.election.state.leader_heartbeat == 8001

    def test_renewal_blocks_failover(self):
        """Heartbeat at half the timeout restarts the window"""
        self.election.claim("A", now=0)
        assert self.election.renew("A", 4000)

        assert not self.election.claim("B", now=8001).success
        assert self.election.claim("B", now=12001).success

    def test_reclaim_by_leader_refreshes_heartbeat(self):
        self.election.claim("A", now=0)

        result = self.election.claim("A", now=3000)

        assert result.success
        assert self.election.state.leader_heartbeat == 3000

    def test_force_claim_always_succeeds(self):
        """Force bypasses freshness"""
        self.election.claim("A", now=0)
        self.election.renew("A", 100)

        result = self.election.claim("B", now=200, force=True)

        assert result.success
        assert self.election.leader_id == "B"
        assert self.election.state.leader_heartbeat == 200

    def test_renew_never_acquires(self):
        """Only the recognised leader can renew"""
        assert not self.election.renew("A", 100)
        assert self.election.state.is_vacant

        self.election.claim("A", now=0)
        assert not self.election.renew("B", 100)
        assert self.election.state.leader_heartbeat == 0

    def test_heartbeat_never_moves_backwards(self):
        """Stale client timestamps do not rewind the leader's heartbeat"""
        self.election.claim("A", now=5000)

        self.election.renew("A", 3000)
        assert self.election.state.leader_heartbeat == 5000

        self.election.claim("A", now=6000, requested_ts=1000)
        assert self.election.state.leader_heartbeat == 5000

    def test_eviction_clears_leader(self):
        self.election.claim("A", now=0)

        assert self.election.on_evicted(["X", "A"])

        assert self.election.state.is_vacant
        assert self.election.leader_id is None
        assert self.election.state.leader_heartbeat == 0

    def test_eviction_of_other_browsers_keeps_leader(self):
        self.election.claim("A", now=0)

        assert not self.election.on_evicted(["B"])
        assert self.election.leader_id == "A"

    def test_state_dict(self):
        assert self.election.state.to_dict() == {'leaderId': None, 'leaderHeartbeat': 0}


if __name__ == '__main__':
    pytest.main([__file__])
