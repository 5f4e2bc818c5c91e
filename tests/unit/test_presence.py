"""
Test presence registry
"""
import pytest
from browser_sync.core.presence import PresenceRegistry


class TestPresenceRegistry:
    """Test touch, snapshot and sweep"""

    def setup_method(self):
        self.registry = PresenceRegistry(default_tag="5", warning_after_ms=10000)

    def test_touch_creates_record_with_default_tag(self):
        """First contact registers the browser"""
        record = self.registry.touch("browser-aaaaaaaa", now=1000)

        assert "browser-aaaaaaaa" in self.registry
        assert record.last_seen == 1000
        assert record.tag == "5"

    def test_touch_keeps_prior_tag_when_absent(self):
        """Tag is last-write-wins and survives tagless contacts"""
        self.registry.touch("b1", now=0, tag="15")
        self.registry.touch("b1", now=500)

        record = self.registry.get("b1")
        assert record.tag == "15"
        assert record.last_seen == 500

        self.registry.touch("b1", now=600, tag="60")
        assert self.registry.get("b1").tag == "60"

    def test_snapshot_fields(self):
        """Snapshot exposes short and full ids"""
        self.registry.touch("browser-1234567890", now=0, tag="1")

        snapshot = self.registry.snapshot(now=3000)

        assert snapshot['totalBrowsers'] == 1
        assert snapshot['browsersOnline'] == 1
        entry = snapshot['browsersList'][0]
        assert entry['id'] == "34567890"
        assert entry['browserId'] == "browser-1234567890"
        assert entry['isLeader'] is False
        assert entry['lastSeen'] == "3s ago"
        assert entry['tf'] == "1"

    def test_snapshot_status_tiers(self):
        """leader beats warning beats online"""
        self.registry.touch("fresh", now=20000)
        self.registry.touch("stale", now=0)
        self.registry.touch("leader", now=0)

        snapshot = self.registry.snapshot(now=25000, leader_id="leader")
        statuses = {b['browserId']: b['status'] for b in snapshot['browsersList']}

        assert statuses == {"fresh": "online", "stale": "warning", "leader": "leader"}
        # every registered record counts as online until evicted
        assert snapshot['browsersOnline'] == 3

    def test_warning_threshold_is_exclusive(self):
        """Exactly 10s old is still online"""
        self.registry.touch("b1", now=0)

        assert self.registry.snapshot(now=10000)['browsersList'][0]['status'] == "online"
        assert self.registry.snapshot(now=11000)['browsersList'][0]['status'] == "warning"

    def test_sweep_evicts_only_stale_records(self):
        """Records older than the timeout are removed and reported"""
        self.registry.touch("old", now=0)
        self.registry.touch("new", now=20000)

        evicted = self.registry.sweep(now=30001, presence_timeout_ms=30000)

        assert evicted == ["old"]
        assert "old" not in self.registry
        assert "new" in self.registry

    def test_sweep_boundary(self):
        """Age equal to the timeout is kept"""
        self.registry.touch("b1", now=0)

        assert self.registry.sweep(now=30000, presence_timeout_ms=30000) == []
        assert len(self.registry) == 1

    def test_clear(self):
        self.registry.touch("b1", now=0)
        self.registry.touch("b2", now=0)

        self.registry.clear()

        assert len(self.registry) == 0
        assert self.registry.snapshot(now=0)['browsersList'] == []


if __name__ == '__main__':
    pytest.main([__file__])
