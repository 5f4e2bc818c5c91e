"""
Presence registry for polling browsers.

Every request a browser makes counts as a heartbeat. Records that stop
reporting are evicted by the periodic sweep; the registry itself never
decides anything about leadership, it only reports who was evicted.

The registry is not thread-safe on its own: the coordinator serializes all
access through its single lock.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..utils.helpers import format_seconds_ago, short_id

STATUS_LEADER = "leader"
STATUS_WARNING = "warning"
STATUS_ONLINE = "online"


@dataclass
class ClientRecord:
    """Last known contact from one browser"""
    client_id: str
    last_seen: float  # epoch ms
    tag: str

    def age_seconds(self, now: float) -> int:
        # round half up, matching the browsers' own display
        return int(math.floor((now - self.last_seen) / 1000.0 + 0.5))

    def to_dict(self, now: float, leader_id: Optional[str], warning_after_ms: int) -> dict:
        is_leader = leader_id is not None and leader_id == self.client_id
        seconds_ago = self.age_seconds(now)

        if is_leader:
            status = STATUS_LEADER
        elif seconds_ago * 1000 > warning_after_ms:
            status = STATUS_WARNING
        else:
            status = STATUS_ONLINE

        return {
            'id': short_id(self.client_id),
            'browserId': self.client_id,
            'isLeader': is_leader,
            'status': status,
            'lastSeen': format_seconds_ago(seconds_ago),
            'tf': self.tag,
        }


class PresenceRegistry:
    """
    Time-windowed liveness of browsers.

    Features:
    - touch() inserts or refreshes a record (implicit heartbeat)
    - snapshot() derives a leader/warning/online status per record
    - sweep() evicts records older than the presence timeout and returns their ids
    """

    def __init__(self, default_tag: str = "5", warning_after_ms: int = 10000):
        self.default_tag = default_tag
        self.warning_after_ms = warning_after_ms
        self.logger = logging.getLogger("PresenceRegistry")
        self.records: Dict[str, ClientRecord] = {}

    def touch(self, client_id: str, now: float, tag: Optional[str] = None) -> ClientRecord:
        """
        Insert or refresh the record for client_id.

        Args:
            client_id: Browser identifier (non-empty)
            now: Current time in epoch ms
            tag: Optional hint supplied by the browser; keeps the prior tag when absent

        Returns:
            The refreshed record
        """
        record = self.records.get(client_id)
        if record is None:
            record = ClientRecord(
                client_id=client_id,
                last_seen=now,
                tag=str(tag) if tag else self.default_tag,
            )
            self.records[client_id] = record
            self.logger.debug(f"New browser {short_id(client_id)} (tf={record.tag})")
        else:
            record.last_seen = now
            if tag:
                record.tag = str(tag)
        return record

    def snapshot(self, now: float, leader_id: Optional[str] = None) -> dict:
        """Read-only view of all records with derived status"""
        browsers = [
            record.to_dict(now, leader_id, self.warning_after_ms)
            for record in self.records.values()
        ]
        return {
            'totalBrowsers': len(browsers),
            # no offline tier exists before eviction, so every record counts
            'browsersOnline': len(browsers),
            'browsersList': browsers,
        }

    def sweep(self, now: float, presence_timeout_ms: float) -> List[str]:
        """
        Remove every record not seen for more than presence_timeout_ms.

        Returns:
            Ids of the evicted records
        """
        evicted = [
            client_id for client_id, record in self.records.items()
            if now - record.last_seen > presence_timeout_ms
        ]
        for client_id in evicted:
            del self.records[client_id]
        return evicted

    def get(self, client_id: str) -> Optional[ClientRecord]:
        return self.records.get(client_id)

    def clear(self):
        self.records.clear()

    def __contains__(self, client_id: str) -> bool:
        return client_id in self.records

    def __len__(self) -> int:
        return len(self.records)
