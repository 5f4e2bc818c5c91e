"""
Shared state blob
"""
import copy
from typing import Any, Dict, Mapping

from .exceptions import ValidationError

# Election fields are owned by LeaderElection and never merged from payloads
PROTECTED_FIELDS = frozenset({'leaderId', 'leaderHeartbeat'})

DEFAULT_STATE: Dict[str, Any] = {
    'currentIndex': 0,
    'rotateInterval': 7,
    'fetchInterval': 120,
    'colLInterval': 10,
    'selectedFilters': ['Comfortable'],
    'filteredData': [],
    'alertSettings': {},
}


def filter_payload(payload: Mapping[str, Any], exclude=PROTECTED_FIELDS) -> Dict[str, Any]:
    """Drop excluded fields from a payload"""
    return {key: value for key, value in payload.items() if key not in exclude}


class SharedStateStore:
    """
    Opaque key/value payload shared by all browsers.

    Merges are shallow and last-write-wins per field. Unknown fields are
    stored as-is.
    """

    def __init__(self, defaults: Mapping[str, Any] = None):
        self.defaults = copy.deepcopy(dict(defaults if defaults is not None else DEFAULT_STATE))
        self.data: Dict[str, Any] = copy.deepcopy(self.defaults)

    def merge(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Overwrite every non-protected field present in payload.

        Raises:
            ValidationError: payload is not a mapping

        Returns:
            The fields that were applied
        """
        if not isinstance(payload, Mapping):
            raise ValidationError("payload must be a JSON object")

        updates = filter_payload(payload)
        # build the new blob first so a failure cannot leave it half-updated
        merged = dict(self.data)
        merged.update(updates)
        self.data = merged
        return updates

    def read(self) -> Dict[str, Any]:
        return copy.deepcopy(self.data)

    def reset(self):
        self.data = copy.deepcopy(self.defaults)
