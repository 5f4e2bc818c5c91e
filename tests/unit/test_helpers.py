"""
Test utility functions
"""
import os
from browser_sync.utils.helpers import format_seconds_ago, get_process_info, short_id


def test_short_id():
    assert short_id("browser-1234567890") == "34567890"
    assert short_id("abc") == "abc"
    assert short_id(None) == "none"
    assert short_id("") == "none"


def test_format_seconds_ago():
    assert format_seconds_ago(0) == "0s ago"
    assert format_seconds_ago(12) == "12s ago"


def test_process_info():
    info = get_process_info()

    assert info['pid'] == os.getpid()
    assert 0 <= info['memory_usage'] <= 100
