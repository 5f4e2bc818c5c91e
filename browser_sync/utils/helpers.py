"""
Utility functions for the browser sync coordinator
"""
import os
import time
from typing import Any, Dict, Optional
import psutil


def short_id(client_id: Optional[str], length: int = 8) -> str:
    """
    Shorten a browser id for display

    Args:
        client_id: Full browser identifier
        length: Number of trailing characters to keep

    Returns:
        The last `length` characters, or 'none' for an empty id
    """
    if not client_id:
        return "none"
    return client_id[-length:]


def format_seconds_ago(seconds: int) -> str:
    return f"{seconds}s ago"


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds"""
    return int(time.time() * 1000)


def get_process_info() -> Dict[str, Any]:
    """
    Get resource usage of the running coordinator process

    Returns:
        Dictionary with memory and cpu figures
    """
    process = psutil.Process(os.getpid())
    return {
        "pid": process.pid,
        "memory_rss_mb": round(process.memory_info().rss / (1024 * 1024), 1),
        "memory_usage": psutil.virtual_memory().percent,
        "cpu_percent": process.cpu_percent(interval=None),
    }
