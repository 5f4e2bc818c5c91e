"""
Errors raised by the coordination core
"""


class SyncError(Exception):
    """Base class for coordinator errors"""


class ValidationError(SyncError):
    """Missing caller id or malformed payload; nothing was mutated"""


class InternalFault(SyncError):
    """Unexpected failure inside an operation; state was left unchanged"""
