"""
Error taxonomy for the blocking engine and the session state machine.
"""

from __future__ import annotations


class FlowBlockError(Exception):
    """Base class for every error the core raises on purpose."""


class InvalidUrl(FlowBlockError):
    """Navigation target could not be parsed into a domain."""

    def __init__(self, url: str):
        super().__init__(f"Invalid URL: {url!r}")
        self.url = url


class SessionNotFound(FlowBlockError):
    """The referenced session is not the current one."""


class NoActiveSession(SessionNotFound):
    """There is no current session at all."""


class SessionAlreadyEnded(FlowBlockError):
    """Pause attempted after the session's time ran out."""


class NotPaused(FlowBlockError):
    """Resume requested without a paused record."""


class UnknownOperation(FlowBlockError):
    """Unrecognised command name."""

    def __init__(self, operation: str):
        super().__init__(f"Unknown operation: {operation!r}")
        self.operation = operation
