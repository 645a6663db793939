"""
HTTP status codes for domain errors.
"""

from __future__ import annotations

from ..errors import (
    FlowBlockError,
    InvalidUrl,
    NotPaused,
    SessionAlreadyEnded,
    SessionNotFound,
    UnknownOperation,
)

_ERROR_STATUS = {
    SessionNotFound: 404,
    SessionAlreadyEnded: 409,
    NotPaused: 409,
    InvalidUrl: 400,
    UnknownOperation: 400,
}


def error_status(exc: FlowBlockError) -> int:
    for exc_type, code in _ERROR_STATUS.items():
        if isinstance(exc, exc_type):
            return code
    return 400
