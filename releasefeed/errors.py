#!/usr/bin/env python3
"""
Error taxonomy for external calls and cache storage

Clients raise these; pipeline stages catch them and fall through to the
next strategy instead of aborting the run.
"""

from typing import Optional


class ReleaseFeedError(Exception):
    """Base class for all releasefeed errors"""


class ServiceError(ReleaseFeedError):
    """Any failure talking to an external service or listing page"""


class TransportError(ServiceError):
    """Network failure, timeout, or non-2xx HTTP status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(ServiceError):
    """Service answered but reported no result (HTTP 404 or empty payload)"""


class ParseError(ServiceError):
    """Response body could not be parsed into the expected structure"""


class SourceBlockedError(ParseError):
    """Listing source returned an anti-bot challenge page instead of content"""


class CacheIOError(ReleaseFeedError):
    """Rating cache could not be read from or written to disk"""
