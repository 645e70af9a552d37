from __future__ import annotations
from typing import Optional


class RepoBrowserError(Exception):
    """Base class for errors raised by the file query layer."""


class InvalidArgument(RepoBrowserError, ValueError):
    """A required input (file path, search query, path filter) was missing."""


class UpstreamFetchError(RepoBrowserError):
    """
    The GitHub contents API could not be reached, answered with a non-2xx
    status, or returned something we could not interpret.

    The message is for server-side logs only; HTTP responses carry a
    generic text instead.
    """

    def __init__(self, message: str, *, path: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.path = path
        self.status_code = status_code
