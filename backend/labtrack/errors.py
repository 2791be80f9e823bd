from __future__ import annotations
"""Error taxonomy shared by the service layer and the HTTP surface.

Every error is a werkzeug HTTPException so route handlers can let service
errors propagate to the unified JSON error handler in create_app unchanged.
"""
from werkzeug.exceptions import BadRequest, Conflict, NotFound, ServiceUnavailable


class ValidationError(BadRequest):
    """Request rejected before any write was attempted."""


class ConflictError(Conflict):
    """Request conflicts with the current state of an asset or ticket."""


class NotFoundError(NotFound):
    pass


class StorageError(ServiceUnavailable):
    """A unit of work failed to commit and was rolled back. Safe to retry."""


class HolidayFetchError(Exception):
    """Holiday data for one (year, region) could not be loaded."""

    def __init__(self, year: int, region: str, reason: str):
        super().__init__(f"holiday data for {year} ({region}) unavailable: {reason}")
        self.year = year
        self.region = region
        self.reason = reason


__all__ = ['ValidationError', 'ConflictError', 'NotFoundError', 'StorageError', 'HolidayFetchError']
