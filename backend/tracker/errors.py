"""Exception types raised by the tracker pipeline."""
from __future__ import annotations


class TrackerError(RuntimeError):
    """Base class for tracker failures."""


class StoreUnavailable(TrackerError):
    """Raised when the dataset file is missing or cannot be parsed."""


class FetchFailure(TrackerError):
    """Raised when a page cannot be fetched from the metadata source."""

    def __init__(self, url: str, reason: str, *, status_code: int | None = None) -> None:
        super().__init__(f"{reason} ({url})")
        self.url = url
        self.reason = reason
        self.status_code = status_code


class NotFound(TrackerError):
    """Raised when a search yields no usable identifier."""


class ValidationMismatch(TrackerError):
    """Raised when a page title does not match the expected series title."""

    def __init__(self, external_id: str, expected: str, observed: str) -> None:
        super().__init__(f"{external_id} shows {observed or 'unknown'!r} instead of {expected!r}")
        self.external_id = external_id
        self.expected = expected
        self.observed = observed


class IdentifierConflict(TrackerError):
    """Raised when an identifier already belongs to a different record."""

    def __init__(self, external_id: str, owner: str) -> None:
        super().__init__(f"{external_id} already belongs to {owner!r}")
        self.external_id = external_id
        self.owner = owner
