"""Error types raised by hound."""

from __future__ import annotations


class HoundError(Exception):
    """Base class for hound errors."""


class ConfigurationError(HoundError):
    """Configuration file absent, missing required keys or holding invalid values."""

    def __init__(self, message: str, missing: list[str] | None = None, invalid: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []
        self.invalid = invalid or []


class SourceFetchError(HoundError):
    """A source operation failed to fetch or decode its records."""

    def __init__(self, source: str, operation: str, reason: str):
        super().__init__(f"{source}.{operation} failed: {reason}")
        self.source = source
        self.operation = operation
        self.reason = reason


class AggregationTimeoutError(HoundError):
    """Not every fetch operation reported before the aggregation deadline."""

    def __init__(self, received: int, expected: int):
        super().__init__(f"aggregation timed out, {received}/{expected} sources reported")
        self.received = received
        self.expected = expected
