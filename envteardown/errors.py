"""Exception hierarchy for teardown runs.

Only ConfigurationError and DiscoveryError abort a run. Per-resource failures
are captured as deletion records instead of being raised.
"""

from __future__ import annotations


class TeardownError(Exception):
    """Base class for fatal teardown errors."""


class ConfigurationError(TeardownError):
    """A safety rule failed and was not overridden.

    Attributes:
        rule: Identifier of the failed rule (e.g. "filter_too_short")
    """

    def __init__(self, rule: str, message: str) -> None:
        super().__init__(message)
        self.rule = rule


class DiscoveryError(TeardownError):
    """The provider could not be reached or listed."""
