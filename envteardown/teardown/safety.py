"""Safety checks for teardown runs.

Evaluates the environment filter and the matched instance count against
configured thresholds before anything is deleted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from envteardown.discovery.matching import WILDCARD_FILTER
from envteardown.errors import ConfigurationError

logger = logging.getLogger(__name__)

EMPTY_FILTER = "empty_filter"
FILTER_TOO_SHORT = "filter_too_short"
NO_MATCHES = "no_matches"
TOO_MANY_INSTANCES = "too_many_instances"


@dataclass(frozen=True)
class SafetyPolicy:
    """Safety thresholds.

    Attributes:
        min_filter_length: Shortest filter accepted without override
        max_instances: Largest matched instance count accepted without override
    """

    min_filter_length: int = 8
    max_instances: int = 6


@dataclass(frozen=True)
class SafetyOverride:
    """Explicit operator acknowledgments, one per safety rule."""

    allow_empty_filter: bool = False
    allow_short_filter: bool = False
    allow_no_matches: bool = False
    allow_too_many: bool = False

    @classmethod
    def none(cls) -> "SafetyOverride":
        return cls()

    @classmethod
    def all(cls) -> "SafetyOverride":
        """Override every rule (the "really sure" escape hatch)."""
        return cls(
            allow_empty_filter=True,
            allow_short_filter=True,
            allow_no_matches=True,
            allow_too_many=True,
        )

    def allows(self, rule: str) -> bool:
        return {
            EMPTY_FILTER: self.allow_empty_filter,
            FILTER_TOO_SHORT: self.allow_short_filter,
            NO_MATCHES: self.allow_no_matches,
            TOO_MANY_INSTANCES: self.allow_too_many,
        }.get(rule, False)


@dataclass(frozen=True)
class RuleResult:
    """Outcome of a single safety rule."""

    rule: str
    passed: bool
    overridden: bool = False
    message: str = ""


@dataclass
class SafetyVerdict:
    """Outcome of every evaluated rule, in evaluation order."""

    results: list[RuleResult] = field(default_factory=list)

    @property
    def proceed(self) -> bool:
        return self.first_failure() is None

    def first_failure(self) -> Optional[RuleResult]:
        for result in self.results:
            if not result.passed and not result.overridden:
                return result
        return None

    def overridden(self) -> list[RuleResult]:
        return [r for r in self.results if r.overridden]


class SafetyGate:
    """Layered safety gate.

    Every rule is evaluated independently, even after an earlier rule failed,
    and each failure can only be suppressed by its own override. The first
    failure that is not overridden aborts the run.

    Attributes:
        policy: Thresholds
        override: Per-rule overrides
    """

    def __init__(self, policy: Optional[SafetyPolicy] = None, override: Optional[SafetyOverride] = None) -> None:
        self.policy = policy or SafetyPolicy()
        self.override = override or SafetyOverride.none()

    def resolve_filter(self, raw_filter: Optional[str]) -> tuple[str, str]:
        """Resolve the filter actually used for matching.

        An empty filter is replaced by a pattern matching every instance, but
        only when the empty-filter override is set.

        Returns:
            Tuple of (env_filter, display_filter)
        """
        env_filter = (raw_filter or "").strip()
        if not env_filter and self.override.allow_empty_filter:
            logger.warning("Empty filter overridden, matching every instance")
            return WILDCARD_FILTER, "*"
        return env_filter, env_filter

    def check_filter(self, env_filter: str) -> SafetyVerdict:
        """Evaluate the rules that only depend on the filter."""
        verdict = SafetyVerdict()
        empty = not env_filter.strip()

        verdict.results.append(
            self._result(
                EMPTY_FILTER,
                passed=not empty,
                message=(
                    "No 'env_id' set, refusing to delete all instances and volumes, please provide a string "
                    "to match via 'env_id'. Override with --really-sure"
                ),
            )
        )

        # Wildcard filters are only produced by the empty-filter override and are exempt from the length rule
        length = len(env_filter.strip())
        verdict.results.append(
            self._result(
                FILTER_TOO_SHORT,
                passed=env_filter == WILDCARD_FILTER or length >= self.policy.min_filter_length,
                message=(
                    f"'env_id' is too short at only '{length}' characters, risk of deleting too many instances. "
                    f"Override --min-filter-length or with --really-sure"
                ),
            )
        )
        return verdict

    def check_instances(self, display_filter: str, instance_count: int) -> SafetyVerdict:
        """Evaluate the rules that depend on the matched instance count."""
        verdict = SafetyVerdict()

        verdict.results.append(
            self._result(
                NO_MATCHES,
                passed=instance_count > 0,
                message=f"'{display_filter}' does not match any instances.",
            )
        )
        verdict.results.append(
            self._result(
                TOO_MANY_INSTANCES,
                passed=instance_count <= self.policy.max_instances,
                message=(
                    f"'{display_filter}' matches {instance_count} instances, risk of deleting too many instances. "
                    f"Override --max-instances or with --really-sure"
                ),
            )
        )
        return verdict

    def enforce(self, verdict: SafetyVerdict) -> None:
        """Abort on the first failed rule without an override.

        Raises:
            ConfigurationError: Naming the failed rule and how to override it
        """
        for result in verdict.overridden():
            logger.warning(f"Safety rule '{result.rule}' overridden: {result.message}")

        failure = verdict.first_failure()
        if failure is not None:
            raise ConfigurationError(failure.rule, failure.message)

    def _result(self, rule: str, passed: bool, message: str) -> RuleResult:
        if passed:
            return RuleResult(rule=rule, passed=True)
        return RuleResult(rule=rule, passed=False, overridden=self.override.allows(rule), message=message)
