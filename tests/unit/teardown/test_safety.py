"""Tests for SafetyGate.

Test coverage for each safety rule, its override and rule independence.
"""

from __future__ import annotations

import pytest

from envteardown.discovery.matching import WILDCARD_FILTER
from envteardown.errors import ConfigurationError
from envteardown.teardown.safety import (
    EMPTY_FILTER,
    FILTER_TOO_SHORT,
    NO_MATCHES,
    TOO_MANY_INSTANCES,
    SafetyGate,
    SafetyOverride,
    SafetyPolicy,
)


class TestSafetyPolicy:
    """Test suite for policy defaults."""

    def test_defaults(self) -> None:
        policy = SafetyPolicy()

        assert policy.min_filter_length == 8
        assert policy.max_instances == 6

    def test_override_all(self) -> None:
        override = SafetyOverride.all()

        assert all(override.allows(rule) for rule in (EMPTY_FILTER, FILTER_TOO_SHORT, NO_MATCHES, TOO_MANY_INSTANCES))
        assert not any(
            SafetyOverride.none().allows(rule)
            for rule in (EMPTY_FILTER, FILTER_TOO_SHORT, NO_MATCHES, TOO_MANY_INSTANCES)
        )


class TestFilterRules:
    """Test suite for rules evaluated before discovery."""

    def test_valid_filter_passes(self) -> None:
        gate = SafetyGate()

        verdict = gate.check_filter("abcd1234")

        assert verdict.proceed is True
        gate.enforce(verdict)

    def test_short_filter_aborts(self) -> None:
        """Test a 2-character filter aborts citing the minimum length."""
        gate = SafetyGate(SafetyPolicy(min_filter_length=8))

        with pytest.raises(ConfigurationError) as exc_info:
            gate.enforce(gate.check_filter("ab"))

        assert exc_info.value.rule == FILTER_TOO_SHORT
        assert "too short at only '2' characters" in str(exc_info.value)
        assert "--min-filter-length" in str(exc_info.value)

    def test_short_filter_with_lower_minimum_passes(self) -> None:
        gate = SafetyGate(SafetyPolicy(min_filter_length=2))

        assert gate.check_filter("ab").proceed is True

    def test_short_filter_override(self) -> None:
        gate = SafetyGate(override=SafetyOverride(allow_short_filter=True))

        verdict = gate.check_filter("ab")

        assert verdict.proceed is True
        assert [r.rule for r in verdict.overridden()] == [FILTER_TOO_SHORT]

    def test_empty_filter_aborts(self) -> None:
        gate = SafetyGate()
        env_filter, _ = gate.resolve_filter("   ")

        with pytest.raises(ConfigurationError) as exc_info:
            gate.enforce(gate.check_filter(env_filter))

        assert exc_info.value.rule == EMPTY_FILTER
        assert "No 'env_id' set" in str(exc_info.value)

    def test_empty_filter_override_uses_wildcard(self) -> None:
        """Test an overridden empty filter becomes the match-everything pattern."""
        gate = SafetyGate(override=SafetyOverride(allow_empty_filter=True))

        env_filter, display = gate.resolve_filter(None)

        assert env_filter == WILDCARD_FILTER
        assert display == "*"
        assert gate.check_filter(env_filter).proceed is True

    def test_empty_filter_is_not_replaced_without_override(self) -> None:
        gate = SafetyGate(override=SafetyOverride(allow_short_filter=True))

        assert gate.resolve_filter("") == ("", "")

    def test_short_override_does_not_cover_empty(self) -> None:
        """Test each override only suppresses its own rule."""
        gate = SafetyGate(override=SafetyOverride(allow_short_filter=True))

        with pytest.raises(ConfigurationError) as exc_info:
            gate.enforce(gate.check_filter(""))

        assert exc_info.value.rule == EMPTY_FILTER


class TestInstanceRules:
    """Test suite for rules evaluated after discovery."""

    def test_three_matches_pass(self) -> None:
        gate = SafetyGate()

        assert gate.check_instances("abcd1234", 3).proceed is True

    def test_no_matches_aborts(self) -> None:
        gate = SafetyGate()

        with pytest.raises(ConfigurationError) as exc_info:
            gate.enforce(gate.check_instances("abcd1234", 0))

        assert exc_info.value.rule == NO_MATCHES
        assert "does not match any instances" in str(exc_info.value)

    def test_no_matches_override(self) -> None:
        gate = SafetyGate(override=SafetyOverride(allow_no_matches=True))

        assert gate.check_instances("abcd1234", 0).proceed is True

    def test_too_many_aborts(self) -> None:
        """Test 9 matches with a maximum of 6 aborts."""
        gate = SafetyGate(SafetyPolicy(max_instances=6))

        with pytest.raises(ConfigurationError) as exc_info:
            gate.enforce(gate.check_instances("abcd1234", 9))

        assert exc_info.value.rule == TOO_MANY_INSTANCES
        assert "matches 9 instances" in str(exc_info.value)
        assert "--max-instances" in str(exc_info.value)

    def test_max_is_inclusive(self) -> None:
        gate = SafetyGate(SafetyPolicy(max_instances=6))

        assert gate.check_instances("abcd1234", 6).proceed is True

    def test_too_many_override(self) -> None:
        gate = SafetyGate(override=SafetyOverride(allow_too_many=True))

        assert gate.check_instances("abcd1234", 50).proceed is True


class TestLayeredEvaluation:
    """Test suite for evaluating every rule independently."""

    def test_all_rules_evaluated_after_failure(self) -> None:
        """Test a failed filter rule does not stop the count rules from being checked."""
        gate = SafetyGate()

        before = gate.check_filter("ab")
        after = gate.check_instances("ab", 0)

        assert [r.rule for r in before.results] == [EMPTY_FILTER, FILTER_TOO_SHORT]
        assert [r.passed for r in before.results] == [True, False]
        assert [r.rule for r in after.results] == [NO_MATCHES, TOO_MANY_INSTANCES]
        assert [r.passed for r in after.results] == [False, True]

    def test_first_unoverridden_failure_aborts(self) -> None:
        gate = SafetyGate(override=SafetyOverride(allow_short_filter=True))

        gate.enforce(gate.check_filter("ab"))
        verdict = gate.check_instances("ab", 0)

        assert verdict.first_failure().rule == NO_MATCHES
        with pytest.raises(ConfigurationError):
            gate.enforce(verdict)

    def test_really_sure_overrides_everything(self) -> None:
        gate = SafetyGate(override=SafetyOverride.all())

        before = gate.check_filter("ab")
        after = gate.check_instances("ab", 100)

        assert before.proceed is True
        assert after.proceed is True
        gate.enforce(before)
        gate.enforce(after)
