"""Teardown pipeline.

This module provides the safety gate, confirmation gate and ordered deletion
for resources discovered for one environment.

Classes:
    SafetyGate: Filter and instance-count threshold checks
    ConfirmationGate: Operator-facing summary and approval
    TeardownSequencer: Ordered, fault-tolerant deletion
    TeardownRunner: End-to-end teardown pass
"""

from __future__ import annotations

__all__ = [
    "SafetyGate",
    "ConfirmationGate",
    "TeardownSequencer",
    "TeardownRunner",
]
