"""Data models for discovered resources, plans and run reports."""

from __future__ import annotations

from envteardown.models.deletion_record import DeletionRecord, DeletionStatus
from envteardown.models.resources import FloatingIP, Instance, ResourceKind, ResourceSet, Volume
from envteardown.models.teardown_plan import TeardownPlan
from envteardown.models.teardown_report import OperationMode, OperationStatus, TeardownReport

__all__ = [
    "DeletionRecord",
    "DeletionStatus",
    "FloatingIP",
    "Instance",
    "OperationMode",
    "OperationStatus",
    "ResourceKind",
    "ResourceSet",
    "TeardownPlan",
    "TeardownReport",
    "Volume",
]
