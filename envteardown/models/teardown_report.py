"""Teardown report model.

Represents the outcome of one teardown run: mode, status and every deletion
record, in the order the resources were processed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from envteardown.models.deletion_record import DeletionRecord, DeletionStatus
from envteardown.models.resources import ResourceKind


class OperationMode(Enum):
    """Run mode."""

    NORMAL = "normal"
    DRY_RUN = "dry-run"


class OperationStatus(Enum):
    """Overall run status."""

    PLANNED = "planned"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class TeardownReport:
    """Best-effort completion report for a teardown run.

    Per-resource failures never abort a run; they are collected here.

    Attributes:
        env_filter: Filter the run was invoked with (display form)
        mode: normal or dry-run
        status: Overall status
        records: Deletion records in processing order
        detach_timeouts: Volumes still in-use after the detach wait
        deregistered: Instances whose guest deregistration succeeded
        started_at: When the sequencer started (optional)
        completed_at: When the sequencer finished (optional)
    """

    env_filter: str
    mode: OperationMode
    status: OperationStatus = OperationStatus.PLANNED
    records: list[DeletionRecord] = field(default_factory=list)
    detach_timeouts: list[str] = field(default_factory=list)
    deregistered: list[str] = field(default_factory=list)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def succeeded_count(self) -> int:
        return sum(1 for r in self.records if r.status == DeletionStatus.DELETED)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.records if r.status == DeletionStatus.FAILED)

    @property
    def skipped_count(self) -> int:
        return sum(1 for r in self.records if r.status == DeletionStatus.SKIPPED)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def records_for(self, kind: ResourceKind) -> list[DeletionRecord]:
        return [r for r in self.records if r.kind == kind]

    def failed_records(self) -> list[DeletionRecord]:
        return [r for r in self.records if r.status == DeletionStatus.FAILED]

    def finalize(self) -> None:
        """Derive the final status from the records.

        Dry-run and cancelled reports keep their status.
        """
        if self.mode == OperationMode.DRY_RUN or self.status == OperationStatus.CANCELLED:
            return

        if self.failed_count > 0:
            if self.succeeded_count > 0:
                self.status = OperationStatus.PARTIAL
            else:
                self.status = OperationStatus.FAILED
        else:
            self.status = OperationStatus.COMPLETED

    def validate(self) -> bool:
        """Validate report invariants.

        Validation rules:
            - succeeded_count + failed_count + skipped_count == len(records)
            - completed_at must be after started_at
            - dry-run mode must have planned or cancelled status

        Raises:
            ValueError: If any validation rule fails
        """
        if self.succeeded_count + self.failed_count + self.skipped_count != len(self.records):
            raise ValueError("Resource counts don't match total")

        if self.completed_at and self.started_at:
            if self.completed_at < self.started_at:
                raise ValueError("Completion time before start time")

        if self.mode == OperationMode.DRY_RUN and self.status not in (
            OperationStatus.PLANNED,
            OperationStatus.CANCELLED,
        ):
            raise ValueError("Dry-run mode must have planned status")

        return True
