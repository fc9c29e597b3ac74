"""Deletion record model.

Individual resource deletion attempt with result and metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from envteardown.models.resources import ResourceKind


class DeletionStatus(Enum):
    """Individual resource deletion status.

    State transitions:
        discovered → requested → deleted
        discovered → requested → failed
        discovered → skipped (dry-run)
    """

    DISCOVERED = "discovered"
    REQUESTED = "requested"
    DELETED = "deleted"
    FAILED = "failed"
    SKIPPED = "skipped"


_TRANSITIONS = {
    DeletionStatus.DISCOVERED: {DeletionStatus.REQUESTED, DeletionStatus.SKIPPED},
    DeletionStatus.REQUESTED: {DeletionStatus.DELETED, DeletionStatus.FAILED},
    DeletionStatus.DELETED: set(),
    DeletionStatus.FAILED: set(),
    DeletionStatus.SKIPPED: set(),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DeletionRecord:
    """Deletion record entity.

    Tracks the outcome for a single resource within one teardown run. There is
    no rollback state: deleted, failed and skipped are terminal.

    Validation rules:
        - status=failed: requires error_message
        - status=skipped: requires skip_reason
        - status=deleted: no error_message

    Attributes:
        resource_id: Resource identifier
        kind: Resource kind
        status: Current state
        error_code: Provider error code if failed (optional)
        error_message: Human-readable error if failed (optional)
        skip_reason: Why the resource was not touched (optional)
        timestamp: When the record last changed state
    """

    resource_id: str
    kind: ResourceKind
    status: DeletionStatus = DeletionStatus.DISCOVERED
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    skip_reason: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)

    def transition(self, status: DeletionStatus) -> None:
        """Move the record to a new state.

        Raises:
            ValueError: If the transition is not allowed
        """
        if status not in _TRANSITIONS[self.status]:
            raise ValueError(f"Invalid transition {self.status.value} -> {status.value} for {self.resource_id}")
        self.status = status
        self.timestamp = _utcnow()

    def mark_requested(self) -> None:
        self.transition(DeletionStatus.REQUESTED)

    def mark_deleted(self) -> None:
        self.transition(DeletionStatus.DELETED)

    def mark_failed(self, error_message: str, error_code: Optional[str] = None) -> None:
        self.error_message = error_message
        self.error_code = error_code
        self.transition(DeletionStatus.FAILED)

    def mark_skipped(self, reason: str) -> None:
        self.skip_reason = reason
        self.transition(DeletionStatus.SKIPPED)

    def validate(self) -> bool:
        """Validate record invariants.

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.status == DeletionStatus.FAILED:
            if not self.error_message:
                raise ValueError("Failed status requires error_message")
        elif self.status == DeletionStatus.SKIPPED:
            if not self.skip_reason:
                raise ValueError("Skipped status requires skip_reason")
        elif self.status == DeletionStatus.DELETED:
            if self.error_message:
                raise ValueError("Deleted status cannot have an error")

        if not self.resource_id.strip():
            raise ValueError("Record requires a resource_id")

        return True
