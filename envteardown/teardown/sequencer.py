"""Ordered, fault-tolerant deletion of a teardown plan.

Phases run strictly one after another:

    1. guest deregistration (optional)
    2. instance termination
    3. volume detach wait
    4. volume deletion
    5. floating IP release (advanced networking only)

Resources inside a phase are independent and may be processed in parallel,
but every call of a phase completes before the next phase starts.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, TypeVar

from botocore.exceptions import BotoCoreError, ClientError

from envteardown.aws.provider import Ec2Provider
from envteardown.models.deletion_record import DeletionRecord
from envteardown.models.resources import Instance, ResourceKind
from envteardown.models.teardown_plan import TeardownPlan
from envteardown.models.teardown_report import OperationMode, TeardownReport
from envteardown.teardown.deleter import ResourceDeleter
from envteardown.teardown.guest import GuestDeregistrar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class TeardownSequencer:
    """Executes an approved teardown plan.

    Attributes:
        deleter: Per-resource deleter
        provider: EC2 provider, used for volume state polling
        deregistrar: Guest deregistrar, None to skip deregistration
        detach_retries: Volume state polls before giving up
        detach_delay: Seconds between polls
        max_workers: Parallel calls within a phase (1 = sequential)
    """

    def __init__(
        self,
        deleter: ResourceDeleter,
        provider: Ec2Provider,
        deregistrar: Optional[GuestDeregistrar] = None,
        detach_retries: int = 5,
        detach_delay: float = 10,
        max_workers: int = 1,
    ) -> None:
        self.deleter = deleter
        self.provider = provider
        self.deregistrar = deregistrar
        self.detach_retries = max(1, detach_retries)
        self.detach_delay = detach_delay
        self.max_workers = max(1, max_workers)

    def execute(self, plan: TeardownPlan, dry_run: bool = False) -> TeardownReport:
        """Delete everything in the plan.

        Dry-run issues no mutating calls; every resource is recorded as
        skipped.

        Args:
            plan: Approved teardown plan
            dry_run: Report only

        Returns:
            TeardownReport with one record per resource
        """
        mode = OperationMode.DRY_RUN if dry_run else OperationMode.NORMAL
        report = TeardownReport(env_filter=plan.display_filter, mode=mode)

        if dry_run:
            self._record_dry_run(plan, report)
            return report

        report.started_at = datetime.now(timezone.utc)

        self._deregister_guests(plan, report)
        self._delete_batch(ResourceKind.INSTANCE, plan.instances.ids, report)
        self._wait_for_detach(plan, report)
        self._delete_batch(ResourceKind.VOLUME, plan.volumes.ids, report)

        if plan.networking_advanced and plan.floating_ips.available:
            self._delete_batch(ResourceKind.FLOATING_IP, plan.floating_ips.ids, report)
        else:
            logger.info("Advanced networking not in use, skipping floating IP release")

        report.completed_at = datetime.now(timezone.utc)
        report.finalize()

        logger.info(
            f"Teardown {report.status.value}: {report.succeeded_count} deleted, "
            f"{report.failed_count} failed, {len(report.detach_timeouts)} volume(s) still attached"
        )
        return report

    def _map(self, func: Callable[[T], R], items: Iterable[T]) -> list[R]:
        items = list(items)
        if self.max_workers == 1 or len(items) <= 1:
            return [func(item) for item in items]

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(func, items))

    def _record_dry_run(self, plan: TeardownPlan, report: TeardownReport) -> None:
        batches = [
            (ResourceKind.INSTANCE, plan.instances.ids),
            (ResourceKind.VOLUME, plan.volumes.ids),
        ]
        if plan.floating_ips.available:
            batches.append((ResourceKind.FLOATING_IP, plan.floating_ips.ids))

        for kind, ids in batches:
            for resource_id in ids:
                record = DeletionRecord(resource_id=resource_id, kind=kind)
                record.mark_skipped("dry-run")
                report.records.append(record)
                logger.info(f"(dry-run) would delete {kind.value} {resource_id}")

    def _deregister_guests(self, plan: TeardownPlan, report: TeardownReport) -> None:
        if self.deregistrar is None:
            logger.debug("Guest deregistration disabled")
            return

        reachable = [i for i in plan.instances if i.public_ip]

        def deregister(instance: Instance) -> bool:
            return self.deregistrar.deregister(instance)

        for instance, ok in zip(reachable, self._map(deregister, reachable)):
            if ok:
                report.deregistered.append(instance.instance_id)

    def _delete_batch(self, kind: ResourceKind, resource_ids: list[str], report: TeardownReport) -> None:
        records = [DeletionRecord(resource_id=resource_id, kind=kind) for resource_id in resource_ids]
        for record in records:
            record.mark_requested()

        results = self._map(lambda record: self.deleter.delete(kind, record.resource_id), records)

        for record, (success, error_code, error_message) in zip(records, results):
            if success:
                record.mark_deleted()
            else:
                record.mark_failed(error_message or "Deletion failed", error_code=error_code)
            report.records.append(record)

    def _wait_for_detach(self, plan: TeardownPlan, report: TeardownReport) -> None:
        """Poll candidate volumes until none is still in-use.

        Bounded by detach_retries polls with detach_delay seconds between
        them. Volumes still attached afterwards are recorded and deletion is
        attempted anyway.
        """
        pending = list(plan.volumes.ids)

        for attempt in range(self.detach_retries):
            if not pending:
                break

            pending = [v for v in pending if self._still_in_use(v)]
            if pending and attempt < self.detach_retries - 1:
                logger.debug(
                    f"{len(pending)} volume(s) still in-use, waiting {self.detach_delay}s "
                    f"(attempt {attempt + 1}/{self.detach_retries})"
                )
                time.sleep(self.detach_delay)

        for volume_id in pending:
            logger.warning(f"Volume {volume_id} still in-use after {self.detach_retries} checks, deleting anyway")
        report.detach_timeouts.extend(pending)

    def _still_in_use(self, volume_id: str) -> bool:
        try:
            state = self.provider.get_volume_state(volume_id)
        except (ClientError, BotoCoreError) as e:
            logger.debug(f"Unable to read state of volume {volume_id}: {e}")
            return True
        return state == "in-use"
