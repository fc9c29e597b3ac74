"""End-to-end teardown pass.

Coordinates discovery, safety checks, confirmation and ordered deletion.
"""

from __future__ import annotations

import logging
from typing import Optional

from envteardown.discovery.discoverer import ResourceDiscoverer
from envteardown.models.teardown_plan import TeardownPlan
from envteardown.models.teardown_report import OperationMode, OperationStatus, TeardownReport
from envteardown.teardown.confirm import ConfirmationGate, GateDecision
from envteardown.teardown.safety import SafetyGate
from envteardown.teardown.sequencer import TeardownSequencer

logger = logging.getLogger(__name__)


class TeardownRunner:
    """Teardown orchestrator.

    Data flows one way: discovery, safety gate, image check, confirmation,
    sequencer. Filter rules are enforced before discovery so that an unsafe
    filter never reaches the provider.

    Attributes:
        discoverer: Resource discoverer
        safety_gate: Safety gate
        confirmation_gate: Confirmation gate
        sequencer: Teardown sequencer
    """

    def __init__(
        self,
        discoverer: ResourceDiscoverer,
        safety_gate: SafetyGate,
        confirmation_gate: ConfirmationGate,
        sequencer: TeardownSequencer,
    ) -> None:
        self.discoverer = discoverer
        self.safety_gate = safety_gate
        self.confirmation_gate = confirmation_gate
        self.sequencer = sequencer
        self.plan: Optional[TeardownPlan] = None

    def run(self, raw_filter: Optional[str], dry_run: bool = False) -> TeardownReport:
        """Run one teardown pass.

        Args:
            raw_filter: Environment filter as given by the operator
            dry_run: Report only, never delete

        Returns:
            TeardownReport (status cancelled if the operator declined)

        Raises:
            ConfigurationError: A safety rule failed without override
            DiscoveryError: The provider could not be reached
        """
        env_filter, display_filter = self.safety_gate.resolve_filter(raw_filter)
        self.safety_gate.enforce(self.safety_gate.check_filter(env_filter))

        plan = self.discoverer.discover(env_filter, display_filter=display_filter)
        self.plan = plan
        logger.debug(f"Teardown plan: {plan.to_dict()}")

        self.safety_gate.enforce(self.safety_gate.check_instances(display_filter, plan.instance_count))

        if plan.images_differ:
            logger.warning(f"Matched instances use different images: {', '.join(plan.unique_images)}")

        decision = self.confirmation_gate.review(plan, dry_run=dry_run)
        if decision == GateDecision.CANCELLED:
            mode = OperationMode.DRY_RUN if dry_run else OperationMode.NORMAL
            return TeardownReport(env_filter=display_filter, mode=mode, status=OperationStatus.CANCELLED)

        return self.sequencer.execute(plan, dry_run=dry_run or decision != GateDecision.PROCEED)
