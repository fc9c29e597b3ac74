"""Operator confirmation for teardown runs."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from envteardown.models.teardown_plan import TeardownPlan

logger = logging.getLogger(__name__)

NETWORKING_NOT_IN_USE = "Advanced networking not in use"


class GateDecision(Enum):
    """Result of the confirmation gate."""

    PROCEED = "proceed"
    PREVIEW = "preview"
    CANCELLED = "cancelled"


def _join(values: list[str]) -> str:
    return escape(", ".join(values))


class ConfirmationGate:
    """Renders the teardown summary and waits for operator approval.

    In dry-run mode the same summary is shown, but the gate never returns
    PROCEED. With prompts disabled the gate does not block.

    Attributes:
        console: Rich console used for output
        prompt_enabled: Whether to ask for confirmation
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        prompt_enabled: bool = True,
        confirm: Callable[..., bool] = typer.confirm,
    ) -> None:
        self.console = console or Console()
        self.prompt_enabled = prompt_enabled
        self._confirm = confirm

    def review(self, plan: TeardownPlan, dry_run: bool = False) -> GateDecision:
        """Show the plan and ask for approval.

        Returns:
            PROCEED to delete, PREVIEW for an approved dry-run, CANCELLED otherwise
        """
        approved = GateDecision.PREVIEW if dry_run else GateDecision.PROCEED

        if plan.images_differ:
            self.render_image_warning(plan)
            if self.prompt_enabled and not self._ask("Continue?"):
                logger.info("Teardown cancelled at image warning")
                return GateDecision.CANCELLED

        self.render_summary(plan, dry_run=dry_run)

        if not self.prompt_enabled:
            return approved

        question = "View resources that would be deleted?" if dry_run else "Delete these resources?"
        if not self._ask(question):
            logger.info("Teardown cancelled by operator")
            return GateDecision.CANCELLED
        return approved

    def _ask(self, question: str) -> bool:
        try:
            return bool(self._confirm(question, default=False))
        except (typer.Abort, KeyboardInterrupt, EOFError):
            return False

    def render_image_warning(self, plan: TeardownPlan) -> None:
        text = (
            "Images used for matching instances are not unique. Different images may require different "
            "users, so guest deregistration can fail on some instances. It is recommended that each "
            "environment is deleted in batches of matching images.\n\n"
            f"[bold]Unique Images:[/bold] {_join(plan.unique_images)}"
        )
        self.console.print(
            Panel(text, title="[bold yellow]WARNING[/bold yellow]", border_style="yellow", padding=(1, 2))
        )

    def render_summary(self, plan: TeardownPlan, dry_run: bool = False) -> None:
        if dry_run:
            heading = f"NOTE: A normal run would delete the following objects matching '{escape(plan.display_filter)}':"
            style = "cyan"
        else:
            heading = f"WARNING! About to delete the following objects matching '{escape(plan.display_filter)}':"
            style = "red"

        self.console.print()
        self.console.print(heading, style=f"bold {style}")
        self.console.print(
            f"{plan.instance_count} instances, {plan.ip_count} IPs and {plan.volume_count} attached volumes"
        )

        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Field", style="bold")
        table.add_column("Values", overflow="fold")
        for label, value in self.summary_rows(plan):
            table.add_row(label, value)
        self.console.print(table)
        self.console.print()

    def summary_rows(self, plan: TeardownPlan) -> list[tuple[str, str]]:
        """Summary fields in display order."""
        if plan.floating_ips.available:
            floating = _join(plan.floating_ips.ids)
        else:
            floating = NETWORKING_NOT_IN_USE

        return [
            ("Instance IDs", _join(plan.instances.ids)),
            ("Instance Names", _join(plan.instance_names)),
            ("Instance IPs", _join(plan.public_ips)),
            ("Floating IP IDs", floating),
            ("Attached Volumes", _join(plan.volumes.ids)),
            ("Unique Images", _join(plan.unique_images)),
        ]
