"""Main CLI entry point using Typer."""

import logging
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..aws.provider import Ec2Provider
from ..discovery.discoverer import ResourceDiscoverer
from ..errors import ConfigurationError, DiscoveryError
from ..models.deletion_record import DeletionStatus
from ..models.teardown_report import OperationStatus, TeardownReport
from ..teardown.confirm import ConfirmationGate
from ..teardown.deleter import ResourceDeleter
from ..teardown.guest import GuestDeregistrar
from ..teardown.runner import TeardownRunner
from ..teardown.safety import SafetyGate, SafetyOverride, SafetyPolicy
from ..teardown.sequencer import TeardownSequencer
from ..utils.logging import setup_logging
from .config import Config

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="envteardown",
    help="Environment teardown - delete the EC2 instances, volumes and Elastic IPs of one environment",
    add_completion=False,
)

# Create Rich console for output
console = Console()

# Global config
config: Optional[Config] = None

STATUS_STYLES = {
    DeletionStatus.DELETED: "green",
    DeletionStatus.FAILED: "bold red",
    DeletionStatus.SKIPPED: "cyan",
}


@app.callback()
def main(
    config_file: Optional[str] = typer.Option(None, "--config", help="Path to YAML config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output except errors"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
):
    """Environment teardown - delete the EC2 instances, volumes and Elastic IPs of one environment."""
    global config

    try:
        config = Config.load(config_file)
    except (ValueError, OSError) as e:
        console.print(f"✗ Invalid configuration: {e}", style="bold red")
        raise typer.Exit(code=1)

    # Setup logging
    log_level = "ERROR" if quiet else ("DEBUG" if verbose else config.log_level)
    setup_logging(level=log_level, verbose=verbose)

    # Disable colors if requested
    if no_color:
        console.no_color = True


@app.command()
def version():
    """Show version information."""
    import boto3

    from .. import __version__

    console.print(f"envteardown version {__version__}")
    console.print(f"Python {sys.version.split()[0]}")
    console.print(f"boto3 {boto3.__version__}")


def build_runner(
    cfg: Config,
    override: SafetyOverride,
    policy: SafetyPolicy,
    prompt: bool,
    deregister: bool,
) -> TeardownRunner:
    """Wire provider, gates and sequencer for one run."""
    provider = Ec2Provider(
        region=cfg.region,
        aws_profile=cfg.aws_profile,
        expected_account_id=cfg.expected_account_id,
    )

    deregistrar = None
    if deregister:
        deregistrar = GuestDeregistrar(command=cfg.guest_command, region=cfg.region, aws_profile=cfg.aws_profile)

    sequencer = TeardownSequencer(
        deleter=ResourceDeleter(provider),
        provider=provider,
        deregistrar=deregistrar,
        detach_retries=cfg.detach_retries,
        detach_delay=cfg.detach_delay,
        max_workers=cfg.max_workers,
    )

    return TeardownRunner(
        discoverer=ResourceDiscoverer(provider),
        safety_gate=SafetyGate(policy=policy, override=override),
        confirmation_gate=ConfirmationGate(console=console, prompt_enabled=prompt),
        sequencer=sequencer,
    )


def print_report(report: TeardownReport) -> None:
    """Display per-resource results and totals."""
    if report.records:
        table = Table(title="Teardown Results", show_lines=False)
        table.add_column("Kind", style="bold")
        table.add_column("Resource")
        table.add_column("Status")
        table.add_column("Detail", overflow="fold")

        for record in report.records:
            style = STATUS_STYLES.get(record.status, "")
            detail = record.error_message or record.skip_reason or ""
            table.add_row(
                record.kind.value,
                record.resource_id,
                f"[{style}]{record.status.value}[/{style}]" if style else record.status.value,
                escape(detail),
            )
        console.print(table)

    for volume_id in report.detach_timeouts:
        console.print(f"⚠️  Volume {volume_id} was still in-use when deleted", style="yellow")

    if report.status == OperationStatus.PLANNED:
        console.print(f"\n✓ Dry run complete, {len(report.records)} resource(s) would be deleted", style="cyan")
    elif report.status == OperationStatus.COMPLETED:
        console.print(f"\n✓ Teardown complete, {report.succeeded_count} resource(s) deleted", style="green")
    else:
        console.print(
            f"\n⚠️  Teardown finished with errors: {report.succeeded_count} deleted, "
            f"{report.failed_count} failed",
            style="bold yellow",
        )


@app.command("run")
def run(
    env_id: Optional[str] = typer.Argument(None, help="Environment filter (pattern matched against instance ids and tags)"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Show what would be deleted without deleting"),
    min_filter_length: Optional[int] = typer.Option(None, "--min-filter-length", help="Minimum filter length"),
    max_instances: Optional[int] = typer.Option(None, "--max-instances", help="Maximum matched instances"),
    really_sure: bool = typer.Option(False, "--really-sure", help="Override every safety check"),
    allow_empty: bool = typer.Option(False, "--allow-empty", help="Allow an empty filter (matches every instance)"),
    allow_short: bool = typer.Option(False, "--allow-short", help="Allow a filter shorter than the minimum"),
    allow_no_matches: bool = typer.Option(False, "--allow-no-matches", help="Continue when nothing matches"),
    allow_too_many: bool = typer.Option(False, "--allow-too-many", help="Allow more than --max-instances matches"),
    no_prompt: bool = typer.Option(False, "--no-prompt", "-y", help="Do not ask for confirmation"),
    no_deregister: bool = typer.Option(False, "--no-deregister", help="Skip guest deregistration"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="AWS region"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="AWS profile name"),
    expected_account: Optional[str] = typer.Option(None, "--expected-account", help="Refuse other AWS accounts"),
    detach_retries: Optional[int] = typer.Option(None, "--detach-retries", help="Volume detach checks"),
    detach_delay: Optional[float] = typer.Option(None, "--detach-delay", help="Seconds between detach checks"),
    workers: Optional[int] = typer.Option(None, "--workers", help="Parallel deletes per phase"),
):
    """Delete the instances, attached volumes and Elastic IPs matching ENV_ID.

    Examples:
        # Preview what would be deleted
        envteardown run abcd1234 --dry-run

        # Delete without prompting
        envteardown run abcd1234 --no-prompt

        # Allow a broad filter matching up to 10 instances
        envteardown run team-a --min-filter-length 6 --max-instances 10
    """
    cfg = config or Config()

    # Override with CLI options
    if region:
        cfg.region = region
    if profile:
        cfg.aws_profile = profile
    if expected_account:
        cfg.expected_account_id = expected_account
    if detach_retries is not None:
        cfg.detach_retries = detach_retries
    if detach_delay is not None:
        cfg.detach_delay = detach_delay
    if workers is not None:
        cfg.max_workers = workers

    policy = SafetyPolicy(
        min_filter_length=cfg.min_filter_length if min_filter_length is None else min_filter_length,
        max_instances=cfg.max_instances if max_instances is None else max_instances,
    )
    if really_sure:
        override = SafetyOverride.all()
    else:
        override = SafetyOverride(
            allow_empty_filter=allow_empty,
            allow_short_filter=allow_short,
            allow_no_matches=allow_no_matches,
            allow_too_many=allow_too_many,
        )

    prompt = cfg.prompt and not no_prompt
    deregister = cfg.deregister_guests and not no_deregister

    try:
        runner = build_runner(cfg, override=override, policy=policy, prompt=prompt, deregister=deregister)
        report = runner.run(env_id, dry_run=dry_run)

        if report.status == OperationStatus.CANCELLED:
            console.print("Cancelled. No resources were touched.")
            raise typer.Exit(code=0)

        print_report(report)

    except typer.Exit:
        raise
    except ConfigurationError as e:
        console.print(f"✗ {escape(str(e))}", style="bold red")
        raise typer.Exit(code=1)
    except DiscoveryError as e:
        console.print(f"✗ Discovery failed: {escape(str(e))}", style="bold red")
        raise typer.Exit(code=2)
    except Exception as e:
        console.print(f"✗ Error during teardown: {escape(str(e))}", style="bold red")
        logger.exception("Error in run command")
        raise typer.Exit(code=2)


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
