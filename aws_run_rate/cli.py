"""
AWS Run Rate CLI - Main entry point.
"""

import sys
import datetime as dt
from dataclasses import replace
from typing import Any, Optional, Tuple
import boto3
import click
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
import logging

from .monitor.organizations import fetch_accounts
from .monitor.cost_explorer import Granularity, fetch_costs
from .report.table import format_run_rate, format_single
from .alerting.notifiers import SlackNotifier
from .utils.config import REPORT_MODES, Settings, load_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True, emoji=False)


def build_clients(settings: Settings) -> Tuple[Any, Any]:
    """Create Organizations and Cost Explorer clients from ambient credentials."""
    session = boto3.Session(profile_name=settings.profile, region_name=settings.region)
    return session.client("organizations"), session.client("ce")


def build_report(
    settings: Settings,
    org: Any,
    ce: Any,
    now: Optional[dt.datetime] = None,
) -> str:
    """Fetch accounts and costs, and render the table for the configured mode."""
    console.print("[bold]Listing organization accounts...[/bold]")
    accounts = fetch_accounts(org, page_size=settings.page_size)
    console.print(f"✅ {len(accounts)} accounts")

    if settings.mode == "run-rate":
        console.print("[bold]Querying Cost Explorer...[/bold]")
        daily = fetch_costs(ce, Granularity.DAILY, now=now, metric=settings.metric)
        monthly = fetch_costs(ce, Granularity.MONTHLY, now=now, metric=settings.metric)
        return format_run_rate(accounts, daily, monthly)

    granularity = Granularity.DAILY if settings.mode == "daily" else Granularity.MONTHLY
    console.print(f"[bold]Querying Cost Explorer ({granularity.value.lower()})...[/bold]")
    costs = fetch_costs(ce, granularity, now=now, metric=settings.metric)
    return format_single(accounts, costs)


def run(settings: Settings, org: Any, ce: Any, dry_run: bool = False) -> None:
    table = build_report(settings, org, ce)

    notifier = SlackNotifier(
        settings.webhook_url,
        title=settings.title,
        timeout=settings.timeout_seconds,
        max_chars=settings.max_chars,
    )

    if dry_run:
        payload = notifier.build_payload(table)
        console.print(Panel(Text(payload["blocks"][0]["text"]["text"]), title="Dry run"))
        return

    console.print("[bold]Sending Slack notification...[/bold]")
    notifier.send(table)
    console.print("[green]✅ Complete![/green]")


@click.command()
@click.option("--config", "config_path", default=None, help="Path to settings file (default config/settings.yml)")
@click.option("--mode", type=click.Choice(REPORT_MODES), default=None, help="Report variant")
@click.option("--dry-run", is_flag=True, default=False, help="Print the message instead of posting it")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(config_path, mode, dry_run, debug):
    """Post the AWS linked-account run rate table to Slack."""
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        settings = load_settings(config_path)
        if mode:
            settings = replace(settings, mode=mode)
        org, ce = build_clients(settings)
        run(settings, org, ce, dry_run=dry_run)
    except Exception as e:
        logger.debug("Run rate report failed", exc_info=True)
        err_console.print(f"ERROR: {e}", markup=False, emoji=False, highlight=False, soft_wrap=True)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
