#!/usr/bin/env python3
"""Alertinator - CLI Entry Point."""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

import click
from rich.console import Console
from rich.table import Table

from __version__ import __version__
from alerts.exceptions import ChannelDeliveryError, ConfigError, StorageError
from models.enums import Severity

console = Console()


def build_store(config):
    from models.event_store import FileEventStore, MemoryEventStore, SqliteEventStore

    store_cfg = config["event_store"]
    backend = store_cfg.get("backend", "file")
    if backend == "sqlite":
        return SqliteEventStore(store_cfg.get("db_path", "data/events.db")).connect()
    if backend == "memory":
        return MemoryEventStore()
    return FileEventStore(store_cfg.get("directory", "data/events"))


def _init_components(config_path=None, verbose=False, dry_run=False):
    """Lazy initialization of all components."""
    from utils.logger import setup_logging
    from config import load_config
    from alerts.registry import CheckRegistry
    from alerts.notifier import Notifier
    from alerts.runner import CheckRunner
    from alerts.channels import build_capabilities, console_capabilities

    config = load_config(config_path)
    setup_logging(config.get("logging"), verbose=verbose)

    store = build_store(config)
    registry = CheckRegistry.from_config(config)
    capabilities = console_capabilities(console) if dry_run else build_capabilities(config)
    notifier = Notifier(capabilities)
    runner = CheckRunner(registry, store, notifier)

    return {
        "config": config, "store": store, "registry": registry,
        "notifier": notifier, "runner": runner,
    }


@click.group()
@click.option("--config", "config_path", default=None, help="Path to config YAML")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(__version__, prog_name="alertinator")
@click.pass_context
def cli(ctx, config_path, verbose):
    """Alertinator - run health checks and page people when they fail."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


def _get_components(ctx, dry_run=False):
    if "_components" not in ctx.obj:
        try:
            ctx.obj["_components"] = _init_components(
                ctx.obj.get("config_path"), ctx.obj.get("verbose"), dry_run,
            )
        except ConfigError as e:
            console.print(f"[bold red]Configuration error:[/bold red] {e}")
            ctx.exit(1)
    return ctx.obj["_components"]


# ──────────────────────────────────────────────────────
# CHECKS
# ──────────────────────────────────────────────────────
@cli.command()
@click.option("--dry-run", is_flag=True, help="Print notifications instead of sending them")
@click.pass_context
def check(ctx, dry_run):
    """Run every configured check once and send any notifications."""
    c = _get_components(ctx, dry_run=dry_run)
    try:
        report = c["runner"].run()
    except ChannelDeliveryError as e:
        console.print(f"[bold red]{len(e.failures)} notification(s) could not be delivered:[/bold red]")
        for alertee, channel, destination, error in e.failures:
            console.print(f"  {alertee} via {channel.value} ({destination}): {error}")
        ctx.exit(1)

    if report.notifications:
        console.print(f"[bold yellow]{len(report.notifications)} notification(s) sent[/bold yellow]")
    else:
        console.print("[green]All quiet - no notifications sent[/green]")
    if report.unknown:
        console.print(f"[bold red]State unknown for: {', '.join(report.unknown)}[/bold red]")
        ctx.exit(1)


@cli.command()
@click.pass_context
def status(ctx):
    """List configured checks and their event logs."""
    c = _get_components(ctx)
    store = c["store"]

    table = Table(title="Checks", show_header=True)
    table.add_column("Check")
    table.add_column("Groups")
    table.add_column("Alert after", justify="right")
    table.add_column("Clear after", justify="right")
    table.add_column("Remind every", justify="right")
    table.add_column("Events", justify="right")
    table.add_column("State")

    for entry in c["registry"]:
        t = entry.thresholds
        try:
            events = store.read_all(entry.key)
            count = str(len(events))
            state = "[red]in alert[/red]" if events else "[green]ok[/green]"
        except StorageError as e:
            count, state = "?", f"[bold red]unknown[/bold red] ({e})"
        table.add_row(entry.key, ", ".join(t.groups), str(t.alert_after), str(t.clear_after),
                      str(t.remind_every), count, state)
    console.print(table)


@cli.command()
@click.argument("check_key")
@click.pass_context
def history(ctx, check_key):
    """Show the recorded events for one check."""
    c = _get_components(ctx)
    try:
        events = c["store"].read_all(check_key)
    except StorageError as e:
        console.print(f"[bold red]{e}[/bold red]")
        ctx.exit(1)
    if not events:
        console.print(f"[dim]No events recorded for {check_key}[/dim]")
        return
    table = Table(title=f"Events for {check_key}", show_header=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Time")
    table.add_column("Status")
    for i, event in enumerate(events, 1):
        table.add_row(str(i), event.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                      "[green]pass[/green]" if event.status else "[red]fail[/red]")
    console.print(table)


@cli.command()
@click.argument("check_key")
@click.pass_context
def reset(ctx, check_key):
    """Clear the event log for one check without sending anything."""
    c = _get_components(ctx)
    if c["store"].safe_reset(check_key):
        console.print(f"[green]✓[/green] Event log for {check_key} reset")
    else:
        console.print(f"[bold red]Could not reset event log for {check_key}[/bold red]")
        ctx.exit(1)


@cli.command()
@click.argument("groups", nargs=-1, required=True)
@click.pass_context
def resolve(ctx, groups):
    """Show who gets notified for the given groups."""
    from alerts.resolver import AlerteeResolver

    c = _get_components(ctx)
    registry = c["registry"]
    resolver = AlerteeResolver(registry.groups, registry.alertees)
    try:
        alertees = resolver.resolve_alertees(groups)
    except ConfigError as e:
        console.print(f"[bold red]{e}[/bold red]")
        ctx.exit(1)

    table = Table(title="Alertees", show_header=True)
    table.add_column("Alertee")
    table.add_column("Channel")
    table.add_column("Destination")
    table.add_column("Severities")
    for alertee in alertees:
        for method in alertee.methods:
            levels = [s.name for s in (Severity.NOTICE, Severity.WARNING, Severity.CRITICAL)
                      if s & method.mask]
            table.add_row(alertee.name, method.channel.value, method.destination,
                          ", ".join(levels) or "-")
    console.print(table)


if __name__ == "__main__":
    cli()
