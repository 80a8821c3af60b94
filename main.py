#!/usr/bin/env python3
"""v1z3r Monitoring - CLI Entry Point."""
import sys
import json
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

import click
import yaml
from rich.console import Console
from rich.table import Table

from __version__ import __version__

console = Console()

SEVERITY_STYLES = {
    "critical": "bold white on red",
    "warning": "bold yellow",
    "info": "bold blue",
}


def _load_config(ctx):
    from utils.logger import setup_logging
    from config import load_config

    if "_config" not in ctx.obj:
        config = load_config(ctx.obj.get("config_path"))
        level = "DEBUG" if ctx.obj.get("verbose") else config["logging"]["level"]
        setup_logging(level, config["logging"].get("file"))
        ctx.obj["_config"] = config
    return ctx.obj["_config"]


def _build_manager(ctx, clock=None):
    from config.bootstrap import build_alert_manager
    from alerts.retention import ManualTicker
    return build_alert_manager(_load_config(ctx), clock=clock, ticker=ManualTicker())


def _read_snapshots(path):
    """Read snapshots from a JSON array or a JSON-lines file."""
    text = Path(path).read_text().strip()
    if not text:
        return []
    if text.startswith("["):
        return json.loads(text)
    return [json.loads(line) for line in text.splitlines() if line.strip()]


@click.group()
@click.option("--config", "config_path", default=None, help="Path to config YAML")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(__version__, prog_name="v1z3r-monitor")
@click.pass_context
def cli(ctx, config_path, verbose):
    """v1z3r Monitoring - threshold alerting over application metrics."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


# ──────────────────────────────────────────────────────
# ALERTS
# ──────────────────────────────────────────────────────
@cli.group()
def alerts():
    """Alert rules, replays and configuration."""
    pass


@alerts.command("rules")
@click.pass_context
def alerts_rules(ctx):
    """List configured alert rules. Disabled rules are dimmed."""
    manager = _build_manager(ctx)
    table = Table(title="Alert Rules", show_header=True)
    table.add_column("ID", no_wrap=True)
    table.add_column("Metric")
    table.add_column("Condition")
    table.add_column("For")
    table.add_column("Severity")
    for r in manager.get_rules():
        style = SEVERITY_STYLES.get(r.severity, "")
        table.add_row(
            r.id, r.metric, f"{r.operator} {r.threshold:g}", f"{r.duration / 1000:g}s",
            f"[{style}]{r.severity}[/]" if style else r.severity,
            style=None if r.enabled else "dim",
        )
    console.print(table)


@alerts.command("replay")
@click.argument("snapshots_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--interval-ms", default=1000, type=int, help="Spacing between snapshots without a timestamp")
@click.option("--history", "history_limit", default=10, type=int, help="History entries to show")
@click.pass_context
def alerts_replay(ctx, snapshots_file, interval_ms, history_limit):
    """Feed recorded snapshots through the alert engine on a simulated clock."""
    from utils.clock import ManualClock, now_ms, to_iso

    snapshots = _read_snapshots(snapshots_file)
    clock = ManualClock(now_ms())
    manager = _build_manager(ctx, clock=clock)

    for i, raw in enumerate(snapshots):
        raw = dict(raw)
        ts = raw.pop("timestamp", None)
        if ts is not None:
            try:
                clock.set(ts)
            except (TypeError, ValueError):
                console.print(f"[red]Error: snapshot {i + 1} has a non-numeric timestamp: {ts!r}[/red]")
                ctx.exit(1)
        elif i > 0:
            clock.advance(interval_ms)
        manager.process_metrics(raw)

    console.print(f"Replayed [bold]{len(snapshots)}[/bold] snapshot(s)\n")

    active = manager.get_active_alerts()
    if active:
        table = Table(title="Active Alerts", show_header=True)
        table.add_column("Severity")
        table.add_column("Rule", no_wrap=True)
        table.add_column("Value")
        table.add_column("Message")
        for a in active:
            style = SEVERITY_STYLES.get(a.severity, "")
            table.add_row(f"[{style}]{a.severity.upper()}[/]", a.rule_id, f"{a.value:g}", a.message[:70])
        console.print(table)
    else:
        console.print("[green]All clear - no active alerts[/green]")

    recent = manager.get_alert_history(history_limit)
    if recent:
        table = Table(title="Alert History", show_header=True)
        table.add_column("Time", style="dim")
        table.add_column("Rule", no_wrap=True)
        table.add_column("State")
        for a in recent:
            state = "resolved" if a.resolved else ("acknowledged" if a.acknowledged else "active")
            table.add_row(to_iso(a.timestamp), a.rule_id, state)
        console.print(table)


@alerts.command("export")
@click.option("--output", "-o", default=None, type=click.Path(dir_okay=False), help="Write to file instead of stdout")
@click.pass_context
def alerts_export(ctx, output):
    """Export the rule and channel configuration as JSON."""
    manager = _build_manager(ctx)
    data = json.dumps(manager.export_configuration(), indent=2)
    if output:
        Path(output).write_text(data + "\n")
        console.print(f"[green]✓[/green] Configuration written to {output}")
    else:
        click.echo(data)


@alerts.command("validate")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def alerts_validate(ctx, config_file):
    """Import a JSON or YAML rule/channel configuration and report what it holds."""
    with open(config_file) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        console.print("[red]Error: configuration must be a mapping with 'rules' and 'channels'[/red]")
        ctx.exit(1)

    manager = _build_manager(ctx)
    try:
        manager.import_configuration(data)
    except (TypeError, ValueError, AttributeError) as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)

    rules = manager.get_rules()
    channels = manager.get_channels()
    console.print(f"[green]✓[/green] {len(rules)} rule(s), {len(channels)} channel(s)")
    for c in channels:
        state = "enabled" if c.enabled else "disabled"
        console.print(f"  {c.type} ({state})")


if __name__ == "__main__":
    cli()
