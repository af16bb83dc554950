"""CLI command: netlock status — report whether pf is enabled."""

from __future__ import annotations

import sys

import click
from rich.table import Table

from netlock.cli.common import EX_FAILURE, console, handle_errors, make_controller
from netlock.pf.controller import LockState

_STATE_COLORS = {
    LockState.UNKNOWN: "green",
    LockState.FIREWALL_DISABLED_OR_ABSENT: "red",
}


@click.command()
@click.pass_context
@handle_errors
def status(ctx: click.Context) -> None:
    """Show the packet filter state."""
    controller = make_controller(ctx)
    state = controller.probe()

    firewall = "ENABLED" if state is not LockState.FIREWALL_DISABLED_OR_ABSENT else "DISABLED"
    color = _STATE_COLORS.get(state, "white")

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("FIREWALL", f"[{color}]{firewall}[/{color}]")
    table.add_row("ENGINE", controller.engine.name)
    table.add_row("LOCK", state.value)
    console.print(table)

    if state is LockState.FIREWALL_DISABLED_OR_ABSENT:
        sys.exit(EX_FAILURE)
