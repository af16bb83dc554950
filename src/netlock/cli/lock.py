"""CLI commands: netlock enable / disable / print — apply, restore, preview."""

from __future__ import annotations

import click

from netlock.cli.common import (
    console,
    default_conf_option,
    file_options,
    handle_errors,
    lock_options,
    make_controller,
    options_from_flags,
)
from netlock.policy.builder import build_policy, merge_options
from netlock.policy.models import Policy

_DONE = "OK"


def _policy_from_flags(ctx: click.Context, **flags) -> Policy:
    # Extraction must finish before anything is compiled or loaded
    options = merge_options(file_options(ctx), options_from_flags(**flags))
    return build_policy(options)


@click.command()
@lock_options
@default_conf_option
@click.pass_context
@handle_errors
def enable(ctx: click.Context, **flags) -> None:
    """Enable the lock: block everything except the allowed destinations."""
    policy = _policy_from_flags(ctx, **flags)
    controller = make_controller(ctx)
    controller.enable_lock(policy)
    console.print(
        f"Lock [green]enabled[/green]: {len(policy.destinations)} destination(s), "
        f"skipping {', '.join(('lo0', *policy.interfaces))}"
    )
    click.echo(_DONE)


@click.command()
@default_conf_option
@click.pass_context
@handle_errors
def disable(ctx: click.Context, default_conf: str | None) -> None:
    """Disable the lock by reloading the baseline ruleset."""
    options = file_options(ctx)
    policy = Policy(
        default_configuration_path=default_conf or options.default_configuration_path
    )
    controller = make_controller(ctx)
    controller.disable_lock(policy)
    console.print(
        f"Lock [yellow]disabled[/yellow]: restored {policy.default_configuration_path}"
    )
    click.echo(_DONE)


@click.command(name="print")
@lock_options
@default_conf_option
@click.pass_context
@handle_errors
def print_rules(ctx: click.Context, **flags) -> None:
    """Print the lock rules and exit without touching pf."""
    policy = _policy_from_flags(ctx, **flags)
    controller = make_controller(ctx)
    click.echo(controller.build_lock_rules(policy), nl=False)
