"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from netlock import __version__
from netlock.config import NetlockConfig

# sysexits(3) EX_USAGE
EX_USAGE = 64


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="netlock")
@click.option(
    "--policy",
    "-p",
    type=click.Path(exists=True),
    help="Path to a YAML lock policy file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, policy: str | None, verbose: bool) -> None:
    """netlock — pf killswitch that only lets traffic out through your VPN."""
    ctx.ensure_object(dict)
    config = NetlockConfig.load()
    ctx.obj["config"] = config
    ctx.obj["policy_path"] = policy

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help(), err=True)
        ctx.exit(EX_USAGE)


def _register_commands() -> None:
    from netlock.cli.lock import disable, enable, print_rules  # noqa: F811
    from netlock.cli.status import status  # noqa: F811

    main.add_command(enable)
    main.add_command(disable)
    main.add_command(print_rules)
    main.add_command(status)


_register_commands()
