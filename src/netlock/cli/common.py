"""Helpers shared by the lock commands."""

from __future__ import annotations

import functools
import logging
import sys
from collections.abc import Callable
from dataclasses import replace
from typing import NoReturn

import click
from rich.console import Console
from rich.markup import escape

from netlock.config import NetlockConfig
from netlock.errors import EngineError, NetlockError
from netlock.pf.controller import LockController
from netlock.pf.engine import PfctlEngine
from netlock.policy.loader import load_options
from netlock.policy.models import DestinationSource, LockOptions, SourceKind

logger = logging.getLogger(__name__)

console = Console(stderr=True)

EX_FAILURE = 1


def lock_options(func: Callable) -> Callable:
    """Attach the destination, interface and allow-flag options."""
    options = [
        click.option(
            "--ip",
            "ips",
            multiple=True,
            metavar="ADDRESS",
            help="Pass out to ADDRESS (hostnames are resolved).",
        ),
        click.option(
            "--host",
            "hosts",
            multiple=True,
            help="Pass out to every address HOST resolves to.",
        ),
        click.option(
            "--file",
            "files",
            multiple=True,
            type=click.Path(),
            help="Pass out to endpoints in an OpenVPN/WireGuard config file or directory.",
        ),
        click.option(
            "--if",
            "interfaces",
            multiple=True,
            metavar="INTERFACE",
            help="Skip filtering on INTERFACE.",
        ),
        click.option("--allow-incoming", is_flag=True, help="Allow incoming traffic."),
        click.option("--allow-outgoing", is_flag=True, help="Allow outgoing traffic."),
        click.option(
            "--allow-private-network",
            is_flag=True,
            help="Allow private network and local multicast traffic.",
        ),
        click.option("--allow-icmp", is_flag=True, help="Allow ICMP and ICMPv6."),
        click.option(
            "--use-routing",
            "-r",
            is_flag=True,
            help="Add the VPN tunnel and server found in the routing table.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def default_conf_option(func: Callable) -> Callable:
    return click.option(
        "--default-conf",
        type=click.Path(),
        default=None,
        help="Baseline pf ruleset restored on disable (default: /etc/pf.conf).",
    )(func)


def options_from_flags(
    *,
    ips: tuple[str, ...] = (),
    hosts: tuple[str, ...] = (),
    files: tuple[str, ...] = (),
    interfaces: tuple[str, ...] = (),
    allow_incoming: bool = False,
    allow_outgoing: bool = False,
    allow_private_network: bool = False,
    allow_icmp: bool = False,
    use_routing: bool = False,
    default_conf: str | None = None,
) -> LockOptions:
    sources = (
        tuple(DestinationSource(SourceKind.ADDRESS, v) for v in ips)
        + tuple(DestinationSource(SourceKind.HOST, v) for v in hosts)
        + tuple(DestinationSource(SourceKind.FILE, v) for v in files)
    )
    return LockOptions(
        allow_incoming=allow_incoming,
        allow_outgoing=allow_outgoing,
        allow_private_network=allow_private_network,
        allow_icmp=allow_icmp,
        interfaces=interfaces,
        sources=sources,
        use_routing=use_routing,
        default_configuration_path=default_conf or "",
    )


def file_options(ctx: click.Context) -> LockOptions:
    """Options from the policy file, with the configured baseline path."""
    config: NetlockConfig = ctx.obj["config"]
    policy_path = ctx.obj.get("policy_path") or config.policy_path
    options = LockOptions()
    if policy_path:
        try:
            options = load_options(policy_path)
        except (OSError, ValueError) as e:
            fail(NetlockError(str(e), step=f"policy {policy_path}"))
        logger.debug("Loaded policy options from %s", policy_path)
    if not options.default_configuration_path:
        options = replace(options, default_configuration_path=config.default_conf_path)
    return options


def make_controller(ctx: click.Context) -> LockController:
    config: NetlockConfig = ctx.obj["config"]
    return LockController(engine=PfctlEngine(config.ctl_binary))


def fail(error: NetlockError) -> NoReturn:
    """Print a diagnostic for *error* and exit non-zero."""
    console.print(
        f"[red]Error[/red] ({escape(error.step)}): {escape(error.message)}",
        soft_wrap=True,
    )
    if isinstance(error, EngineError) and error.output.strip():
        console.print(escape(error.output.rstrip()), highlight=False, soft_wrap=True)
    sys.exit(EX_FAILURE)


def handle_errors(func: Callable) -> Callable:
    """Turn any NetlockError raised by a command into a fatal diagnostic."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except NetlockError as e:
            fail(e)

    return wrapper
