"""Routing-table helpers — find the active VPN tunnel and server.

A running VPN client typically installs ``0/1`` and ``128.0/1`` routes
through its tunnel interface, plus a host route to the VPN server through
the original default gateway. Both are read from ``netstat -lnr -f inet``.
"""

from __future__ import annotations

import ipaddress
import logging
import subprocess
from dataclasses import dataclass

from netlock.errors import DestinationError

logger = logging.getLogger(__name__)

_NETSTAT_TIMEOUT = 5

_SPLIT_DEFAULT_ROUTES = ("0/1", "128.0/1")
_TUNNEL_PREFIXES = ("utun", "tun")
_REQUIRED_FLAGS = ("U", "G", "S")


@dataclass(frozen=True)
class RouteRecord:
    destination: str
    gateway: str
    flags: str
    netif: str

    @property
    def is_split_default(self) -> bool:
        return self.destination in _SPLIT_DEFAULT_ROUTES

    @property
    def is_default(self) -> bool:
        return self.destination == "default"

    @property
    def is_usable(self) -> bool:
        if self.netif.startswith("lo"):
            return False
        return all(flag in self.flags for flag in _REQUIRED_FLAGS)


@dataclass(frozen=True)
class RoutingInfo:
    """Tunnel interface and VPN server address, empty when not found."""

    interface: str = ""
    destination: str = ""


def get_routing_info() -> RoutingInfo:
    """Run netstat and extract the tunnel interface and VPN server route."""
    try:
        result = subprocess.run(
            ["netstat", "-lnr", "-f", "inet"],
            capture_output=True,
            text=True,
            timeout=_NETSTAT_TIMEOUT,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as e:
        raise DestinationError(f"cannot read routing table: {e}", step="routing") from e

    if result.returncode != 0:
        raise DestinationError(
            f"netstat exited with status {result.returncode}: {result.stderr.strip()}",
            step="routing",
        )
    return parse_routing_table(result.stdout)


def parse_routing_table(text: str) -> RoutingInfo:
    """Parse ``netstat -nr`` output into a RoutingInfo."""
    records = [r for r in _parse_records(text) if r.is_usable]

    interface = ""
    for record in records:
        if record.is_split_default:
            if record.netif.startswith(_TUNNEL_PREFIXES):
                interface = record.netif
            else:
                logger.warning(
                    "Split default route via %s is not a tunnel interface",
                    record.netif,
                )
            break

    default = next((r for r in records if r.is_default), None)
    destination = ""
    if default is not None:
        for record in records:
            if record.is_default or record.is_split_default:
                continue
            if record.gateway != default.gateway or record.netif != default.netif:
                continue
            host = _host_address(record.destination)
            if host:
                destination = host
                break

    logger.debug("Routing info: interface=%r destination=%r", interface, destination)
    return RoutingInfo(interface=interface, destination=destination)


def _parse_records(text: str) -> list[RouteRecord]:
    """Parse table rows using the header line to locate columns."""
    columns: dict[str, int] = {}
    records: list[RouteRecord] = []
    for line in text.splitlines():
        parts = line.split()
        if not parts:
            continue
        if parts[0] == "Destination":
            columns = {name: i for i, name in enumerate(parts)}
            continue
        if not columns or "Netif" not in columns:
            continue
        if len(parts) <= columns["Netif"]:
            continue
        records.append(
            RouteRecord(
                destination=parts[columns["Destination"]],
                gateway=parts[columns["Gateway"]],
                flags=parts[columns["Flags"]],
                netif=parts[columns["Netif"]],
            )
        )
    return records


def _host_address(destination: str) -> str:
    """Return the IPv4 address of a host route ("a.b.c.d" or "a.b.c.d/32")."""
    addr, _, prefix = destination.partition("/")
    if prefix and prefix != "32":
        return ""
    try:
        return str(ipaddress.IPv4Address(addr))
    except ValueError:
        return ""
