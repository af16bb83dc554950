"""Turn raw destination inputs into the addresses the lock allows.

Inputs are literal IPs, hostnames, and OpenVPN / WireGuard client
configuration files. Extraction is fail-closed: either every input is
resolved, or DestinationError is raised and no list is returned at all.
"""

from __future__ import annotations

import ipaddress
import logging
import re
import socket
from collections.abc import Callable, Iterable
from pathlib import Path

from netlock.errors import DestinationError
from netlock.policy.models import DestinationSource, SourceKind

logger = logging.getLogger(__name__)

Resolver = Callable[[str], list[str]]

# Shorter tokens are never a usable host or address.
_MIN_TOKEN_LENGTH = 4

# OpenVPN: "remote vpn.example.com 1194 udp"
_OPENVPN_REMOTE = re.compile(
    rf"^\s*remote\s+(?P<token>\S{{{_MIN_TOKEN_LENGTH},}})"
)

# WireGuard: "Endpoint = 198.51.100.7:51820" or "Endpoint = [2001:db8::1]:51820"
_WIREGUARD_ENDPOINT = re.compile(
    rf"^\s*Endpoint\s*=\s*"
    rf"(?:\[(?P<bracketed>[^\]\s]{{{_MIN_TOKEN_LENGTH},}})\]"
    rf"|(?P<token>[^\s:\[\]]{{{_MIN_TOKEN_LENGTH},}}))"
    rf":(?P<port>\d+)\s*(?:#.*)?$",
    re.IGNORECASE,
)


def is_ip_address(value: str) -> bool:
    """True if *value* is a syntactically valid IPv4 or IPv6 address."""
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def resolve_host(host: str) -> list[str]:
    """Resolve *host* to every address the system resolver returns."""
    try:
        infos = socket.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError, OSError) as e:
        raise DestinationError(f"cannot resolve {host}: {e}") from e

    addrs: list[str] = []
    for _family, _type, _proto, _canon, sockaddr in infos:
        # Drop any IPv6 zone suffix ("fe80::1%en0")
        addr = str(sockaddr[0]).split("%", 1)[0]
        if addr not in addrs:
            addrs.append(addr)
    if not addrs:
        raise DestinationError(f"cannot resolve {host}: no addresses returned")
    logger.debug("Resolved %s to %s", host, ", ".join(addrs))
    return addrs


def parse_config_line(line: str) -> str | None:
    """Return the endpoint token of an OpenVPN/WireGuard line, if any."""
    m = _OPENVPN_REMOTE.match(line)
    if m:
        return m.group("token")
    m = _WIREGUARD_ENDPOINT.match(line)
    if m:
        return m.group("bracketed") or m.group("token")
    return None


def read_config_tokens(path: str | Path) -> list[str]:
    """Collect endpoint tokens from a configuration file or directory.

    Directories are scanned one level deep, skipping hidden entries, in
    name order.
    """
    path = Path(path).expanduser()
    if path.is_dir():
        try:
            entries = sorted(
                p for p in path.iterdir() if p.is_file() and not p.name.startswith(".")
            )
        except OSError as e:
            raise DestinationError(f"cannot read directory {path}: {e}") from e
        tokens: list[str] = []
        for entry in entries:
            tokens.extend(_read_file_tokens(entry))
        return tokens
    return _read_file_tokens(path)


def _read_file_tokens(path: Path) -> list[str]:
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise DestinationError(f"cannot read {path}: {e}") from e

    tokens = [t for t in map(parse_config_line, text.splitlines()) if t]
    if not tokens:
        logger.warning("No remote or Endpoint lines found in %s", path)
    return tokens


def extract_destinations(
    sources: Iterable[DestinationSource],
    resolver: Resolver = resolve_host,
) -> tuple[str, ...]:
    """Resolve *sources* into an ordered, deduplicated tuple of addresses."""
    found: list[str] = []

    def add(addrs: Iterable[str]) -> None:
        for addr in addrs:
            if addr not in found:
                found.append(addr)

    for source in sources:
        if source.kind is SourceKind.FILE:
            for token in read_config_tokens(source.value):
                add(_classify(token, resolver))
        else:
            add(_classify(source.value, resolver))

    return tuple(found)


def _classify(token: str, resolver: Resolver) -> list[str]:
    if is_ip_address(token):
        return [token]
    return resolver(token)
