"""Combine raw lock options and build the immutable Policy."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

import psutil

from netlock.destinations import extract_destinations
from netlock.policy.models import DestinationSource, LockOptions, Policy
from netlock.routing import RoutingInfo, get_routing_info

logger = logging.getLogger(__name__)


def merge_options(base: LockOptions, override: LockOptions) -> LockOptions:
    """Return new options with *override* layered on top of *base*.

    Allow flags are OR-ed, lists are concatenated with *base* entries
    first, and a non-empty default configuration path in *override* wins.
    """
    return LockOptions(
        allow_incoming=base.allow_incoming or override.allow_incoming,
        allow_outgoing=base.allow_outgoing or override.allow_outgoing,
        allow_private_network=(
            base.allow_private_network or override.allow_private_network
        ),
        allow_icmp=base.allow_icmp or override.allow_icmp,
        interfaces=base.interfaces + override.interfaces,
        sources=base.sources + override.sources,
        use_routing=base.use_routing or override.use_routing,
        default_configuration_path=(
            override.default_configuration_path or base.default_configuration_path
        ),
    )


def build_policy(
    options: LockOptions,
    extractor: Callable[[Iterable[DestinationSource]], tuple[str, ...]] = extract_destinations,
    routing: Callable[[], RoutingInfo] = get_routing_info,
) -> Policy:
    """Resolve every destination in *options* and return the Policy.

    Raises DestinationError (fail-closed) before any Policy exists.
    """
    destinations = list(extractor(options.sources))
    interfaces = list(_unique(options.interfaces))

    if options.use_routing:
        info = routing()
        if info.interface and info.interface not in interfaces:
            interfaces.append(info.interface)
        if info.destination and info.destination not in destinations:
            destinations.append(info.destination)
        if not info.interface and not info.destination:
            logger.warning("No VPN tunnel found in the routing table")

    warn_unknown_interfaces(interfaces)

    return Policy(
        allow_incoming=options.allow_incoming,
        allow_outgoing=options.allow_outgoing,
        allow_private_network=options.allow_private_network,
        allow_icmp=options.allow_icmp,
        interfaces=tuple(interfaces),
        destinations=tuple(destinations),
        default_configuration_path=options.default_configuration_path,
    )


def warn_unknown_interfaces(interfaces: Iterable[str]) -> list[str]:
    """Log and return interface names the host does not currently have.

    They are still exempted: a tunnel may come up after the lock is applied.
    """
    try:
        known = set(psutil.net_if_addrs())
    except (psutil.Error, OSError) as e:
        logger.debug("Cannot list network interfaces: %s", e)
        return []

    unknown = [name for name in interfaces if name not in known]
    for name in unknown:
        logger.warning("Interface %s does not exist on this host", name)
    return unknown


def _unique(items: Iterable[str]) -> Iterable[str]:
    seen: set[str] = set()
    for item in items:
        if item not in seen:
            seen.add(item)
            yield item
