"""Compile a Policy into pf ruleset text.

The output order is significant: pf evaluates rules last-match-wins, so the
per-destination pass rules must come after every default block rule.
"""

from __future__ import annotations

from netlock.policy.models import Policy

LOOPBACK_INTERFACE = "lo0"

# ---------------------------------------------------------------------------
# Private network exceptions
# Fixed literals; existing pf.conf files are compared against this exact text.
# ---------------------------------------------------------------------------

_IPV4_PRIVATE_NETWORKS: tuple[str, ...] = (
    "169.254/16",
    "192.168/16",
    "172.16/12",
    "10/8",
)

# 224/24 covers mDNS (224.0.0.251).
_IPV4_LOCAL_MULTICASTS: tuple[str, ...] = (
    "224/24",
    "255.255.255.255/32",
)

_IPV6_PRIVATE_NETWORKS: tuple[str, ...] = ("fe80::/10", "fc00::/7")

_IPV6_LOCAL_MULTICASTS: tuple[str, ...] = ("ff02::/16", "ff12::/16")


def _private_network_rules() -> tuple[str, ...]:
    rules: list[str] = []
    for networks, multicasts in (
        (_IPV4_PRIVATE_NETWORKS, _IPV4_LOCAL_MULTICASTS),
        (_IPV6_PRIVATE_NETWORKS, _IPV6_LOCAL_MULTICASTS),
    ):
        rules.extend(f"pass quick from {net} to {net}" for net in networks)
        rules.append(
            f"pass out quick from {{ {', '.join(networks)} }} "
            f"to {{ {', '.join(multicasts)} }}"
        )
    return tuple(rules)


PRIVATE_NETWORK_RULES: tuple[str, ...] = _private_network_rules()

ICMP_RULES: tuple[str, ...] = ("pass quick proto { icmp, icmp6 } all",)


def address_family(destination: str) -> str:
    """Return the pf address family keyword for a destination."""
    return "inet6" if ":" in destination else "inet"


def destination_rule(destination: str) -> str:
    return f"pass out quick {address_family(destination)} from any to {destination}"


def compile_ruleset(policy: Policy) -> str:
    """Build the lock ruleset for *policy*. Pure and deterministic."""
    skip = " ".join((LOOPBACK_INTERFACE, *policy.interfaces))

    lines = [
        "set block-policy return",
        f"set skip on {{ {skip} }}",
        "scrub in all fragment reassemble",
        "pass in all" if policy.allow_incoming else "block in all",
        "pass out all" if policy.allow_outgoing else "block out all",
    ]
    if policy.allow_private_network:
        lines.extend(PRIVATE_NETWORK_RULES)
    if policy.allow_icmp:
        lines.extend(ICMP_RULES)

    # Must stay last
    lines.extend(destination_rule(d) for d in policy.destinations)

    return "\n".join(lines) + "\n"
