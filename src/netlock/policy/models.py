"""Policy data models — immutable dataclasses used across the entire codebase."""

from __future__ import annotations

import enum
from dataclasses import dataclass

DEFAULT_CONFIGURATION_PATH = "/etc/pf.conf"


class SourceKind(enum.Enum):
    """How a raw destination input should be interpreted."""

    ADDRESS = "address"
    HOST = "host"
    FILE = "file"


@dataclass(frozen=True)
class DestinationSource:
    """A single unresolved destination input, as given by the user."""

    kind: SourceKind
    value: str


@dataclass(frozen=True)
class LockOptions:
    """Raw inputs of one invocation, before any destination is resolved."""

    allow_incoming: bool = False
    allow_outgoing: bool = False
    allow_private_network: bool = False
    allow_icmp: bool = False
    interfaces: tuple[str, ...] = ()
    sources: tuple[DestinationSource, ...] = ()
    use_routing: bool = False
    default_configuration_path: str = ""


@dataclass(frozen=True)
class Policy:
    """The desired lock state. Every compiled ruleset derives from one of these."""

    allow_incoming: bool = False
    allow_outgoing: bool = False
    allow_private_network: bool = False
    allow_icmp: bool = False
    interfaces: tuple[str, ...] = ()
    destinations: tuple[str, ...] = ()
    default_configuration_path: str = DEFAULT_CONFIGURATION_PATH

    def __post_init__(self) -> None:
        if not self.default_configuration_path:
            object.__setattr__(
                self, "default_configuration_path", DEFAULT_CONFIGURATION_PATH
            )
