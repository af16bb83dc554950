"""Global configuration — XDG paths, env vars, defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from netlock.policy.models import DEFAULT_CONFIGURATION_PATH


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "netlock"
    return Path.home() / ".config" / "netlock"


@dataclass
class NetlockConfig:
    """Application-wide configuration."""

    config_dir: Path = field(default_factory=_default_config_dir)
    default_conf_path: str = DEFAULT_CONFIGURATION_PATH
    ctl_binary: str = "pfctl"
    policy_path: Path | None = None

    @classmethod
    def load(cls) -> NetlockConfig:
        """Load config from environment variables with XDG defaults."""
        config = cls()

        env_conf = os.environ.get("NETLOCK_DEFAULT_CONF")
        if env_conf:
            config.default_conf_path = env_conf

        env_ctl = os.environ.get("NETLOCK_PFCTL")
        if env_ctl:
            config.ctl_binary = env_ctl

        env_policy = os.environ.get("NETLOCK_POLICY")
        if env_policy:
            config.policy_path = Path(env_policy)
        else:
            # Pick up the config dir's policy.yaml if it exists
            candidate = config.config_dir / "policy.yaml"
            if candidate.is_file():
                config.policy_path = candidate

        return config
