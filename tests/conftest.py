"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from netlock.errors import EngineError
from netlock.policy.models import Policy


class FakeEngine:
    """In-memory FirewallEngine that records every call."""

    def __init__(
        self,
        *,
        present: bool = True,
        enabled: bool = True,
        load_error: str | None = None,
    ) -> None:
        self.name = "pfctl"
        self.present = present
        self.enabled = enabled
        self.load_error = load_error
        self.calls: list[str] = []
        self.loaded_paths: list[str] = []
        self.loaded_texts: list[str] = []

    def locate(self) -> str | None:
        self.calls.append("locate")
        return "/sbin/pfctl" if self.present else None

    def status(self) -> str:
        self.calls.append("status")
        state = "Enabled" if self.enabled else "Disabled"
        return f"Status: {state} for 0 days 01:02:03           Debug: Urgent\n"

    def load(self, path) -> str:
        self.calls.append("load")
        path = str(path)
        self.loaded_paths.append(path)
        self.loaded_texts.append(Path(path).read_text())
        if self.load_error is not None:
            raise EngineError("pfctl -F all -f failed", output=self.load_error, returncode=1)
        return "pfctl: Use of -f option, could result in flushing of rules\n"


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def make_engine():
    return FakeEngine


@pytest.fixture
def baseline_conf(tmp_path: Path) -> Path:
    path = tmp_path / "pf.conf"
    path.write_text('scrub-anchor "com.apple/*"\nanchor "com.apple/*"\n')
    return path


@pytest.fixture
def vpn_policy(baseline_conf: Path) -> Policy:
    return Policy(
        allow_private_network=True,
        allow_icmp=True,
        interfaces=("utun0",),
        destinations=("9.9.9.9", "2001:4860:4860::8888"),
        default_configuration_path=str(baseline_conf),
    )
