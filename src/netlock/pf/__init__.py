"""pf ruleset compilation and lock control."""

from netlock.pf.compiler import compile_ruleset
from netlock.pf.controller import LockController, LockState
from netlock.pf.engine import FirewallEngine, PfctlEngine

__all__ = [
    "FirewallEngine",
    "LockController",
    "LockState",
    "PfctlEngine",
    "compile_ruleset",
]
