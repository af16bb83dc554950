"""Lock controller — sequences privileged pf state transitions.

Every mutating operation validates all preconditions before the engine is
asked to change anything. Nothing is tracked between invocations; the live
engine is queried each time.
"""

from __future__ import annotations

import enum
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

from netlock.errors import PreconditionError, ResourceError
from netlock.pf.compiler import compile_ruleset
from netlock.pf.engine import FirewallEngine, PfctlEngine
from netlock.policy.models import Policy

logger = logging.getLogger(__name__)

_ENABLED_MARKER = "status: enabled"


class LockState(enum.Enum):
    """Observed state of the firewall from this tool's point of view."""

    UNKNOWN = "unknown"
    FIREWALL_DISABLED_OR_ABSENT = "firewall-disabled-or-absent"
    LOCKED = "locked"
    RESTORED = "restored"


def _is_superuser() -> bool:
    return os.geteuid() == 0


class LockController:
    """Enable and disable the killswitch against a firewall engine."""

    def __init__(
        self,
        engine: FirewallEngine | None = None,
        is_superuser: Callable[[], bool] = _is_superuser,
    ) -> None:
        self.engine = engine if engine is not None else PfctlEngine()
        self._is_superuser = is_superuser

    def enable_lock(self, policy: Policy) -> LockState:
        """Replace the active ruleset with the lock ruleset for *policy*."""
        self._check_preconditions(policy)
        rules = compile_ruleset(policy)

        path = self._write_ruleset(rules)
        try:
            output = self.engine.load(path)
        except BaseException:
            # Keep the engine failure; a cleanup failure here is only logged.
            try:
                self._remove_ruleset(path)
            except ResourceError as e:
                logger.warning("%s", e)
            raise
        self._remove_ruleset(path)

        logger.debug("Engine output: %s", output.strip())
        logger.info(
            "Lock enabled with %d destination(s)", len(policy.destinations)
        )
        return LockState.LOCKED

    def disable_lock(self, policy: Policy) -> LockState:
        """Restore the baseline ruleset at ``policy.default_configuration_path``."""
        self._check_preconditions(policy)
        output = self.engine.load(policy.default_configuration_path)
        logger.debug("Engine output: %s", output.strip())
        logger.info("Lock disabled, loaded %s", policy.default_configuration_path)
        return LockState.RESTORED

    def build_lock_rules(self, policy: Policy) -> str:
        """Return the ruleset text without touching the engine."""
        return compile_ruleset(policy)

    def is_enabled(self) -> bool:
        """Whether the engine reports itself administratively enabled."""
        return _ENABLED_MARKER in self.engine.status().lower()

    def probe(self) -> LockState:
        """Non-mutating state query for status reporting."""
        if self.engine.locate() is None:
            return LockState.FIREWALL_DISABLED_OR_ABSENT
        if not self.is_enabled():
            return LockState.FIREWALL_DISABLED_OR_ABSENT
        return LockState.UNKNOWN

    def _check_preconditions(self, policy: Policy) -> None:
        if self.engine.locate() is None:
            raise PreconditionError(f"{self.engine.name} not found on PATH")
        if not self._is_superuser():
            raise PreconditionError(f"root privileges are required for {self.engine.name}")
        if not Path(policy.default_configuration_path).exists():
            raise PreconditionError(
                f"default configuration {policy.default_configuration_path} does not exist"
            )
        # TOCTOU: pf may be disabled between this check and the load call.
        if not self.is_enabled():
            raise PreconditionError("packet filter is disabled")

    @staticmethod
    def _write_ruleset(rules: str) -> str:
        """Write *rules* to a new 0600 temp file and return its path."""
        try:
            fd, path = tempfile.mkstemp(prefix="netlock.", suffix=".conf")
        except OSError as e:
            raise ResourceError(f"cannot create temporary ruleset file: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(rules)
        except OSError as e:
            try:
                LockController._remove_ruleset(path)
            except ResourceError as cleanup:
                logger.warning("%s", cleanup)
            raise ResourceError(f"cannot write {path}: {e}") from e

        logger.debug("Wrote lock ruleset to %s", path)
        return path

    @staticmethod
    def _remove_ruleset(path: str) -> None:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise ResourceError(f"cannot remove {path}: {e}") from e
