"""Firewall engine capability — the pfctl binary behind a small protocol."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Protocol

from netlock.errors import EngineError, PreconditionError

logger = logging.getLogger(__name__)

# pfctl -s info can stall when pf is wedged. Loads are never timed out: killing
# pfctl between the flush and the load would leave pf with no rules at all.
_STATUS_TIMEOUT = 10


class FirewallEngine(Protocol):
    """What the lock controller needs from a firewall engine."""

    name: str

    def locate(self) -> str | None:
        """Resolve the control binary. Returns its path, or None if absent."""
        ...

    def status(self) -> str:
        """Return the engine's textual status report."""
        ...

    def load(self, path: str | Path) -> str:
        """Flush all engine state, then load the ruleset at *path*.

        Returns the combined output. Raises EngineError on failure.
        """
        ...


class PfctlEngine:
    """Drives pf through ``pfctl``.

    The binary is looked up on PATH by :meth:`locate`; the result is held
    only for the lifetime of this object.
    """

    def __init__(self, binary: str = "pfctl") -> None:
        self.name = binary
        self._binary = binary
        self._ctl_path: str | None = None

    def locate(self) -> str | None:
        self._ctl_path = shutil.which(self._binary)
        logger.debug("Resolved %s to %s", self._binary, self._ctl_path)
        return self._ctl_path

    def status(self) -> str:
        return self._exec(["-s", "info"], timeout=_STATUS_TIMEOUT)

    def load(self, path: str | Path) -> str:
        return self._exec(["-F", "all", "-f", str(path)])

    def _exec(self, args: list[str], timeout: int | None = None) -> str:
        ctl_path = self._ctl_path or self.locate()
        if ctl_path is None:
            raise PreconditionError(f"{self._binary} not found on PATH")

        cmd = [ctl_path, *args]
        logger.debug("Executing: %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise EngineError(
                f"{' '.join(cmd)} timed out after {timeout}s",
                output=_decode(e.output),
            ) from e
        except OSError as e:
            raise EngineError(f"failed to run {ctl_path}: {e}") from e

        if proc.returncode != 0:
            raise EngineError(
                f"{' '.join(cmd)} exited with status {proc.returncode}",
                output=proc.stdout,
                returncode=proc.returncode,
            )
        return proc.stdout


def _decode(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output
