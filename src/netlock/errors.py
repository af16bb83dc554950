"""Exception hierarchy. Every error here is fatal to the invocation."""

from __future__ import annotations


class NetlockError(Exception):
    """Base exception for all netlock failures.

    ``step`` names the stage that failed and is shown to the user
    alongside the message.
    """

    step = "netlock"

    def __init__(self, message: str, *, step: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if step is not None:
            self.step = step

    def __str__(self) -> str:
        return f"{self.step}: {self.message}"


class DestinationError(NetlockError):
    """A destination input could not be read or resolved."""

    step = "destinations"


class PreconditionError(NetlockError):
    """A check that must pass before the firewall is touched failed."""

    step = "precondition"


class EngineError(NetlockError):
    """The firewall control binary exited with a non-zero status."""

    step = "engine"

    def __init__(
        self,
        message: str,
        *,
        output: str = "",
        returncode: int | None = None,
        step: str | None = None,
    ) -> None:
        super().__init__(message, step=step)
        self.output = output
        self.returncode = returncode


class ResourceError(NetlockError):
    """The temporary ruleset file could not be created, written or removed."""

    step = "resource"
